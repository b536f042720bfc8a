"""
AI Field Normalizer
===================
Turns raw analysis output into ProductFormData.

AI attribute values come back hedged ("maybe carbon or aluminium"),
ambiguous ("various sizes") or made up ("unknown"). Sellers should see a
blank field rather than a guess dressed up as a fact, so:

- Uncertain values ("unknown", "n/a", "unclear", "various", "any", ...) become ""
- Leading hedges ("maybe", "approximately", "about", ...) and trailing
  hedges ("-ish", "or so") are stripped
- "X or Y" becomes "X/Y"
- Attribute values are title-cased per word, and per segment inside
  hyphen/slash compounds ("carbon-fibre/alloy" -> "Carbon-Fibre/Alloy")
- Single-valued fields (material, wheel size) keep only the first option
- Price is the rounded midpoint of the estimate range, or 0 if there is none

Everything here is pure text transformation.
"""

import math
import re
from typing import Any, Dict, List, Optional, Tuple

from ..schema.bulk_listing import (
    ConditionRating,
    ItemType,
    PhotoGroup,
    Product,
    ProductFormData,
    UploadedPhoto,
)

UNCERTAIN_MARKERS = (
    "unknown",
    "not specified",
    "n/a",
    "unclear",
    "cannot determine",
    "various",
    "all size",
)
UNCERTAIN_EXACT = ("any", "none", "?")

# Markers only count as whole tokens, so "Carbon/Aluminium" is not "n/a"
UNCERTAIN_PATTERN = re.compile(
    r"(?<![a-z0-9])(?:" + "|".join(re.escape(m) for m in UNCERTAIN_MARKERS) + r")s?(?![a-z0-9])"
)

HEDGE_PREFIX = re.compile(
    r"^(?:maybe|possibly|likely|probably|perhaps|approximately|approx\.?|about|around|roughly)\s+",
    re.IGNORECASE,
)
HEDGE_SUFFIX = re.compile(r"(?:\s*-\s*ish|\s+ish|\s+or so|\s+roughly)\s*$", re.IGNORECASE)
OR_ALTERNATIVE = re.compile(r"\s+or\s+", re.IGNORECASE)
COMPOUND_SEPARATOR = re.compile(r"([-/])")


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return ""
    return value.strip()


def is_uncertain(text: str) -> bool:
    lower = text.strip().lower()
    if not lower:
        return True
    if lower in UNCERTAIN_EXACT:
        return True
    return UNCERTAIN_PATTERN.search(lower) is not None


def clean_ai_text(value: Any) -> str:
    """Trimmed text, or "" if the AI was not sure"""
    text = _as_text(value)
    if not text or is_uncertain(text):
        return ""
    return text


def clean_free_text(value: Any) -> str:
    """Descriptions and notes: only blank out pure placeholders"""
    text = _as_text(value)
    if text.lower().rstrip(".") in UNCERTAIN_MARKERS + UNCERTAIN_EXACT:
        return ""
    return text


def strip_hedges(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = HEDGE_PREFIX.sub("", text).strip()
        text = HEDGE_SUFFIX.sub("", text).strip()
    return text


def _title_segment(segment: str) -> str:
    # Acronyms and size codes (SRAM, XL) keep their casing
    if segment.isupper() or not segment:
        return segment
    return segment[0].upper() + segment[1:].lower()


def title_case(text: str) -> str:
    words = []
    for word in text.split():
        parts = COMPOUND_SEPARATOR.split(word)
        words.append("".join(
            part if COMPOUND_SEPARATOR.fullmatch(part) else _title_segment(part)
            for part in parts
        ))
    return " ".join(words)


def clean_phrase(value: Any) -> str:
    """Full cleanup for multi-word attribute values"""
    text = clean_ai_text(value)
    if not text:
        return ""
    text = strip_hedges(text)
    if not text or is_uncertain(text):
        return ""
    return title_case(OR_ALTERNATIVE.sub("/", text))


def clean_material(value: Any) -> str:
    """First material only, capitalised ("carbon fiber" -> "Carbon")"""
    text = strip_hedges(clean_ai_text(value))
    if not text:
        return ""
    first = re.split(r"[\s/]+", text)[0]
    return first[:1].upper() + first[1:].lower()


def clean_wheel_size(value: Any) -> str:
    """First wheel size only ('29" / 27.5"' -> '29"')"""
    text = strip_hedges(clean_ai_text(value))
    if not text:
        return ""
    text = OR_ALTERNATIVE.sub("/", text)
    return text.split("/")[0].strip()


def clean_frame_size(value: Any) -> str:
    return clean_phrase(value)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.replace(",", "").replace("$", "").strip())
        except ValueError:
            return None
    return None


def price_from_estimate(estimate: Any) -> Tuple[int, int]:
    """
    Price and reference price from a {min, max} estimate.

    Returns:
        (midpoint rounded to whole units, upper bound) - both 0 if absent
    """
    if not isinstance(estimate, dict):
        return 0, 0

    low = _number(estimate.get("min_aud", estimate.get("min")))
    high = _number(estimate.get("max_aud", estimate.get("max")))

    if low is not None and high is not None:
        price = round_half_up((low + high) / 2)
    elif low is not None or high is not None:
        price = round_half_up(low if low is not None else high)
    else:
        return 0, 0

    rrp = round_half_up(high) if high is not None else 0
    return max(price, 0), max(rrp, 0)


def build_title(parts: List[str], fallback: str) -> str:
    present = [p for p in parts if p]
    return " ".join(present) if present else fallback


def normalize_analysis(analysis: Optional[Dict[str, Any]], suggested_name: str) -> ProductFormData:
    """
    Map one raw analysis result into form data.

    A None analysis yields empty form data titled with the suggested name.
    """
    if not analysis:
        return ProductFormData(title=suggested_name or "")

    bike = analysis.get("bike_details") or {}
    part = analysis.get("part_details") or {}
    apparel = analysis.get("apparel_details") or {}

    brand = clean_ai_text(analysis.get("brand"))
    model = clean_ai_text(analysis.get("model"))
    model_year = clean_ai_text(analysis.get("model_year"))
    price, rrp = price_from_estimate(analysis.get("price_estimate"))

    return ProductFormData(
        title=build_title([brand, model, model_year], suggested_name or ""),
        description=clean_free_text(analysis.get("description")),
        seller_notes=clean_free_text(analysis.get("seller_notes")),
        brand=brand,
        model=model,
        model_year=model_year,
        item_type=ItemType.parse(analysis.get("item_type")),
        bike_type=clean_phrase(bike.get("bike_type")),
        frame_size=clean_frame_size(bike.get("frame_size")),
        frame_material=clean_material(bike.get("frame_material")),
        groupset=clean_phrase(bike.get("groupset")),
        wheel_size=clean_wheel_size(bike.get("wheel_size")),
        color_primary=clean_phrase(bike.get("color_primary")),
        part_type_detail=clean_phrase(part.get("part_category") or part.get("part_type")),
        compatibility_notes=clean_free_text(part.get("compatibility")),
        material=clean_material(part.get("material") or apparel.get("material")),
        size=clean_phrase(apparel.get("size")),
        gender_fit=clean_phrase(apparel.get("gender_fit")),
        condition_rating=ConditionRating.parse(analysis.get("condition_rating")),
        condition_details=clean_free_text(
            analysis.get("condition_notes") or analysis.get("condition_details")
        ),
        price=price,
        original_rrp=rrp,
    )


def build_product(
    group: PhotoGroup,
    photos: List[UploadedPhoto],
    analysis: Optional[Dict[str, Any]],
) -> Product:
    """Seed a Product from a photo group and its (possibly missing) analysis"""
    group_photos = [photos[idx] for idx in group.photo_indexes]
    form_data = normalize_analysis(analysis, group.suggested_name)
    return Product(
        group_id=group.id,
        image_urls=[p.url for p in group_photos],
        thumbnail_urls=[p.preview_url for p in group_photos],
        suggested_name=form_data.title or group.suggested_name,
        ai_data=analysis,
        form_data=form_data,
    )
