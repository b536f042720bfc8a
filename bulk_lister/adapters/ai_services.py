"""
AI Service Adapters
===================
Clients for the three AI edge functions used by the bulk pipeline:

- GroupingAdapter: partitions a batch of photos into candidate products
- AnalysisAdapter: extracts listing attributes and a price estimate for one group
- EnhancementAdapter: removes the background from a cover image

These adapters only speak the wire contract. Fallbacks and fan-out live in
bulk_lister.ai and bulk_lister.enhancer.
"""

import os
from typing import List, Dict, Any, Optional

from .base_adapter import ServiceAdapter, MalformedResponseError
from ..schema.bulk_listing import PhotoGroup


def _require_env() -> tuple:
    base_url = os.getenv("BULK_LISTER_FUNCTIONS_URL")
    token = os.getenv("BULK_LISTER_ACCESS_TOKEN")
    if not all([base_url, token]):
        raise ValueError(
            "AI services not configured. "
            "Please set BULK_LISTER_FUNCTIONS_URL and BULK_LISTER_ACCESS_TOKEN"
        )
    return base_url, token


def _unique_id(candidate: str, taken: set) -> str:
    # Products, selections and analyses are keyed by group id
    unique, suffix = candidate, 2
    while unique in taken:
        unique = f"{candidate}-{suffix}"
        suffix += 1
    return unique


class GroupingAdapter(ServiceAdapter):
    """Client for the photo grouping service"""

    service_name = "Grouping service"
    endpoint = "/functions/v1/group-photos-ai"

    def group_photos(self, image_urls: List[str]) -> List[PhotoGroup]:
        """
        Ask the service which photos belong together.

        Raises:
            ServiceError: Any failure, including a body that is not a valid grouping
        """
        body = self._post_json({"imageUrls": image_urls})
        return self.parse_groups(body, len(image_urls))

    def parse_groups(self, body: Dict[str, Any], photo_count: int) -> List[PhotoGroup]:
        raw_groups = body.get("groups")
        if not isinstance(raw_groups, list) or not raw_groups:
            raise MalformedResponseError(f"{self.service_name} returned no groups")

        groups = []
        taken = set()
        for position, raw in enumerate(raw_groups):
            if not isinstance(raw, dict):
                raise MalformedResponseError(f"{self.service_name} group {position} is not an object")

            indexes = raw.get("photoIndexes")
            if not isinstance(indexes, list) or not indexes:
                raise MalformedResponseError(f"{self.service_name} group {position} has no photos")

            ordered = []
            for idx in indexes:
                if isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx < photo_count:
                    raise MalformedResponseError(
                        f"{self.service_name} group {position} references photo {idx!r}"
                    )
                if idx not in ordered:
                    ordered.append(idx)

            confidence = raw.get("confidence", 50)
            if not isinstance(confidence, (int, float)):
                confidence = 50

            group_id = _unique_id(str(raw.get("id") or f"group-{position + 1}"), taken)
            taken.add(group_id)

            groups.append(PhotoGroup(
                id=group_id,
                photo_indexes=ordered,
                suggested_name=str(raw.get("suggestedName") or f"Product {position + 1}"),
                confidence=int(max(0, min(100, confidence))),
            ))
        return groups

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "GroupingAdapter":
        base_url, token = _require_env()
        return cls(base_url, token, timeout=timeout)


class AnalysisAdapter(ServiceAdapter):
    """Client for the listing analysis service"""

    service_name = "Analysis service"
    endpoint = "/functions/v1/analyze-listing-ai"

    def analyze(self, image_urls: List[str], user_hints: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Analyze the photos of one product.

        Returns:
            Raw analysis dictionary (brand, model, model_year, item_type,
            bike_details, part_details, apparel_details, condition_rating,
            price_estimate {min_aud, max_aud}, ...)
        """
        body = self._post_json({"imageUrls": image_urls, "userHints": user_hints or {}})
        analysis = body.get("analysis")
        if not isinstance(analysis, dict):
            raise MalformedResponseError(f"{self.service_name} response has no analysis")
        return analysis

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "AnalysisAdapter":
        base_url, token = _require_env()
        return cls(base_url, token, timeout=timeout)


class EnhancementAdapter(ServiceAdapter):
    """Client for the background removal service"""

    service_name = "Enhancement service"
    endpoint = "/functions/v1/enhance-product-image"

    def remove_background(self, image_url: str, correlation_id: str) -> str:
        """
        Remove the background from one image.

        Returns:
            URL of the enhanced image
        """
        body = self._post_json({"imageUrl": image_url, "listingId": correlation_id})
        data = body.get("data") or {}
        enhanced_url = data.get("url") or data.get("cardUrl") if isinstance(data, dict) else None
        if not enhanced_url:
            raise MalformedResponseError(f"{self.service_name} response has no image URL")
        return enhanced_url

    @classmethod
    def from_env(cls, timeout: Optional[float] = None) -> "EnhancementAdapter":
        base_url, token = _require_env()
        return cls(base_url, token, timeout=timeout)
