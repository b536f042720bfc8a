"""AI-assisted grouping, analysis and field normalization"""

from .grouping import group_photos, fallback_groups
from .analysis import analyze_groups
from .normalizer import (
    normalize_analysis,
    build_product,
    clean_ai_text,
    clean_phrase,
    clean_material,
    clean_wheel_size,
    clean_frame_size,
    price_from_estimate,
)

__all__ = [
    "group_photos",
    "fallback_groups",
    "analyze_groups",
    "normalize_analysis",
    "build_product",
    "clean_ai_text",
    "clean_phrase",
    "clean_material",
    "clean_wheel_size",
    "clean_frame_size",
    "price_from_estimate",
]
