"""Text normalization components.

This package provides hazard detection, ordered replacement tables, the
plain-text replacement engine, and markup-aware document normalization.
"""

from .document import DocumentNormalizer, normalize_html
from .hazards import detect_hazards, has_significant_hazards, total_hazard_count
from .markup import ExclusionZones, ParsedMarkup, ParseFallback, SoupMarkupBackend
from .normalizer import ReplacementEngine, normalize_text
from .replacements import AGGRESSIVE_RULES, DEFAULT_RULES, SAFE_RULES, ReplacementRule

__all__ = [
    "AGGRESSIVE_RULES",
    "DEFAULT_RULES",
    "SAFE_RULES",
    "DocumentNormalizer",
    "ExclusionZones",
    "ParseFallback",
    "ParsedMarkup",
    "ReplacementEngine",
    "ReplacementRule",
    "SoupMarkupBackend",
    "detect_hazards",
    "has_significant_hazards",
    "normalize_html",
    "normalize_text",
    "total_hazard_count",
]
