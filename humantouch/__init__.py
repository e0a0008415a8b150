"""Top-level package for humantouch.

This package normalizes typographic artifacts (smart quotes, special dashes,
invisible and bidirectional characters, non-standard spaces, entity
punctuation) in plain text and HTML, and flags risky character hazards. The
batch entry point is `BatchOrchestrator`; `humanize` and `humanize_html` are
one-call conveniences.
"""

from __future__ import annotations

from .config import BatchConfig, NormalizerConfig
from .errors import CommandStageError, InvalidInputError
from .models.datatypes import (
    BatchSummary,
    DocumentResult,
    FileResult,
    HazardCategory,
    HazardReport,
    NormalizationResult,
)
from .pipeline import BatchOrchestrator
from .text.document import DocumentNormalizer, normalize_html
from .text.hazards import detect_hazards
from .text.normalizer import ReplacementEngine, normalize_text


def humanize(text: str, aggressive: bool = False) -> str:
    """Return `text` with typographic artifacts replaced by plain ASCII forms."""

    return normalize_text(text, aggressive=aggressive).text


def humanize_html(markup: str, aggressive: bool = False) -> str:
    """Return `markup` with its text nodes and text attributes normalized."""

    return normalize_html(markup, NormalizerConfig(aggressive=aggressive)).markup


__all__ = [
    "BatchConfig",
    "BatchOrchestrator",
    "BatchSummary",
    "CommandStageError",
    "DocumentNormalizer",
    "DocumentResult",
    "FileResult",
    "HazardCategory",
    "HazardReport",
    "InvalidInputError",
    "NormalizationResult",
    "NormalizerConfig",
    "ReplacementEngine",
    "__version__",
    "detect_hazards",
    "humanize",
    "humanize_html",
    "normalize_html",
    "normalize_text",
]

__version__ = "0.1.0"
