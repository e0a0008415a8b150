"""Immutable records shared across humantouch stages."""

from .datatypes import (
    BatchSummary,
    DocumentResult,
    FileResult,
    FileTask,
    HazardCategory,
    HazardFinding,
    HazardMatch,
    HazardReport,
    NormalizationResult,
)

__all__ = [
    "BatchSummary",
    "DocumentResult",
    "FileResult",
    "FileTask",
    "HazardCategory",
    "HazardFinding",
    "HazardMatch",
    "HazardReport",
    "NormalizationResult",
]
