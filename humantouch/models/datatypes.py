"""Core datatypes shared across humantouch modules.

Responsibilities:
- Represent immutable records exchanged between detection, normalization,
  and batch stages.
- Keep hazard reports combinable by pure category-wise merging.

Key types:
- `HazardCategory`, `HazardMatch`, `HazardFinding`, `HazardReport`,
  `NormalizationResult`, `DocumentResult`, `FileTask`, `FileResult`,
  and `BatchSummary`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Literal, Mapping

if TYPE_CHECKING:
    from ..config import BatchConfig

FileStatus = Literal["skipped", "previewed", "written", "errored"]


class HazardCategory(str, Enum):
    """Closed set of hazard categories reported by detection."""

    INVISIBLE_BIDI = "invisible_bidi"
    SMART_QUOTES_IN_ATTRIBUTE = "smart_quotes_in_attribute"
    CONSECUTIVE_NBSP = "consecutive_nbsp"


@dataclass(frozen=True, slots=True)
class HazardMatch:
    """One hazard occurrence.

    Attributes:
        text: Matched substring.
        offset: Character index into the scanned string at detection time.
    """

    text: str
    offset: int


@dataclass(frozen=True, slots=True)
class HazardFinding:
    """Count and ordered matches for one hazard category."""

    matches: tuple[HazardMatch, ...] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        """Return the number of matches; always equal to `len(matches)`."""

        return len(self.matches)

    def merge(self, other: HazardFinding) -> HazardFinding:
        """Return a finding holding this finding's matches followed by `other`'s."""

        return HazardFinding(matches=self.matches + other.matches)


@dataclass(frozen=True, slots=True)
class HazardReport:
    """Per-category hazard findings, always covering every `HazardCategory`."""

    findings: Mapping[HazardCategory, HazardFinding]

    @classmethod
    def empty(cls) -> HazardReport:
        """Return the identity report with zero hazards in every category."""

        return cls(findings={category: HazardFinding() for category in HazardCategory})

    @classmethod
    def from_matches(
        cls, matches: Mapping[HazardCategory, tuple[HazardMatch, ...]]
    ) -> HazardReport:
        """Build a report from per-category matches, filling absent categories."""

        return cls(
            findings={
                category: HazardFinding(matches=tuple(matches.get(category, ())))
                for category in HazardCategory
            }
        )

    def __getitem__(self, category: HazardCategory) -> HazardFinding:
        """Return the finding for one category."""

        return self.findings[category]

    def merge(self, other: HazardReport) -> HazardReport:
        """Combine two reports by category-wise concatenation of matches."""

        return HazardReport(
            findings={
                category: self.findings[category].merge(other.findings[category])
                for category in HazardCategory
            }
        )

    def only(self, category: HazardCategory) -> HazardReport:
        """Return a report keeping one category's matches and emptying the rest."""

        return HazardReport.from_matches({category: self.findings[category].matches})

    def counts(self) -> dict[HazardCategory, int]:
        """Return hazard counts keyed by category in declaration order."""

        return {category: self.findings[category].count for category in HazardCategory}


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Output of one plain-text normalization call.

    Attributes:
        text: Normalized text.
        change_count: Number of individual substitutions applied.
        hazards: Hazards detected on the original input.
    """

    text: str
    change_count: int
    hazards: HazardReport


@dataclass(frozen=True, slots=True)
class DocumentResult:
    """Output of one markup normalization call.

    Attributes:
        markup: Serialized normalized markup (or normalized plain text on fallback).
        change_count: Total substitutions across text nodes and attributes.
        hazards: Accumulated hazards, including the raw-markup attribute-quote view.
        used_fallback: Whether parsing failed and the plain-text path was used.
    """

    markup: str
    change_count: int
    hazards: HazardReport
    used_fallback: bool = False


@dataclass(frozen=True, slots=True)
class FileTask:
    """Unit of work for the batch orchestrator."""

    path: str
    config: BatchConfig


@dataclass(frozen=True, slots=True)
class FileResult:
    """Terminal outcome of one file task.

    Attributes:
        path: File path as provided to the orchestrator.
        change_count: Computed number of substitutions (0 on error).
        hazards: Hazards found in the file (empty on error).
        was_written: Whether normalized content replaced the file.
        was_backed_up: Whether `<path>.bak` was created.
        error: Failure message, if the task errored.
        status: Terminal state (`skipped`, `previewed`, `written`, `errored`).
    """

    path: str
    change_count: int
    hazards: HazardReport
    was_written: bool = False
    was_backed_up: bool = False
    error: str | None = None
    status: FileStatus = "skipped"


@dataclass(frozen=True, slots=True)
class BatchSummary:
    """Aggregated outcome of one batch run, built once after all tasks finish."""

    total_files: int
    processed_count: int
    changed_count: int
    error_count: int
    total_changes: int
    hazard_totals: Mapping[HazardCategory, int]
    should_fail: bool
    success: bool
    results: tuple[FileResult, ...] = field(default_factory=tuple)
    message: str | None = None
