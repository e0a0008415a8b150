"""Hazard detection for risky character patterns.

Responsibilities:
- Scan raw text for invisible/bidirectional code points, smart quotes inside
  selected markup attributes, and runs of `&nbsp;` entities.
- Report per-category counts with match offsets, without modifying input.
"""

from __future__ import annotations

import re
from typing import Mapping, Pattern

from ..errors import require_text
from ..models.datatypes import HazardCategory, HazardMatch, HazardReport

INVISIBLE_BIDI_CHARS = (
    "\u200b\u200c\u200d\u200e\u200f"
    "\u202a\u202b\u202c\u202d\u202e"
    "\u2060\u2061\u2062\u2063\u2064\u2065\u2066\u2067\u2068\u2069"
    "\ufeff"
)
SMART_QUOTE_CHARS = "\u201c\u201d\u2018\u2019\u201a\u02bb\u02bc\u201e"

HAZARD_PATTERNS: Mapping[HazardCategory, Pattern[str]] = {
    HazardCategory.INVISIBLE_BIDI: re.compile(f"[{INVISIBLE_BIDI_CHARS}]"),
    HazardCategory.SMART_QUOTES_IN_ATTRIBUTE: re.compile(
        r"(?<![\w-])(?:content|data-[\w.:-]*|alt|title)\s*=\s*"
        rf"(?:\"[^\"]*[{SMART_QUOTE_CHARS}][^\"]*\"|'[^']*[{SMART_QUOTE_CHARS}][^']*')",
        re.IGNORECASE,
    ),
    HazardCategory.CONSECUTIVE_NBSP: re.compile(r"(?:&nbsp;\s*){2,}", re.IGNORECASE),
}


def detect_hazards(text: str) -> HazardReport:
    """Scan `text` independently for every hazard category.

    Raises:
        InvalidInputError: If `text` is not a string.
    """

    require_text("detect_hazards", text)
    return HazardReport.from_matches(
        {
            category: tuple(
                HazardMatch(text=match.group(0), offset=match.start())
                for match in pattern.finditer(text)
            )
            for category, pattern in HAZARD_PATTERNS.items()
        }
    )


def has_significant_hazards(report: HazardReport) -> bool:
    """Return whether any hazard category has a nonzero count."""

    return any(count > 0 for count in report.counts().values())


def total_hazard_count(report: HazardReport) -> int:
    """Return the sum of hazard counts across all categories."""

    return sum(report.counts().values())
