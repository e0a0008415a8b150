"""Plain-text normalization stage.

Responsibilities:
- Apply the ordered safe (and optionally aggressive) replacement tables.
- Collapse `&nbsp;` runs flagged by hazard detection before the tables run.
- Count every rewritten occurrence so a second pass over the output reports zero.
"""

from __future__ import annotations

from typing import Iterable

from ..errors import require_text
from ..models.datatypes import HazardCategory, NormalizationResult
from .hazards import HAZARD_PATTERNS, detect_hazards
from .replacements import DEFAULT_RULES, ReplacementRule

_COLLAPSED_NBSP = "&nbsp;"


class ReplacementEngine:
    """Interpret an ordered rule table over plain text."""

    def __init__(self, rules: Iterable[ReplacementRule] | None = None) -> None:
        """Initialize with custom rules or the default safe + aggressive tables."""

        selected = tuple(DEFAULT_RULES if rules is None else rules)
        self.safe_rules = tuple(rule for rule in selected if rule.tier == "safe")
        self.aggressive_rules = tuple(rule for rule in selected if rule.tier == "aggressive")

    def normalize(self, text: str, aggressive: bool = False) -> NormalizationResult:
        """Normalize `text` and report the change count and hazards of the original.

        Raises:
            InvalidInputError: If `text` is not a string.
        """

        require_text("normalize", text)
        hazards = detect_hazards(text)

        current = text
        changes = 0
        nbsp_runs = hazards[HazardCategory.CONSECUTIVE_NBSP].count
        if nbsp_runs > 0:
            current = HAZARD_PATTERNS[HazardCategory.CONSECUTIVE_NBSP].sub(
                _COLLAPSED_NBSP, current
            )
            changes += nbsp_runs

        current, applied = _apply_rules(current, self.safe_rules)
        changes += applied
        if aggressive:
            current, applied = _apply_rules(current, self.aggressive_rules)
            changes += applied

        return NormalizationResult(text=current, change_count=changes, hazards=hazards)


def _apply_rules(text: str, rules: Iterable[ReplacementRule]) -> tuple[str, int]:
    """Apply rules left to right, returning rewritten text and total match count."""

    changes = 0
    for rule in rules:
        text, count = rule.pattern.subn(lambda match: rule.render(match.group(0)), text)
        changes += count
    return text, changes


_DEFAULT_ENGINE = ReplacementEngine()


def normalize_text(text: str, aggressive: bool = False) -> NormalizationResult:
    """Normalize plain text with the default rule tables."""

    return _DEFAULT_ENGINE.normalize(text, aggressive=aggressive)
