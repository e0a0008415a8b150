"""Ordered character replacement tables.

Responsibilities:
- Declare safe and aggressive substitution tiers as plain data records.
- Keep every replacement output outside every rule pattern so one pass is final.

Rules are applied top to bottom; later rules see the output of earlier ones.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable, Literal, Pattern

from .hazards import INVISIBLE_BIDI_CHARS

RuleTier = Literal["safe", "aggressive"]
Replacement = str | Callable[[str], str]

_FULL_WIDTH_OFFSET = 0xFEE0


@dataclass(frozen=True, slots=True)
class ReplacementRule:
    """One ordered substitution.

    Attributes:
        name: Short identifier used in diagnostics and tests.
        pattern: Compiled matcher; each match is one counted change.
        replacement: Literal text, or a callable mapping matched text to its replacement.
        tier: `safe` (meaning-preserving) or `aggressive` (opt-in).
    """

    name: str
    pattern: Pattern[str]
    replacement: Replacement
    tier: RuleTier = "safe"

    def render(self, matched: str) -> str:
        """Return replacement text for one matched occurrence."""

        if callable(self.replacement):
            return self.replacement(matched)
        return self.replacement


def _shift_full_width(matched: str) -> str:
    """Map a full-width ASCII variant (U+FF01..U+FF5E) onto its ASCII code point."""

    return chr(ord(matched) - _FULL_WIDTH_OFFSET)


def _rule(
    name: str, pattern: str, replacement: Replacement, flags: int = 0
) -> ReplacementRule:
    return ReplacementRule(name=name, pattern=re.compile(pattern, flags), replacement=replacement)


def _aggressive(name: str, pattern: str, replacement: Replacement) -> ReplacementRule:
    return ReplacementRule(
        name=name,
        pattern=re.compile(pattern),
        replacement=replacement,
        tier="aggressive",
    )


_FRACTIONS = {
    "\u00bd": "1/2",
    "\u00bc": "1/4",
    "\u00be": "3/4",
    "\u2153": "1/3",
    "\u2154": "2/3",
    "\u2155": "1/5",
    "\u2156": "2/5",
    "\u2157": "3/5",
    "\u2158": "4/5",
    "\u2159": "1/6",
    "\u215a": "5/6",
    "\u215b": "1/8",
    "\u215c": "3/8",
    "\u215d": "5/8",
    "\u215e": "7/8",
}

SAFE_RULES: tuple[ReplacementRule, ...] = (
    _rule("double_smart_quotes", "[\u201c\u201d]", '"'),
    _rule("single_smart_quotes", "[\u2018\u2019\u201a\u02bb\u02bc]", "'"),
    _rule("low_double_quote", "\u201e", '"'),
    _rule("dashes", "[\u2010\u2013\u2014\u2212]", "-"),
    _rule("ellipsis", "\u2026", "..."),
    _rule(
        "special_spaces",
        "[\u00a0\u1680\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a\u202f\u3000]",
        " ",
    ),
    _rule("invisible_bidi", f"[{INVISIBLE_BIDI_CHARS}]", ""),
    _rule(
        "bullets",
        "[\u2022\u2023\u25e6\u00b7\u25aa\u25ab\u25cf\u25a0\u25a1\u2043]",
        "*",
    ),
    _rule("arrow_right", "\u2192", "->"),
    _rule("arrow_left", "\u2190", "<-"),
    _rule("arrow_up", "\u2191", "^"),
    _rule("arrow_down", "\u2193", "v"),
    # Check marks before the multiplication crosses.
    _rule("check_mark", "\u2713", "[ok]"),
    _rule("heavy_check_mark", "\u2714", "[OK]"),
    _rule("cross_mark", "\u274c", "[x]"),
    _rule("ballot_x", "[\u2717\u2718]", "[X]"),
    _rule("multiplication_x", "[\u2715\u2716]", "x"),
    # Full-width shifting runs before entities so a full-width `&nbsp;` is finished in one pass.
    _rule("full_width_ascii", "[\uff01-\uff5e]", _shift_full_width),
    _rule("entity_spaces", "&(?:nbsp|ensp|emsp|thinsp);", " ", re.IGNORECASE),
    _rule("entity_dashes", "&(?:mdash|ndash);", "-", re.IGNORECASE),
    _rule("entity_ellipsis", "&hellip;", "...", re.IGNORECASE),
    _rule("entity_single_quotes", "&(?:lsquo|rsquo);", "'", re.IGNORECASE),
    _rule("entity_double_quotes", "&(?:ldquo|rdquo);", '"', re.IGNORECASE),
    _rule("entity_bullets", "&(?:bull|middot);", "*", re.IGNORECASE),
    _rule("fractions", f"[{''.join(_FRACTIONS)}]", _FRACTIONS.__getitem__),
)

AGGRESSIVE_RULES: tuple[ReplacementRule, ...] = (
    _aggressive("multiplication_sign", "\u00d7", "x"),
    _aggressive("division_sign", "\u00f7", "/"),
    _aggressive("plus_minus", "\u00b1", "+/-"),
    _aggressive("degree", "\u00b0", "\u00ba"),
    _aggressive("euro", "\u20ac", "EUR"),
    _aggressive("pound", "\u00a3", "GBP"),
    _aggressive("yen", "\u00a5", "JPY"),
    _aggressive("cent", "\u00a2", "cent"),
    _aggressive("guillemets", "[\u00ab\u00bb]", '"'),
    _aggressive("single_guillemets", "[\u2039\u203a]", "'"),
)

DEFAULT_RULES: tuple[ReplacementRule, ...] = SAFE_RULES + AGGRESSIVE_RULES
