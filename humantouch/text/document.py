"""Markup-aware normalization stage.

Responsibilities:
- Normalize text nodes and selected attribute values of a markup document,
  leaving excluded subtrees untouched.
- Fall back to plain-text normalization when the backend cannot parse input.
- Report the raw-markup attribute smart-quote scan on top of per-node hazards.
"""

from __future__ import annotations

from loguru import logger

from ..config import NormalizerConfig
from ..errors import require_text
from ..models.datatypes import DocumentResult, HazardCategory, HazardReport
from .hazards import detect_hazards
from .markup import (
    ExclusionZones,
    MarkupBackend,
    MarkupSlot,
    MarkupTree,
    ParseFallback,
    SoupMarkupBackend,
)
from .normalizer import ReplacementEngine


class DocumentNormalizer:
    """Walk a parsed document and normalize its in-scope text."""

    def __init__(
        self,
        backend: MarkupBackend | None = None,
        engine: ReplacementEngine | None = None,
    ) -> None:
        """Initialize with an optional markup backend and replacement engine."""

        self.backend = backend or SoupMarkupBackend()
        self.engine = engine or ReplacementEngine()

    def normalize_document(
        self, markup: str, config: NormalizerConfig | None = None
    ) -> DocumentResult:
        """Normalize `markup` and return serialized output, change count, and hazards.

        Text nodes are visited in document order, then each configured attribute
        name in configured order. Attribute smart quotes found by scanning the raw
        markup are added on top of the per-node findings, so a value can be counted
        once from the raw scan and again from its own normalization.

        Raises:
            InvalidInputError: If `markup` is not a string.
        """

        require_text("normalize_document", markup)
        resolved = config or NormalizerConfig()
        raw_attribute_quotes = detect_hazards(markup).only(
            HazardCategory.SMART_QUOTES_IN_ATTRIBUTE
        )

        outcome = self.backend.parse(markup)
        if isinstance(outcome, ParseFallback):
            return self._plain_text_fallback(markup, resolved, outcome.reason)

        try:
            return self._normalize_tree(outcome.tree, resolved, raw_attribute_quotes)
        except RecursionError as exc:
            return self._plain_text_fallback(markup, resolved, f"RecursionError: {exc}")

    def _normalize_tree(
        self, tree: MarkupTree, config: NormalizerConfig, raw_attribute_quotes: HazardReport
    ) -> DocumentResult:
        zones = ExclusionZones.from_selectors(config.excluded_zones)
        changes = 0
        hazards = HazardReport.empty()

        for slot in tree.text_nodes(zones):
            applied, found = self._normalize_slot(slot, config.aggressive)
            changes += applied
            hazards = hazards.merge(found)

        for name in config.normalized_attributes:
            for slot in tree.attribute_values(name, zones):
                applied, found = self._normalize_slot(slot, config.aggressive)
                changes += applied
                hazards = hazards.merge(found)

        return DocumentResult(
            markup=tree.serialize(),
            change_count=changes,
            hazards=hazards.merge(raw_attribute_quotes),
        )

    def _plain_text_fallback(
        self, markup: str, config: NormalizerConfig, reason: str
    ) -> DocumentResult:
        logger.warning("Markup parse failed; normalizing as plain text. reason={}", reason)
        result = self.engine.normalize(markup, aggressive=config.aggressive)
        return DocumentResult(
            markup=result.text,
            change_count=result.change_count,
            hazards=result.hazards,
            used_fallback=True,
        )

    def _normalize_slot(self, slot: MarkupSlot, aggressive: bool) -> tuple[int, HazardReport]:
        """Normalize one slot in place and return its change count and hazards."""

        original = slot.value
        result = self.engine.normalize(original, aggressive=aggressive)
        if result.text != original:
            slot.replace(result.text)
        return result.change_count, result.hazards


_DEFAULT_NORMALIZER = DocumentNormalizer()


def normalize_html(markup: str, config: NormalizerConfig | None = None) -> DocumentResult:
    """Normalize markup with the default BeautifulSoup backend and rule tables."""

    return _DEFAULT_NORMALIZER.normalize_document(markup, config)
