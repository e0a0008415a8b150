"""Markup parsing backend for document normalization.

Responsibilities:
- Define the capability interface the document normalizer walks: parse into a
  tree, iterate in-scope text nodes and attribute values, serialize back.
- Implement it on BeautifulSoup's `html.parser` tree builder while keeping
  entity references, attribute name case, and attribute order as written.

Key types:
- `MarkupBackend`, `MarkupTree`, `MarkupSlot`: capability protocols.
- `ParsedMarkup` / `ParseFallback`: tagged parse outcome.
- `ExclusionZones`: compiled `tag` / `[attribute]` selectors.
- `SoupMarkupBackend`: default backend.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Iterable, Iterator, Protocol

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString
from bs4.exceptions import ParserRejectedMarkup
from bs4.formatter import HTMLFormatter

# Private-use code points that stand in for `&` while the parser runs, so entity
# references reach the tree (and the output) exactly as written.
_AMPERSAND_PLACEHOLDERS = ("\ue000", "\ue001", "\ue002", "\uf8fe", "\uf8ff")

_TAG_OPEN_RE = re.compile(r"<[^\s/>]+")
_SOURCE_ATTRIBUTE_RE = re.compile(
    r"""\s*([^\s/>"'=]+)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+))?"""
)


class MarkupSlot(Protocol):
    """A rewritable text value inside a parsed tree."""

    @property
    def value(self) -> str:
        """Return the current text value."""

    def replace(self, value: str) -> None:
        """Replace the text value in the tree."""


class MarkupTree(Protocol):
    """Traversable parsed document."""

    def text_nodes(self, zones: ExclusionZones) -> Iterator[MarkupSlot]:
        """Yield text nodes in document order, skipping excluded subtrees."""

    def attribute_values(self, name: str, zones: ExclusionZones) -> Iterator[MarkupSlot]:
        """Yield values of attribute `name` on elements outside excluded subtrees."""

    def serialize(self) -> str:
        """Render the tree back to markup text."""


@dataclass(frozen=True, slots=True)
class ParsedMarkup:
    """Successful parse outcome."""

    tree: MarkupTree


@dataclass(frozen=True, slots=True)
class ParseFallback:
    """Parse outcome asking the caller to treat the input as plain text."""

    reason: str


ParseOutcome = ParsedMarkup | ParseFallback


class MarkupBackend(Protocol):
    """Parser capability consumed by the document normalizer."""

    def parse(self, markup: str) -> ParseOutcome:
        """Parse markup into a tree, or return a fallback outcome without raising."""


@dataclass(frozen=True, slots=True)
class ExclusionZones:
    """Element names and attribute names that mark never-rewritten subtrees."""

    tag_names: frozenset[str]
    attribute_names: frozenset[str]

    @classmethod
    def from_selectors(cls, selectors: Iterable[str]) -> ExclusionZones:
        """Compile `tag` and `[attribute]` selectors (case-insensitive)."""

        tag_names: set[str] = set()
        attribute_names: set[str] = set()
        for selector in selectors:
            token = selector.strip()
            if token.startswith("[") and token.endswith("]"):
                attribute_names.add(token[1:-1].strip().lower())
            elif token:
                tag_names.add(token.lower())
        return cls(tag_names=frozenset(tag_names), attribute_names=frozenset(attribute_names))

    def contains(self, tag: Tag) -> bool:
        """Return whether `tag` itself opens an excluded subtree."""

        if tag.name.lower() in self.tag_names:
            return True
        return any(str(key).lower() in self.attribute_names for key in tag.attrs)


class _SourceOrderFormatter(HTMLFormatter):
    """Emit attributes in source order without entity substitution."""

    def attributes(self, tag: Tag):  # type: ignore[override]
        if tag.attrs is None:
            return []
        return list(tag.attrs.items())


_SOURCE_FORMATTER = _SourceOrderFormatter(
    entity_substitution=None,
    void_element_close_prefix="",
)


@dataclass(slots=True)
class _TextNodeSlot:
    node: NavigableString
    placeholder: str

    @property
    def value(self) -> str:
        return str(self.node).replace(self.placeholder, "&")

    def replace(self, value: str) -> None:
        # Angle brackets stay character data; `&` is already held by the placeholder.
        protected = value.replace("&", self.placeholder)
        protected = protected.replace("<", f"{self.placeholder}lt;").replace(
            ">", f"{self.placeholder}gt;"
        )
        replacement = type(self.node)(protected)
        self.node.replace_with(replacement)
        self.node = replacement


@dataclass(slots=True)
class _AttributeSlot:
    tag: Tag
    key: str
    placeholder: str

    @property
    def value(self) -> str:
        return str(self.tag.attrs[self.key]).replace(self.placeholder, "&")

    def replace(self, value: str) -> None:
        self.tag.attrs[self.key] = value.replace("&", self.placeholder)


class SoupMarkupTree:
    """`MarkupTree` over a BeautifulSoup document parsed with a placeholder for `&`."""

    def __init__(self, soup: BeautifulSoup, placeholder: str) -> None:
        """Wrap a parsed soup and the placeholder that replaced `&` in its source."""

        self._soup = soup
        self._placeholder = placeholder

    def text_nodes(self, zones: ExclusionZones) -> Iterator[MarkupSlot]:
        """Yield plain text nodes outside excluded subtrees, in document order."""

        for node in _walk_text_nodes(self._soup, zones):
            yield _TextNodeSlot(node=node, placeholder=self._placeholder)

    def attribute_values(self, name: str, zones: ExclusionZones) -> Iterator[MarkupSlot]:
        """Yield non-empty values of `name` (case-insensitive) outside excluded subtrees."""

        wanted = name.lower()
        for tag in _walk_elements(self._soup, zones):
            for key in list(tag.attrs):
                if str(key).lower() == wanted and tag.attrs[key]:
                    yield _AttributeSlot(tag=tag, key=key, placeholder=self._placeholder)

    def serialize(self) -> str:
        """Render markup with original entity references restored."""

        return self._soup.decode(formatter=_SOURCE_FORMATTER).replace(self._placeholder, "&")


class SoupMarkupBackend:
    """Default `MarkupBackend` built on BeautifulSoup's `html.parser` builder."""

    def parse(self, markup: str) -> ParseOutcome:
        """Parse `markup`; rejected or unprotectable markup becomes a fallback outcome."""

        placeholder = next(
            (candidate for candidate in _AMPERSAND_PLACEHOLDERS if candidate not in markup),
            None,
        )
        if placeholder is None:
            return ParseFallback(reason="markup already uses every ampersand placeholder")

        protected = markup.replace("&", placeholder)
        try:
            soup = BeautifulSoup(protected, "html.parser", multi_valued_attributes=None)
            _restore_attribute_case(soup, protected)
        except ParserRejectedMarkup as exc:
            return ParseFallback(reason=str(exc))
        except (RecursionError, ValueError, AssertionError) as exc:
            return ParseFallback(reason=f"{type(exc).__name__}: {exc}")

        return ParsedMarkup(tree=SoupMarkupTree(soup, placeholder))


def _walk(root: Tag, zones: ExclusionZones) -> Iterator[PageElement]:
    """Yield descendants of `root` in document order, pruning excluded subtrees.

    Walks with an explicit stack of child snapshots, so nesting depth is not
    bounded by the interpreter recursion limit and replacing a visited text node
    does not disturb the walk.
    """

    stack = [iter(list(root.contents))]
    while stack:
        child = next(stack[-1], None)
        if child is None:
            stack.pop()
            continue
        if isinstance(child, Tag):
            if zones.contains(child):
                continue
            yield child
            stack.append(iter(list(child.contents)))
        else:
            yield child


def _walk_text_nodes(root: Tag, zones: ExclusionZones) -> Iterator[NavigableString]:
    for node in _walk(root, zones):
        if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
            yield node


def _walk_elements(root: Tag, zones: ExclusionZones) -> Iterator[Tag]:
    for node in _walk(root, zones):
        if isinstance(node, Tag):
            yield node


def _restore_attribute_case(soup: BeautifulSoup, source: str) -> None:
    """Rename lowercased attribute keys back to their source spelling.

    `html.parser` lowercases attribute names. Each tag records where its start
    tag began, so the raw attribute names are re-read from the source and used
    when they line up one-to-one with the parsed keys.
    """

    line_starts = [0]
    line_starts.extend(match.end() for match in re.finditer("\n", source))

    for tag in soup.find_all(True):
        if not tag.attrs or tag.sourceline is None or tag.sourcepos is None:
            continue
        parsed_keys = list(tag.attrs)
        source_names = _source_attribute_names(
            source, line_starts[tag.sourceline - 1] + tag.sourcepos
        )
        if source_names == parsed_keys:
            continue
        if [name.lower() for name in source_names] != parsed_keys:
            continue
        tag.attrs = dict(zip(source_names, tag.attrs.values()))


def _source_attribute_names(source: str, offset: int) -> list[str]:
    """Return attribute names as spelled in the start tag beginning at `offset`."""

    opener = _TAG_OPEN_RE.match(source, offset)
    if opener is None:
        return []
    names: list[str] = []
    position = opener.end()
    while True:
        match = _SOURCE_ATTRIBUTE_RE.match(source, position)
        if match is None or match.end() == position:
            return names
        names.append(match.group(1))
        position = match.end()
