"""Parsed documents: source positions, range lookup and stringification.

A ``ParsedDocument`` owns its source text and tree. Inline documents (the
body of a ``<script>`` or ``<style>``) also remember their host element
(``ast_node``) and where they start in the container (``location_offset``),
so ranges computed inside them can be reported against the container.

``ParsedHtmlDocument.stringify`` writes edited inline documents back into a
private clone of the tree; documents and any ranges already derived from
them are never mutated.
"""
from __future__ import annotations

import copy
import logging
import textwrap
from bisect import bisect_right
from collections.abc import Callable, Iterable, Sequence
from typing import Any, ClassVar

from htmlranges.dom import any_of, has_tag_name, is_synthetic, iter_nodes, query_all
from htmlranges.location_types import (
    ElementLocation,
    LocationOffset,
    Position,
    SourceRange,
    correct_position,
    correct_source_range,
    uncorrect_source_range,
)
from htmlranges.nodes import (
    Node,
    get_text_content,
    insert_before,
    remove,
    set_text_content,
)
from htmlranges.serializer import serialize
from htmlranges.source_ranges import source_range_for_attribute, source_range_for_node
from htmlranges.tree_builder import line_starts, parse_html

log = logging.getLogger(__name__)

# Indentation level given to re-embedded inline documents. Not inferred
# from the host element's indentation in the source.
INLINE_INDENT = 2

HtmlVisitor = Callable[[Node], None]


class ParsedDocument:
    """Base for parsed documents of any language."""

    type: ClassVar[str] = "unknown"

    def __init__(
        self,
        *,
        url: str,
        contents: str,
        ast: Any,
        is_inline: bool = False,
        location_offset: LocationOffset | None = None,
        ast_node: Node | None = None,
    ) -> None:
        self.url = url
        self.contents = contents
        self.ast = ast
        self.is_inline = is_inline
        self.location_offset = location_offset
        self.ast_node = ast_node
        self._line_starts = line_starts(contents)

    def __repr__(self) -> str:
        inline = " inline" if self.is_inline else ""
        return f"<{type(self).__name__}{inline} {self.url!r}>"

    # -- ranges ------------------------------------------------------------

    def source_range_for_node(self, node: Any) -> SourceRange | None:
        """Range of *node*, reported against the outermost container."""
        return self.relative_to_absolute_source_range(self._source_range_for_node(node))

    def _source_range_for_node(self, node: Any) -> SourceRange | None:
        raise NotImplementedError

    def relative_to_absolute_source_range(
        self, source_range: SourceRange | None,
    ) -> SourceRange | None:
        return correct_source_range(source_range, self.location_offset)

    def absolute_to_relative_source_range(
        self, source_range: SourceRange | None,
    ) -> SourceRange | None:
        return uncorrect_source_range(source_range, self.location_offset, self.url)

    # -- offsets -----------------------------------------------------------

    def offset_to_source_position(self, offset: int) -> Position:
        """Zero-indexed position of character *offset* in :attr:`contents`.

        Offsets outside ``[0, len(contents)]`` are clamped.
        """
        offset = min(max(0, offset), len(self.contents))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line=line, column=offset - self._line_starts[line])

    def source_position_to_offset(self, position: Position) -> int:
        """Character offset of *position*, clamped to the document bounds."""
        if position.line >= len(self._line_starts):
            return len(self.contents)
        offset = self._line_starts[position.line] + position.column
        return min(offset, len(self.contents))

    def source_range_to_offsets(self, source_range: SourceRange) -> tuple[int, int]:
        return (
            self.source_position_to_offset(source_range.start),
            self.source_position_to_offset(source_range.end),
        )

    # -- output ------------------------------------------------------------

    def stringify(
        self,
        *,
        inline_documents: Sequence[ParsedDocument] | None = None,
        indent: int = 0,
    ) -> str:
        raise NotImplementedError


class ParsedHtmlDocument(ParsedDocument):
    """An HTML document and its located node tree."""

    type: ClassVar[str] = "html"
    ast: Node

    @classmethod
    def from_source(
        cls,
        contents: str,
        url: str,
        *,
        location_offset: LocationOffset | None = None,
        ast_node: Node | None = None,
    ) -> ParsedHtmlDocument:
        return cls(
            url=url,
            contents=contents,
            ast=parse_html(contents),
            is_inline=location_offset is not None,
            location_offset=location_offset,
            ast_node=ast_node,
        )

    def visit(self, visitors: Iterable[HtmlVisitor]) -> None:
        visitors = list(visitors)
        for node in iter_nodes(self.ast):
            for visitor in visitors:
                visitor(node)

    def for_each_node(self, callback: HtmlVisitor) -> None:
        for node in iter_nodes(self.ast):
            callback(node)

    def _source_range_for_node(self, node: Node) -> SourceRange | None:
        return source_range_for_node(node, self.url)

    def source_range_for_attribute(self, node: Node, attr_name: str) -> SourceRange | None:
        return self.relative_to_absolute_source_range(
            source_range_for_attribute(node, attr_name, self.url),
        )

    def stringify(
        self,
        *,
        inline_documents: Sequence[ParsedDocument] | None = None,
        indent: int = 0,
    ) -> str:
        """Serialize the document with *inline_documents* written back in.

        ``self`` and the inline documents are cloned by a single deepcopy, so
        every clone's ``ast_node`` refers into the cloned tree rather than
        into ``self.ast``. Each inline document replaces the text of its host
        element; injected ``html``/``head``/``body`` elements are then
        dropped from the clone before it is serialized.

        Raises:
            ValueError: If an inline document has no host node.
        """
        mutable_documents = copy.deepcopy([self, *(inline_documents or ())])
        self_clone = mutable_documents.pop(0)

        for doc in mutable_documents:
            if doc.ast_node is None:
                raise ValueError(f"{doc!r} has no host node to stringify into")
            set_text_content(
                doc.ast_node,
                "\n" + doc.stringify(indent=INLINE_INDENT) + "  " * (INLINE_INDENT - 1),
            )

        removed = remove_synthetic_nodes(self_clone.ast)
        log.debug(
            "stringify %s: %d inline documents, %d synthetic nodes removed",
            self.url, len(mutable_documents), removed,
        )
        return serialize(self_clone.ast)


class ParsedTextDocument(ParsedDocument):
    """Opaque text embedded in HTML, such as a script or a stylesheet.

    The tree is the text itself; the only node is the whole document.
    """

    type: ClassVar[str] = "text"

    def __init__(
        self,
        *,
        url: str,
        contents: str,
        is_inline: bool = False,
        location_offset: LocationOffset | None = None,
        ast_node: Node | None = None,
    ) -> None:
        super().__init__(
            url=url,
            contents=contents,
            ast=contents,
            is_inline=is_inline,
            location_offset=location_offset,
            ast_node=ast_node,
        )

    def with_contents(self, contents: str) -> ParsedTextDocument:
        """Copy of this document holding edited *contents*, same host and offset."""
        return ParsedTextDocument(
            url=self.url,
            contents=contents,
            is_inline=self.is_inline,
            location_offset=self.location_offset,
            ast_node=self.ast_node,
        )

    def _source_range_for_node(self, node: Any) -> SourceRange | None:
        if node is not self.ast:
            return None
        return SourceRange(
            file=self.url,
            start=Position(line=0, column=0),
            end=self.offset_to_source_position(len(self.contents)),
        )

    def stringify(
        self,
        *,
        inline_documents: Sequence[ParsedDocument] | None = None,
        indent: int = 0,
    ) -> str:
        """Contents dedented, then indented by ``indent`` two-space levels."""
        text = textwrap.dedent(self.contents).strip("\n")
        prefix = "  " * indent
        lines = [prefix + line if line.strip() else "" for line in text.split("\n")]
        return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def remove_synthetic_nodes(node: Node) -> int:
    """Splice injected ``html``/``head``/``body`` elements out of the tree.

    Children take the removed element's place in its parent, in order.

    Returns:
        Number of elements removed.
    """
    synthetic = [candidate for candidate in iter_nodes(node) if is_synthetic(candidate)]
    for element in synthetic:
        parent = element.parent
        for child in list(element.child_nodes):
            insert_before(parent, element, child)
        remove(element)
    return len(synthetic)


def extract_inline_documents(
    document: ParsedHtmlDocument,
    tag_names: Sequence[str] = ("script", "style"),
) -> list[ParsedTextDocument]:
    """One inline text document per located, inline ``<script>``/``<style>``.

    Scripts with a ``src`` attribute are external and skipped. Each document
    starts right after its host's start tag.
    """
    documents: list[ParsedTextDocument] = []
    predicate = any_of(*(has_tag_name(name) for name in tag_names))
    for node in query_all(document.ast, predicate):
        location = node.location
        if not isinstance(location, ElementLocation) or "src" in node.attributes:
            continue
        start = document.offset_to_source_position(location.start_tag.end_offset)
        filename = document.url
        if document.location_offset is not None:
            start = correct_position(start, document.location_offset)
            filename = document.location_offset.filename or filename
        documents.append(ParsedTextDocument(
            url=document.url,
            contents=get_text_content(node),
            is_inline=True,
            location_offset=LocationOffset(
                line=start.line, column=start.column, filename=filename,
            ),
            ast_node=node,
        ))
    return documents
