"""Build a located node tree from HTML source.

Tokenizing is delegated to the standard library ``html.parser.HTMLParser``
(the tokenizer behind BeautifulSoup's ``html.parser`` builder). On top of
its callbacks this module applies a reduced HTML tree-construction
algorithm and records location metadata in the one-indexed form the range
resolver expects:

- text, comment and doctype nodes get a ``SimpleLocation``;
- elements get an ``ElementLocation`` whose ``end_tag`` is set only when an
  explicit ``</tag>`` closed the element;
- ``html``, ``head`` and ``body`` are created without location when the
  source leaves them out.

Tree construction covers the cases that decide whether an element has an
end tag: void elements, self-closing tags, and the implied end tags of
``li``, ``p``, ``dd``/``dt``, ``option``/``optgroup`` and table parts. It is
not a conforming HTML5 parser (no adoption agency, no foster parenting).
"""
from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, replace
from html.parser import HTMLParser

from htmlranges.location_types import ElementLocation, SimpleLocation
from htmlranges.nodes import (
    Node,
    append_child,
    create_comment,
    create_doctype,
    create_document,
    create_element,
    create_text_node,
)
from htmlranges.serializer import VOID_TAG_NAMES

# ---------------------------------------------------------------------------
# Tree-construction tables
# ---------------------------------------------------------------------------

HEAD_TAG_NAMES: frozenset[str] = frozenset({
    "base", "basefont", "bgsound", "link", "meta", "noscript", "script",
    "style", "template", "title",
})

_STRUCTURAL: frozenset[str] = frozenset({"html", "head", "body"})

_BUTTON_SCOPE: frozenset[str] = frozenset({
    "applet", "button", "caption", "marquee", "object", "table", "td",
    "template", "th",
})

_LIST_ITEM_SCOPE: frozenset[str] = frozenset({
    "menu", "ol", "table", "td", "template", "th", "ul", "button",
})

_CLOSES_P: frozenset[str] = frozenset({
    "address", "article", "aside", "blockquote", "center", "dd", "details",
    "dialog", "dir", "div", "dl", "dt", "fieldset", "figcaption", "figure",
    "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hgroup",
    "hr", "li", "listing", "main", "menu", "nav", "ol", "p", "pre", "section",
    "summary", "table", "ul", "xmp",
})


@dataclass(frozen=True, slots=True)
class _ImpliedEnd:
    """Open elements in ``targets`` close when a given start tag arrives.

    The search runs from the innermost open element outwards and stops at
    any element in ``boundaries``. With ``current_only`` only the innermost
    open element is considered.
    """

    targets: frozenset[str]
    boundaries: frozenset[str] = frozenset()
    current_only: bool = False


_CLOSE_P = _ImpliedEnd(frozenset({"p"}), _BUTTON_SCOPE)

_IMPLIED_END_TAGS: dict[str, tuple[_ImpliedEnd, ...]] = {
    "li": (_ImpliedEnd(frozenset({"li"}), _LIST_ITEM_SCOPE), _CLOSE_P),
    "dd": (_ImpliedEnd(frozenset({"dd", "dt"}), frozenset({"dl"}) | _LIST_ITEM_SCOPE), _CLOSE_P),
    "dt": (_ImpliedEnd(frozenset({"dd", "dt"}), frozenset({"dl"}) | _LIST_ITEM_SCOPE), _CLOSE_P),
    "option": (_ImpliedEnd(frozenset({"option"}), current_only=True),),
    "optgroup": (
        _ImpliedEnd(frozenset({"option"}), current_only=True),
        _ImpliedEnd(frozenset({"optgroup"}), current_only=True),
    ),
    "tr": (_ImpliedEnd(frozenset({"tr"}), frozenset({"table", "tbody", "thead", "tfoot"})),),
    "td": (_ImpliedEnd(frozenset({"td", "th"}), frozenset({"tr", "table"})),),
    "th": (_ImpliedEnd(frozenset({"td", "th"}), frozenset({"tr", "table"})),),
    "tbody": (_ImpliedEnd(frozenset({"thead", "tbody", "tfoot"}), frozenset({"table"})),),
    "thead": (_ImpliedEnd(frozenset({"thead", "tbody", "tfoot"}), frozenset({"table"})),),
    "tfoot": (_ImpliedEnd(frozenset({"thead", "tbody", "tfoot"}), frozenset({"table"})),),
}
for _tag in _CLOSES_P.difference(_IMPLIED_END_TAGS):
    _IMPLIED_END_TAGS[_tag] = (_CLOSE_P,)

# Attribute inside a raw start tag: name, optionally ``= value``.
_ATTR_RE = re.compile(
    r"""([^\s/>"'=][^\s/>=]*)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+))?""",
)
_TAG_NAME_RE = re.compile(r"<[^\s/>]+")


def parse_html(source: str) -> Node:
    """Parse *source* into a document node carrying location metadata."""
    builder = _LocatingTreeBuilder(source)
    builder.feed(source)
    builder.close()
    return builder.document


def line_starts(source: str) -> list[int]:
    """Offsets at which each line of *source* starts (line 0 first)."""
    starts = [0]
    for match in re.finditer("\n", source):
        starts.append(match.end())
    return starts


class _LocatingTreeBuilder(HTMLParser):
    def __init__(self, source: str) -> None:
        super().__init__(convert_charrefs=True)
        self.source = source
        self.document = create_document()
        self._line_starts = line_starts(source)
        self._html: Node | None = None
        self._head: Node | None = None
        self._body: Node | None = None
        self._stack: list[Node] = []
        self._mode = "before_html"
        self._pending_text: Node | None = None

    # -- positions ---------------------------------------------------------

    def _current_offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def _location(self, start: int, end: int) -> SimpleLocation:
        line = bisect_right(self._line_starts, start) - 1
        return SimpleLocation(
            line=line + 1,
            column=start - self._line_starts[line] + 1,
            start_offset=start,
            end_offset=end,
        )

    def _tag_end(self, start: int) -> int:
        end = self.source.find(">", start)
        return len(self.source) if end < 0 else end + 1

    def _attribute_locations(self, raw: str, start: int) -> dict[str, SimpleLocation]:
        attrs: dict[str, SimpleLocation] = {}
        name_match = _TAG_NAME_RE.match(raw)
        pos = name_match.end() if name_match else 1
        for match in _ATTR_RE.finditer(raw, pos):
            name = match.group(1).lower()
            if name not in attrs:
                attrs[name] = self._location(start + match.start(), start + match.end())
        return attrs

    # -- insertion ---------------------------------------------------------

    def _current(self) -> Node:
        return self._stack[-1] if self._stack else self.document

    def _at_structural_level(self) -> bool:
        if self._mode in ("before_html", "before_head", "after_head", "after_body", "after_html"):
            return True
        return self._mode == "in_head" and self._current() is self._head

    def _flush_text(self, end: int) -> None:
        pending = self._pending_text
        if pending is not None and isinstance(pending.location, SimpleLocation):
            pending.location = replace(pending.location, end_offset=end)
        self._pending_text = None

    def _ensure_html(self) -> None:
        if self._html is None:
            self._html = create_element("html")
            append_child(self.document, self._html)
            self._stack = [self._html]
            self._mode = "before_head"

    def _ensure_head(self) -> None:
        self._ensure_html()
        if self._mode == "before_head":
            self._head = create_element("head")
            append_child(self._html, self._head)
            self._stack.append(self._head)
            self._mode = "in_head"

    def _leave_head(self) -> None:
        self._ensure_head()
        if self._mode == "in_head":
            self._stack = [self._html]
            self._mode = "after_head"

    def _ensure_body(self) -> None:
        self._leave_head()
        if self._mode == "after_head":
            self._body = create_element("body")
            append_child(self._html, self._body)
            self._stack = [self._html, self._body]
            self._mode = "in_body"
        elif self._mode in ("after_body", "after_html"):
            if self._body is None:
                self._body = create_element("body")
                append_child(self._html, self._body)
            self._stack = [self._html, self._body]
            self._mode = "in_body"

    def _close_implied(self, tag: str) -> None:
        for rule in _IMPLIED_END_TAGS.get(tag, ()):
            for index in range(len(self._stack) - 1, -1, -1):
                name = self._stack[index].tag_name
                if name in rule.targets:
                    del self._stack[index:]
                    break
                if rule.current_only or name in rule.boundaries or name in _STRUCTURAL:
                    break

    # -- HTMLParser callbacks ----------------------------------------------

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._start(tag, attrs, self_closing=False)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._start(tag, attrs, self_closing=True)

    def _start(self, tag: str, attrs: list[tuple[str, str | None]], *, self_closing: bool) -> None:
        start = self._current_offset()
        raw = self.get_starttag_text() or ""
        start_tag = replace(
            self._location(start, start + len(raw)),
            attrs=self._attribute_locations(raw, start),
        )
        attributes: dict[str, str] = {}
        for name, value in attrs:
            attributes.setdefault(name, value or "")
        element = create_element(tag, attributes, ElementLocation(start_tag=start_tag))

        if tag == "html":
            if self._html is None:
                self._flush_text(start)
                self._html = element
                append_child(self.document, element)
                self._stack = [element]
                self._mode = "before_head"
            else:
                for name, value in attributes.items():
                    self._html.attributes.setdefault(name, value)
            return
        if tag == "head":
            if self._mode in ("before_html", "before_head"):
                self._flush_text(start)
                self._ensure_html()
                self._head = element
                append_child(self._html, element)
                self._stack.append(element)
                self._mode = "in_head"
            return
        if tag == "body":
            if self._mode in ("before_html", "before_head", "in_head", "after_head"):
                self._flush_text(start)
                self._leave_head()
                self._body = element
                append_child(self._html, element)
                self._stack = [self._html, element]
                self._mode = "in_body"
            elif self._body is not None:
                for name, value in attributes.items():
                    self._body.attributes.setdefault(name, value)
            return

        if self._at_structural_level():
            if tag in HEAD_TAG_NAMES and self._mode in ("before_html", "before_head", "in_head"):
                self._ensure_head()
            else:
                self._ensure_body()
        self._flush_text(start)
        self._close_implied(tag)
        append_child(self._current(), element)
        if not self_closing and tag not in VOID_TAG_NAMES:
            self._stack.append(element)

    def handle_endtag(self, tag: str) -> None:
        start = self._current_offset()
        end_tag = self._location(start, self._tag_end(start))

        if tag == "html":
            if self._html is not None and self._mode != "after_html":
                self._set_end_tag(self._html, end_tag)
                if self._mode == "before_head" or self._mode == "in_head":
                    self._leave_head()
                self._stack = []
                self._mode = "after_html"
            return
        if tag == "head":
            if self._mode == "in_head":
                self._set_end_tag(self._head, end_tag)
                self._stack = [self._html]
                self._mode = "after_head"
            return
        if tag == "body":
            if self._mode == "in_body":
                self._set_end_tag(self._body, end_tag)
                self._stack = [self._html]
                self._mode = "after_body"
            return

        for index in range(len(self._stack) - 1, -1, -1):
            node = self._stack[index]
            if node.tag_name == tag:
                del self._stack[index:]
                self._set_end_tag(node, end_tag)
                return
            if node.tag_name in _STRUCTURAL:
                return

    def _set_end_tag(self, node: Node | None, end_tag: SimpleLocation) -> None:
        self._flush_text(end_tag.start_offset)
        if node is not None and isinstance(node.location, ElementLocation):
            node.location = replace(node.location, end_tag=end_tag)

    def handle_data(self, data: str) -> None:
        start = self._current_offset()
        if not data.isspace() and self._at_structural_level():
            self._ensure_body()
        target = self._current()
        pending = self._pending_text
        if pending is not None and pending.parent is target:
            pending.value += data
            return
        self._flush_text(start)
        text = create_text_node(data, self._location(start, start))
        append_child(target, text)
        self._pending_text = text

    def handle_comment(self, data: str) -> None:
        start = self._current_offset()
        self._flush_text(start)
        append_child(
            self._current(),
            create_comment(data, self._location(start, start + len(data) + 7)),
        )

    def handle_decl(self, decl: str) -> None:
        start = self._current_offset()
        self._flush_text(start)
        append_child(
            self._current(),
            create_doctype(decl, self._location(start, self._tag_end(start))),
        )

    def handle_pi(self, data: str) -> None:
        # Processing instructions become bogus comments, as in HTML5 parsers.
        start = self._current_offset()
        self._flush_text(start)
        append_child(
            self._current(),
            create_comment("?" + data, self._location(start, self._tag_end(start))),
        )

    def close(self) -> None:
        super().close()
        self._flush_text(len(self.source))
        self._ensure_body()
