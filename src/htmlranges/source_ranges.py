"""Resolve nodes and attributes to zero-indexed source ranges.

Parser locations are one-indexed and only partially describe a node: a
start position for text and comments, start (and maybe end) tag positions
for elements. The end of a range is reconstructed from whatever the
metadata offers, in order of preference:

1. an explicit end tag, assumed to be written ``</tagname>``;
2. the resolved end of the node's last child, recursively;
3. the length of the node's serialized content.

Known limitations:
    - A closing tag with interior whitespace (``</p >``) produces an end
      column that is too small.
    - Serialization-based ends measure canonical markup, not the raw source,
      so quoting or whitespace differences inside tags skew them.
    - Attribute ranges assume the attribute sits on one line; a value with
      a literal newline yields a range that is too short.

All functions are pure and return ``None`` when a range cannot be known.
"""
from __future__ import annotations

from htmlranges.dom import has_end_tag, is_comment_node, is_text_node
from htmlranges.location_types import (
    ElementLocation,
    Position,
    SimpleLocation,
    SourceRange,
)
from htmlranges.nodes import Node
from htmlranges.serializer import serialize

# ``<!--`` plus ``-->``, less the one column already counted by the
# one-indexed start column.
_COMMENT_MARKUP_SINGLE_LINE = 6
# ``-->`` alone on the last line of a multi-line comment.
_COMMENT_MARKUP_LAST_LINE = 3


def source_range_for_node(node: Node, file: str) -> SourceRange | None:
    """Range of *node* in *file*, or ``None`` for unlocated nodes."""
    if node.location is None:
        return None
    # Follow last children down to a node that resolves on its own, then
    # widen that range back up to each ancestor's start.
    chain = [node]
    while _ends_with_last_child(chain[-1]):
        chain.append(chain[-1].child_nodes[-1])
    source_range = _resolve_own_range(chain.pop(), file)
    for ancestor in reversed(chain):
        if source_range is None:
            source_range = _range_from_serialization(ancestor, file)
        else:
            source_range = SourceRange(
                file=file,
                start=_start_position(ancestor.location),
                end=source_range.end,
            )
    return source_range


def source_range_for_attribute(node: Node, attr_name: str, file: str) -> SourceRange | None:
    """Range of the raw ``name="value"`` text of *attr_name* on *node*."""
    location = node.location
    if location is None:
        return None
    attrs = location.attrs
    if not attrs:
        return None
    attr_location = attrs.get(attr_name)
    if attr_location is None:
        return None
    start = _start_position(attr_location)
    return SourceRange(
        file=file,
        start=start,
        end=Position(
            line=start.line,
            column=start.column + (attr_location.end_offset - attr_location.start_offset),
        ),
    )


def _start_position(location: SimpleLocation | ElementLocation) -> Position:
    # one indexed to zero indexed
    return Position(line=location.line - 1, column=location.column - 1)


def _range_for_comment(node: Node, file: str) -> SourceRange | None:
    location = node.location
    if not isinstance(location, SimpleLocation):
        return None
    lines = node.value.split("\n")
    end_length = len(lines[-1])
    if len(lines) == 1:
        end_column = location.column + end_length + _COMMENT_MARKUP_SINGLE_LINE
    else:
        end_column = end_length + _COMMENT_MARKUP_LAST_LINE
    return SourceRange(
        file=file,
        start=_start_position(location),
        end=Position(line=location.line + len(lines) - 2, column=end_column),
    )


def _range_for_text(node: Node, file: str) -> SourceRange | None:
    location = node.location
    if not isinstance(location, SimpleLocation):
        return None
    lines = node.value.split("\n")
    end_length = len(lines[-1])
    if len(lines) == 1:
        end_column = location.column + end_length - 1
    else:
        end_column = end_length
    return SourceRange(
        file=file,
        start=_start_position(location),
        end=Position(line=location.line + len(lines) - 2, column=end_column),
    )


def _range_for_element_with_end_tag(node: Node, file: str) -> SourceRange | None:
    """Range through the closing tag, assumed to be exactly ``</tagname>``."""
    location = node.location
    if not isinstance(location, ElementLocation) or location.end_tag is None:
        return None
    return SourceRange(
        file=file,
        start=_start_position(location),
        end=Position(
            line=location.end_tag.line - 1,
            column=location.end_tag.column + len(node.tag_name or "") + 2,
        ),
    )


def _ends_with_last_child(node: Node) -> bool:
    """True for a located element with no end tag whose end comes from its children."""
    location = node.location
    return (
        location is not None
        and not is_comment_node(node)
        and not is_text_node(node)
        and not has_end_tag(location)
        and bool(node.child_nodes)
    )


def _resolve_own_range(node: Node, file: str) -> SourceRange | None:
    if node.location is None:
        return None
    if is_comment_node(node):
        return _range_for_comment(node, file)
    if is_text_node(node):
        return _range_for_text(node, file)
    if has_end_tag(node.location):
        return _range_for_element_with_end_tag(node, file)
    return _range_from_serialization(node, file)


def _range_from_serialization(node: Node, file: str) -> SourceRange | None:
    """Range from the dimensions of the serialized content."""
    location = node.location
    if location is None:
        return None
    lines = serialize(node).split("\n")
    tag_length = len(node.tag_name) + 2 if node.tag_name else 0
    end_length = len(lines[-1])
    if len(lines) == 1:
        end_column = location.column + tag_length + end_length - 1
    else:
        end_column = end_length
    return SourceRange(
        file=file,
        start=_start_position(location),
        end=Position(line=location.line + len(lines) - 2, column=end_column),
    )
