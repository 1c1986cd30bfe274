"""Tree walking, queries and node predicates.

Predicates are plain ``Callable[[Node], bool]`` values so they compose with
:func:`all_of` / :func:`any_of` and plug straight into the walkers.
"""
from __future__ import annotations

from collections.abc import Callable, Iterator

from htmlranges.location_types import ElementLocation, LocationInfo
from htmlranges.nodes import INJECTED_TAG_NAMES, Node

Predicate = Callable[[Node], bool]


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_element(node: Node) -> bool:
    return node.kind == "element"


def is_text_node(node: Node) -> bool:
    return node.kind == "text"


def is_comment_node(node: Node) -> bool:
    return node.kind == "comment"


def has_tag_name(name: str) -> Predicate:
    name = name.lower()

    def _predicate(node: Node) -> bool:
        return node.kind == "element" and node.tag_name == name

    return _predicate


def has_attribute(name: str) -> Predicate:
    def _predicate(node: Node) -> bool:
        return name in node.attributes

    return _predicate


def all_of(*predicates: Predicate) -> Predicate:
    def _predicate(node: Node) -> bool:
        return all(p(node) for p in predicates)

    return _predicate


def any_of(*predicates: Predicate) -> Predicate:
    def _predicate(node: Node) -> bool:
        return any(p(node) for p in predicates)

    return _predicate


def is_synthetic(node: Node) -> bool:
    """True for an ``html``/``head``/``body`` the parser injected.

    Injected nodes have a parent but no location; they have no text in the
    source and are never range-resolvable.
    """
    return (
        node.parent is not None
        and node.location is None
        and node.kind == "element"
        and node.tag_name in INJECTED_TAG_NAMES
    )


def has_end_tag(location: LocationInfo | None) -> bool:
    """True when *location* is an element location with an explicit end tag."""
    return isinstance(location, ElementLocation) and location.end_tag is not None


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield *node* and all of its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.child_nodes))


def node_walk(node: Node, predicate: Predicate) -> Node | None:
    """First node (document order, *node* included) matching *predicate*."""
    for candidate in iter_nodes(node):
        if predicate(candidate):
            return candidate
    return None


def node_walk_all(node: Node, predicate: Predicate) -> list[Node]:
    """All nodes (document order, *node* included) matching *predicate*."""
    return [candidate for candidate in iter_nodes(node) if predicate(candidate)]


def query(node: Node, predicate: Predicate) -> Node | None:
    """Like :func:`node_walk`, restricted to elements."""
    return node_walk(node, all_of(is_element, predicate))


def query_all(node: Node, predicate: Predicate) -> list[Node]:
    """Like :func:`node_walk_all`, restricted to elements."""
    return node_walk_all(node, all_of(is_element, predicate))
