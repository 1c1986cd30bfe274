"""Parsed HTML tree: nodes, factories, and in-place mutation helpers.

A tree is owned by its document. ``parent`` is a back-reference used for
splicing only; ownership always flows from ``child_nodes``. Because the
back-reference is a plain attribute, ``copy.deepcopy`` of a tree (or of a
list holding several objects that point into the same tree) keeps every
reference inside the copy.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Literal

from htmlranges.location_types import LocationInfo

NodeKind = Literal["document", "doctype", "element", "text", "comment"]

# Structural elements the tree builder injects when the source omits them.
INJECTED_TAG_NAMES: frozenset[str] = frozenset({"html", "head", "body"})


@dataclass(eq=False)
class Node:
    """A document, doctype, element, text or comment node.

    Equality is identity; two nodes with the same content in different
    places of a tree are different nodes.
    """

    kind: NodeKind
    tag_name: str | None = None
    child_nodes: list[Node] = field(default_factory=list)
    value: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    location: LocationInfo | None = None
    parent: Node | None = field(default=None, repr=False)

    @property
    def node_name(self) -> str:
        if self.kind == "element":
            return self.tag_name or ""
        return f"#{self.kind}"

    def __repr__(self) -> str:
        if self.kind == "element":
            return f"<Node element {self.tag_name!r} children={len(self.child_nodes)}>"
        if self.kind in ("text", "comment"):
            preview = self.value if len(self.value) <= 20 else self.value[:17] + "..."
            return f"<Node {self.kind} {preview!r}>"
        return f"<Node {self.kind}>"

    def __deepcopy__(self, memo: dict[int, Any]) -> Node:
        """Clone the whole tree *self* belongs to and return the clone of *self*.

        Cloning starts at the root so parent links stay inside the copy, and
        every cloned node is recorded in *memo*: other objects copied in the
        same ``deepcopy`` call that point into the tree get the clones too.
        """
        root = self
        while root.parent is not None:
            root = root.parent
        if id(root) not in memo:
            _clone_tree(root, memo)
        return memo[id(self)]


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def create_document() -> Node:
    return Node(kind="document")


def create_element(
    tag_name: str,
    attributes: dict[str, str] | None = None,
    location: LocationInfo | None = None,
) -> Node:
    return Node(
        kind="element",
        tag_name=tag_name.lower(),
        attributes=dict(attributes or {}),
        location=location,
    )


def create_text_node(value: str, location: LocationInfo | None = None) -> Node:
    return Node(kind="text", value=value, location=location)


def create_comment(value: str, location: LocationInfo | None = None) -> Node:
    return Node(kind="comment", value=value, location=location)


def create_doctype(value: str, location: LocationInfo | None = None) -> Node:
    return Node(kind="doctype", value=value, location=location)


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


def append_child(parent: Node, child: Node) -> None:
    """Append *child* to *parent*, detaching it from any previous parent."""
    if child.parent is not None:
        remove(child)
    parent.child_nodes.append(child)
    child.parent = parent


def insert_before(parent: Node, target: Node, child: Node) -> None:
    """Insert *child* into *parent* immediately before *target*.

    Raises:
        ValueError: If *target* is not a child of *parent*.
    """
    if child.parent is not None:
        remove(child)
    index = _index_of(parent, target)
    parent.child_nodes.insert(index, child)
    child.parent = parent


def remove(node: Node) -> None:
    """Detach *node* from its parent. A detached node is left unchanged."""
    parent = node.parent
    if parent is None:
        return
    parent.child_nodes.pop(_index_of(parent, node))
    node.parent = None


def set_text_content(node: Node, text: str) -> None:
    """Replace *node*'s content with a single text node holding *text*.

    Text and comment nodes have their ``value`` replaced instead.
    """
    if node.kind in ("text", "comment"):
        node.value = text
        return
    for child in node.child_nodes:
        child.parent = None
    node.child_nodes = []
    append_child(node, create_text_node(text))


def get_text_content(node: Node) -> str:
    """Concatenated text of *node* and its descendants (comments excluded)."""
    parts: list[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.kind == "text":
            parts.append(current.value)
        elif current.kind != "comment":
            stack.extend(reversed(current.child_nodes))
    return "".join(parts)


def _clone_tree(root: Node, memo: dict[int, Any]) -> None:
    stack: list[tuple[Node, Node | None]] = [(root, None)]
    while stack:
        node, parent_clone = stack.pop()
        clone = Node(
            kind=node.kind,
            tag_name=node.tag_name,
            value=node.value,
            attributes=dict(node.attributes),
            location=copy.deepcopy(node.location, memo),
            parent=parent_clone,
        )
        memo[id(node)] = clone
        if parent_clone is not None:
            parent_clone.child_nodes.append(clone)
        stack.extend((child, clone) for child in reversed(node.child_nodes))


def _index_of(parent: Node, child: Node) -> int:
    for i, candidate in enumerate(parent.child_nodes):
        if candidate is child:
            return i
    raise ValueError(f"{child!r} is not a child of {parent!r}")
