"""HTML serialization of parsed trees.

``serialize`` produces the inner HTML of a node (its children), matching the
contract range arithmetic relies on; ``serialize_outer`` includes the node
itself. Escaping follows BeautifulSoup's minimal formatter: ``&``, ``<``
and ``>`` in text and attribute values, with attribute quotes chosen by
``EntitySubstitution.quoted_attribute_value``. No-break spaces are written
as ``&nbsp;``.
"""
from __future__ import annotations

from bs4.builder import HTMLTreeBuilder
from bs4.dammit import EntitySubstitution

from htmlranges.nodes import Node

# Filled in per instance; the class attribute is unset on newer releases.
VOID_TAG_NAMES: frozenset[str] = frozenset(HTMLTreeBuilder().empty_element_tags)

# Children of these elements are written out verbatim.
RAW_TEXT_TAG_NAMES: frozenset[str] = frozenset({
    "script", "style", "xmp", "iframe", "noembed", "noframes", "plaintext",
    "noscript",
})


def serialize(node: Node) -> str:
    """Serialize the children of *node*."""
    parts: list[str] = []
    for child in node.child_nodes:
        _serialize_into(child, parts)
    return "".join(parts)


def serialize_outer(node: Node) -> str:
    """Serialize *node* together with its children."""
    parts: list[str] = []
    _serialize_into(node, parts)
    return "".join(parts)


def _serialize_into(node: Node, parts: list[str]) -> None:
    # Pending work is either a node to open or a closing tag to write.
    stack: list[Node | str] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
        elif item.kind == "element":
            tag_name = item.tag_name or ""
            parts.append("<" + tag_name)
            for name, value in item.attributes.items():
                parts.append(" " + name + "=")
                parts.append(_escape_attribute(value))
            parts.append(">")
            if tag_name in VOID_TAG_NAMES:
                continue
            stack.append(f"</{tag_name}>")
            stack.extend(reversed(item.child_nodes))
        elif item.kind == "text":
            parent = item.parent
            if parent is not None and parent.tag_name in RAW_TEXT_TAG_NAMES:
                parts.append(item.value)
            else:
                parts.append(_escape_text(item.value))
        elif item.kind == "comment":
            parts.append(f"<!--{item.value}-->")
        elif item.kind == "doctype":
            parts.append(f"<!{item.value}>")
        else:
            stack.extend(reversed(item.child_nodes))


def _escape_text(value: str) -> str:
    return EntitySubstitution.substitute_xml(value).replace("\xa0", "&nbsp;")


def _escape_attribute(value: str) -> str:
    quoted = EntitySubstitution.substitute_xml(value, make_quoted_attribute=True)
    return quoted.replace("\xa0", "&nbsp;")
