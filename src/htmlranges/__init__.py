"""Source ranges and stringification for located HTML trees."""

from htmlranges.document import (
    INLINE_INDENT,
    ParsedDocument,
    ParsedHtmlDocument,
    ParsedTextDocument,
    extract_inline_documents,
    remove_synthetic_nodes,
)
from htmlranges.location_types import (
    ElementLocation,
    LocationInfo,
    LocationOffset,
    Position,
    SimpleLocation,
    SourceRange,
    correct_source_range,
    uncorrect_source_range,
)
from htmlranges.nodes import INJECTED_TAG_NAMES, Node
from htmlranges.serializer import serialize, serialize_outer
from htmlranges.source_ranges import source_range_for_attribute, source_range_for_node
from htmlranges.tree_builder import parse_html

__all__ = [
    "INJECTED_TAG_NAMES",
    "INLINE_INDENT",
    "ElementLocation",
    "LocationInfo",
    "LocationOffset",
    "Node",
    "ParsedDocument",
    "ParsedHtmlDocument",
    "ParsedTextDocument",
    "Position",
    "SimpleLocation",
    "SourceRange",
    "correct_source_range",
    "extract_inline_documents",
    "parse_html",
    "remove_synthetic_nodes",
    "serialize",
    "serialize_outer",
    "source_range_for_attribute",
    "source_range_for_node",
    "uncorrect_source_range",
]
