#!/usr/bin/env python3
"""Dump the source range of every located node in an HTML file.

Usage::

    python3 scripts/dump_source_ranges.py page.html [--attributes] [--verbose]
    python3 scripts/dump_source_ranges.py page.html --output ranges.jsonl
    python3 scripts/dump_source_ranges.py page.html --stringify

One JSON object per node goes to stdout (or ``--output``) as JSON Lines;
human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from htmlranges.document import ParsedHtmlDocument  # noqa: E402
from htmlranges.io_utils import dumps_jsonl, read_source, save_jsonl  # noqa: E402
from htmlranges.nodes import Node  # noqa: E402

log = logging.getLogger("dump_source_ranges")


def node_record(
    document: ParsedHtmlDocument,
    node: Node,
    *,
    include_attributes: bool = False,
) -> dict[str, Any] | None:
    """JSON-ready record for *node*, or None when it has no range."""
    source_range = document.source_range_for_node(node)
    if source_range is None:
        return None
    record: dict[str, Any] = {
        "kind": node.kind,
        "tag_name": node.tag_name,
        "range": source_range.to_dict(),
    }
    if include_attributes and node.attributes:
        attributes: dict[str, Any] = {}
        for name in node.attributes:
            attr_range = document.source_range_for_attribute(node, name)
            attributes[name] = attr_range.to_dict() if attr_range is not None else None
        record["attributes"] = attributes
    return record


def collect_records(
    document: ParsedHtmlDocument,
    *,
    include_attributes: bool = False,
) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    skipped = 0

    def _visit(node: Node) -> None:
        nonlocal skipped
        if node.kind == "document":
            return
        record = node_record(document, node, include_attributes=include_attributes)
        if record is None:
            skipped += 1
        else:
            records.append(record)

    document.for_each_node(_visit)
    log.debug("%d located nodes, %d without location", len(records), skipped)
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Dump source ranges of the nodes in an HTML file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("path", help="HTML file to analyze")
    parser.add_argument(
        "--url", default=None,
        help="File name reported in ranges (default: the path as given)",
    )
    parser.add_argument(
        "--attributes", action="store_true",
        help="Include the range of every attribute",
    )
    parser.add_argument(
        "--stringify", action="store_true",
        help="Print the stringified document instead of ranges",
    )
    parser.add_argument(
        "--output", default=None,
        help="Write JSON Lines here instead of stdout",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    path = Path(args.path)
    if not path.is_file():
        log.error("No such file: %s", path)
        return 1

    document = ParsedHtmlDocument.from_source(read_source(path), args.url or args.path)

    if args.stringify:
        sys.stdout.write(document.stringify())
        return 0

    records = collect_records(document, include_attributes=args.attributes)
    if args.output:
        save_jsonl(records, Path(args.output))
        log.info("Wrote %d ranges to %s", len(records), args.output)
    else:
        sys.stdout.buffer.write(dumps_jsonl(records))
        sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
