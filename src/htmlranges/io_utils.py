"""Encoding-safe source reading and JSON Lines output for range records."""
from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson


def read_source(fpath: Path) -> str:
    """Read an HTML file with encoding fallback: UTF-8 -> CP1252 -> replace.

    Raises:
        OSError: If the file cannot be read.
    """
    raw = fpath.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass
    try:
        return raw.decode("cp1252")
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace")


def dumps_jsonl(records: Iterable[dict[str, Any]]) -> bytes:
    """Encode *records* as JSON Lines (sorted keys, trailing newline)."""
    lines = [orjson.dumps(r, option=orjson.OPT_SORT_KEYS) for r in records]
    if not lines:
        return b""
    return b"\n".join(lines) + b"\n"


def save_jsonl(records: Iterable[dict[str, Any]], path: Path) -> None:
    """Save *records* as a JSON Lines file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_jsonl(records))


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file. Blank lines are skipped."""
    records: list[dict[str, Any]] = []
    for line in path.read_bytes().split(b"\n"):
        line = line.strip()
        if line:
            records.append(orjson.loads(line))
    return records
