"""Location records shared by the tree builder, range resolver and documents.

Two coordinate systems meet here:

- Parser metadata (``SimpleLocation`` / ``ElementLocation``) is one-indexed
  on both line and column and carries absolute character offsets.
- Resolved ranges (``Position`` / ``SourceRange``) are zero-indexed with an
  exclusive end, the form diagnostics and rewriting tools anchor to.

``LocationOffset`` moves ranges between an inline document (the body of a
``<script>`` or ``<style>``) and the document that contains it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


# ---------------------------------------------------------------------------
# Resolved (zero-indexed) positions and ranges
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-indexed line/column pair. Ordered on ``(line, column)``."""

    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 0:
            raise ValueError(f"line must be >= 0, got {self.line}")
        if self.column < 0:
            raise ValueError(f"column must be >= 0, got {self.column}")

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Zero-indexed, end-exclusive span of text in ``file``.

    Ordering of ``start`` and ``end`` is not enforced: ranges computed from
    inconsistent parser metadata are returned as-is, and callers that need
    strict ranges check :attr:`is_ordered`.
    """

    file: str
    start: Position
    end: Position

    @property
    def is_ordered(self) -> bool:
        return self.start <= self.end

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def contains(self, position: Position) -> bool:
        """True if *position* falls inside ``[start, end)``."""
        return self.start <= position < self.end

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
        }


# ---------------------------------------------------------------------------
# Parser metadata (one-indexed)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SimpleLocation:
    """Location of a text, comment or doctype node, a tag, or an attribute.

    ``line`` and ``column`` are one-indexed. ``start_offset`` and
    ``end_offset`` are absolute character offsets into the source.
    """

    line: int
    column: int
    start_offset: int
    end_offset: int
    attrs: dict[str, SimpleLocation] | None = None

    def __post_init__(self) -> None:
        if self.line < 1 or self.column < 1:
            raise ValueError(
                f"location is one-indexed, got line={self.line} column={self.column}",
            )
        if self.end_offset < self.start_offset:
            raise ValueError(
                f"end_offset must be >= start_offset, got "
                f"{self.end_offset} < {self.start_offset}",
            )


@dataclass(frozen=True, slots=True)
class ElementLocation:
    """Tagged location for an element.

    ``end_tag`` is only present when the source contains an explicit
    closing tag for the element. Attribute locations recorded on the start
    tag take precedence over ``attrs`` given for the element as a whole.
    """

    start_tag: SimpleLocation
    end_tag: SimpleLocation | None = None
    attrs: dict[str, SimpleLocation] | None = None

    def __post_init__(self) -> None:
        if self.start_tag.attrs is not None:
            object.__setattr__(self, "attrs", self.start_tag.attrs)

    @property
    def line(self) -> int:
        return self.start_tag.line

    @property
    def column(self) -> int:
        return self.start_tag.column

    @property
    def start_offset(self) -> int:
        return self.start_tag.start_offset

    @property
    def end_offset(self) -> int:
        if self.end_tag is not None:
            return self.end_tag.end_offset
        return self.start_tag.end_offset


LocationInfo = Union[SimpleLocation, ElementLocation]


# ---------------------------------------------------------------------------
# Inline document offsets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LocationOffset:
    """Zero-indexed position where an inline document starts in its container."""

    line: int
    column: int
    filename: str | None = None


def correct_position(position: Position, offset: LocationOffset) -> Position:
    """Map *position* from inline-document coordinates to the container's.

    Only the inline document's first line shares its line with container
    text, so only positions on line 0 are shifted horizontally.
    """
    return Position(
        line=position.line + offset.line,
        column=position.column + (offset.column if position.line == 0 else 0),
    )


def correct_source_range(
    source_range: SourceRange | None,
    offset: LocationOffset | None,
) -> SourceRange | None:
    """Map *source_range* into container coordinates. ``None`` passes through."""
    if source_range is None or offset is None:
        return source_range
    return SourceRange(
        file=offset.filename or source_range.file,
        start=correct_position(source_range.start, offset),
        end=correct_position(source_range.end, offset),
    )


def _uncorrect_position(position: Position, offset: LocationOffset) -> Position | None:
    line = position.line - offset.line
    if line < 0:
        return None
    column = position.column - (offset.column if line == 0 else 0)
    if column < 0:
        return None
    return Position(line=line, column=column)


def uncorrect_source_range(
    source_range: SourceRange | None,
    offset: LocationOffset | None,
    file: str | None = None,
) -> SourceRange | None:
    """Inverse of :func:`correct_source_range`.

    Returns ``None`` when the range starts before the inline document.
    """
    if source_range is None or offset is None:
        return source_range
    start = _uncorrect_position(source_range.start, offset)
    end = _uncorrect_position(source_range.end, offset)
    if start is None or end is None:
        return None
    return SourceRange(file=file or source_range.file, start=start, end=end)
