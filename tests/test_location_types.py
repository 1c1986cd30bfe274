"""Tests for htmlranges.location_types module."""
from __future__ import annotations

import copy
import dataclasses

import pytest

from htmlranges.location_types import (
    ElementLocation,
    LocationOffset,
    Position,
    SimpleLocation,
    SourceRange,
    correct_position,
    correct_source_range,
    uncorrect_source_range,
)


class TestPosition:
    def test_ordering(self) -> None:
        assert Position(1, 9) < Position(2, 0)
        assert Position(2, 0) < Position(2, 1)
        assert max(Position(0, 5), Position(0, 3)) == Position(0, 5)

    def test_negative_values_raise(self) -> None:
        with pytest.raises(ValueError):
            Position(-1, 0)
        with pytest.raises(ValueError):
            Position(0, -1)

    def test_frozen(self) -> None:
        position = Position(1, 2)
        with pytest.raises(dataclasses.FrozenInstanceError):
            position.line = 3  # type: ignore[misc]


class TestSourceRange:
    def test_to_dict(self) -> None:
        source_range = SourceRange("a.html", Position(0, 1), Position(2, 3))
        assert source_range.to_dict() == {
            "file": "a.html",
            "start": {"line": 0, "column": 1},
            "end": {"line": 2, "column": 3},
        }

    def test_contains_is_half_open(self) -> None:
        source_range = SourceRange("a.html", Position(1, 4), Position(1, 8))
        assert source_range.contains(Position(1, 4))
        assert source_range.contains(Position(1, 7))
        assert not source_range.contains(Position(1, 8))
        assert not source_range.contains(Position(0, 5))

    def test_empty_and_ordered(self) -> None:
        empty = SourceRange("a.html", Position(3, 3), Position(3, 3))
        assert empty.is_empty and empty.is_ordered
        backwards = SourceRange("a.html", Position(3, 3), Position(2, 0))
        assert not backwards.is_ordered


class TestParserLocations:
    def test_simple_location_is_one_indexed(self) -> None:
        with pytest.raises(ValueError):
            SimpleLocation(line=0, column=1, start_offset=0, end_offset=0)
        with pytest.raises(ValueError):
            SimpleLocation(line=1, column=0, start_offset=0, end_offset=0)

    def test_simple_location_offsets(self) -> None:
        with pytest.raises(ValueError):
            SimpleLocation(line=1, column=1, start_offset=5, end_offset=4)

    def test_element_location_delegates_to_start_tag(self) -> None:
        start_tag = SimpleLocation(
            line=2, column=3, start_offset=10, end_offset=15,
            attrs={"id": SimpleLocation(line=2, column=8, start_offset=14, end_offset=14)},
        )
        location = ElementLocation(start_tag=start_tag)
        assert (location.line, location.column) == (2, 3)
        assert location.start_offset == 10
        assert location.end_offset == 15
        assert location.attrs is start_tag.attrs

        end_tag = SimpleLocation(line=4, column=1, start_offset=30, end_offset=36)
        closed = dataclasses.replace(location, end_tag=end_tag)
        assert closed.end_offset == 36
        assert location.end_tag is None

    def test_element_attrs_when_start_tag_has_none(self) -> None:
        attrs = {"id": SimpleLocation(line=1, column=4, start_offset=3, end_offset=9)}
        location = ElementLocation(
            start_tag=SimpleLocation(line=1, column=1, start_offset=0, end_offset=10),
            attrs=attrs,
        )
        assert location.attrs is attrs

    def test_start_tag_attrs_take_precedence(self) -> None:
        tag_attrs = {"id": SimpleLocation(line=1, column=4, start_offset=3, end_offset=9)}
        other = {"id": SimpleLocation(line=1, column=5, start_offset=4, end_offset=9)}
        location = ElementLocation(
            start_tag=SimpleLocation(
                line=1, column=1, start_offset=0, end_offset=10, attrs=tag_attrs,
            ),
            attrs=other,
        )
        assert location.attrs is tag_attrs
        assert dataclasses.replace(location, end_tag=None).attrs is tag_attrs

    def test_deepcopy(self) -> None:
        location = ElementLocation(
            start_tag=SimpleLocation(line=1, column=1, start_offset=0, end_offset=3, attrs={}),
        )
        assert copy.deepcopy(location) == location


class TestLocationOffset:
    def test_only_first_line_shifts_columns(self) -> None:
        offset = LocationOffset(line=10, column=6)
        assert correct_position(Position(0, 2), offset) == Position(10, 8)
        assert correct_position(Position(3, 2), offset) == Position(13, 2)

    def test_correct_source_range_uses_offset_filename(self) -> None:
        source_range = SourceRange("inline.js", Position(0, 0), Position(1, 4))
        corrected = correct_source_range(
            source_range, LocationOffset(line=2, column=5, filename="page.html"),
        )
        assert corrected == SourceRange("page.html", Position(2, 5), Position(3, 4))

    def test_none_passes_through(self) -> None:
        assert correct_source_range(None, LocationOffset(1, 1)) is None
        source_range = SourceRange("a", Position(0, 0), Position(0, 1))
        assert correct_source_range(source_range, None) is source_range

    def test_uncorrect_inverts_correct(self) -> None:
        offset = LocationOffset(line=4, column=7, filename="page.html")
        source_range = SourceRange("inline.css", Position(0, 3), Position(2, 1))
        corrected = correct_source_range(source_range, offset)
        assert uncorrect_source_range(corrected, offset, "inline.css") == source_range

    def test_uncorrect_before_inline_document(self) -> None:
        offset = LocationOffset(line=4, column=7)
        before = SourceRange("page.html", Position(4, 2), Position(4, 9))
        assert uncorrect_source_range(before, offset) is None
