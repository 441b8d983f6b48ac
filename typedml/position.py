"""Source positions: 1-based lines, 0-based raw character columns."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict

# Approximate line width used to rank multi-line ranges against single-line ones.
LINE_WIDTH_ESTIMATE = 80


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    column: int


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Point
    end: Point

    @property
    def is_single_line(self) -> bool:
        return self.start.line == self.end.line


class PositionLike(Protocol):
    line: int
    column: int


class RangeLike(Protocol):
    start: PositionLike
    end: PositionLike


def create_point(line: int, column: int) -> Point:
    return Point(line=line, column=column)


def create_position(start_line: int, start_column: int, end_line: int, end_column: int) -> Position:
    return Position(start=create_point(start_line, start_column), end=create_point(end_line, end_column))


def create_line_position(line: int, start_column: int, end_column: int) -> Position:
    """Position of a span that starts and ends on the same line."""
    return create_position(line, start_column, line, end_column)


def is_position_in_range(position: PositionLike, range_: RangeLike | None) -> bool:
    if range_ is None:
        return False
    after_start = position.line > range_.start.line or (
        position.line == range_.start.line and position.column >= range_.start.column
    )
    before_end = position.line < range_.end.line or (
        position.line == range_.end.line and position.column <= range_.end.column
    )
    return after_start and before_end


def range_size(position: RangeLike) -> int:
    if position.start.line == position.end.line:
        return position.end.column - position.start.column
    return (
        (position.end.line - position.start.line) * LINE_WIDTH_ESTIMATE
        + position.end.column
        + (LINE_WIDTH_ESTIMATE - position.start.column)
    )


__all__ = [
    "Point",
    "Position",
    "PositionLike",
    "RangeLike",
    "create_point",
    "create_position",
    "create_line_position",
    "is_position_in_range",
    "range_size",
]
