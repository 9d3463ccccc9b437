"""Turns parsed G-code into straight line segments suitable for display."""

from __future__ import annotations

import math
from collections.abc import Iterable

from .parser import GcodeParser
from .preprocessor import generate_points_along_arc
from .segments import LineSegment, PointSegment, Vec3

_NAN_VEC = Vec3(math.nan, math.nan, math.nan)


def _nan_min(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return min(a, b)


def _nan_max(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)


class GcodeViewParse:
    """Collects line segments from a parser, expanding arcs, and tracks extents."""

    MIN_ARC_LENGTH = 0.1

    def __init__(self) -> None:
        self._lines: list[LineSegment] = []
        self._line_indexes: list[list[int]] = []
        self._min = _NAN_VEC
        self._max = _NAN_VEC
        self._min_length = math.nan

    @property
    def minimum_extremes(self) -> Vec3:
        """Smallest coordinates reached by any segment end point."""
        return self._min

    @property
    def maximum_extremes(self) -> Vec3:
        """Largest coordinates reached by any segment end point."""
        return self._max

    @property
    def min_length(self) -> float:
        """Shortest non-zero straight-line length seen, NaN when none."""
        return self._min_length

    @property
    def lines(self) -> list[LineSegment]:
        """All line segments collected so far."""
        return self._lines

    @property
    def line_indexes(self) -> list[list[int]]:
        """For each command line number, the indexes of its line segments."""
        return self._line_indexes

    def reset(self) -> None:
        """Forget all segments and extents."""
        self._lines.clear()
        self._line_indexes.clear()
        self._min = _NAN_VEC
        self._max = _NAN_VEC
        self._min_length = math.nan

    def _test_extremes(self, point: Vec3) -> None:
        self._min = Vec3(
            _nan_min(self._min.x, point.x),
            _nan_min(self._min.y, point.y),
            _nan_min(self._min.z, point.z),
        )
        self._max = Vec3(
            _nan_max(self._max.x, point.x),
            _nan_max(self._max.y, point.y),
            _nan_max(self._max.z, point.z),
        )

    def _test_length(self, start: Vec3, end: Vec3) -> None:
        length = (start - end).length()
        if not math.isnan(length) and length != 0:
            self._min_length = (
                length if math.isnan(self._min_length) else min(self._min_length, length)
            )

    def _append(self, line: LineSegment, command_line: int) -> None:
        self._lines.append(line)
        self._line_indexes[command_line].append(len(self._lines) - 1)

    def to_obj_redux(
        self, gcode: Iterable[str], arc_precision: float, arc_degree_mode: bool
    ) -> list[LineSegment]:
        """Parse G-code lines with a fresh parser and collect their segments."""
        parser = GcodeParser()
        for command in gcode:
            parser.add_command(command)
        return self.get_lines_from_parser(parser, arc_precision, arc_degree_mode)

    def get_lines_from_parser(
        self, parser: GcodeParser, arc_precision: float, arc_degree_mode: bool
    ) -> list[LineSegment]:
        """Convert the parser's point segments into line segments, metric throughout."""
        segments: list[PointSegment] = parser.point_segments
        count = len(segments)
        extra = max(0, count - len(self._line_indexes))
        del self._line_indexes[count:]
        self._line_indexes.extend([] for _ in range(extra))

        line_index = 0
        start: Vec3 | None = None
        for ps in segments:
            was_metric = ps.is_metric
            ps.convert_to_metric()
            end = ps.point

            if start is not None:
                if ps.is_arc:
                    center = ps.center if ps.center is not None else _NAN_VEC
                    points = generate_points_along_arc(
                        ps.plane,
                        start,
                        end,
                        center,
                        ps.is_clockwise,
                        ps.radius,
                        self.MIN_ARC_LENGTH,
                        arc_precision,
                        arc_degree_mode,
                    )
                    if points:
                        start_point = start
                        for next_point in points:
                            if next_point == start_point:
                                continue
                            line = LineSegment(
                                start=start_point,
                                end=next_point,
                                line_number=line_index,
                                is_arc=True,
                                is_clockwise=ps.is_clockwise,
                                plane=ps.plane,
                                is_fast_traverse=ps.is_fast_traverse,
                                is_z_movement=ps.is_z_movement,
                                is_metric=was_metric,
                                is_absolute=ps.is_absolute,
                                speed=ps.speed,
                                spindle_speed=ps.spindle_speed,
                                dwell=ps.dwell,
                            )
                            self._test_extremes(next_point)
                            self._append(line, ps.line_number)
                            start_point = next_point
                        line_index += 1
                else:
                    line = LineSegment(
                        start=start,
                        end=end,
                        line_number=line_index,
                        is_arc=False,
                        is_fast_traverse=ps.is_fast_traverse,
                        is_z_movement=ps.is_z_movement,
                        is_metric=was_metric,
                        is_absolute=ps.is_absolute,
                        speed=ps.speed,
                        spindle_speed=ps.spindle_speed,
                        dwell=ps.dwell,
                    )
                    line_index += 1
                    self._test_extremes(end)
                    self._test_length(start, end)
                    self._append(line, ps.line_number)
            start = end

        return list(self._lines)

    def resolution(self) -> tuple[int, int]:
        """Grid size covering the XY extents at the shortest segment length."""
        if math.isnan(self._min_length):
            raise ValueError("no line of non-zero length has been parsed")
        width = (self._max.x - self._min.x) / self._min_length + 1
        height = (self._max.y - self._min.y) / self._min_length + 1
        return int(width), int(height)