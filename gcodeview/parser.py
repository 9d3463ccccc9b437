"""Stateful G-code interpreter that turns commands into point segments."""

from __future__ import annotations

import math
import struct
from collections.abc import Iterable, Sequence

from .preprocessor import (
    generate_g1_from_points,
    generate_points_along_arc,
    override_speed,
    parse_codes,
    parse_coord,
    remove_all_whitespace,
    remove_comment,
    split_command,
    truncate_decimals,
    update_center_with_command,
    update_point_with_command,
)
from .segments import INCH_TO_MM, Plane, PointSegment, Vec3

_FLOAT32_MAX = 3.4028234663852886e38


def _f32(value: float) -> float:
    """Round a number to single precision, as G codes are compared in it."""
    if math.isnan(value) or math.isinf(value):
        return value
    if abs(value) > _FLOAT32_MAX:
        return math.copysign(math.inf, value)
    return struct.unpack("f", struct.pack("f", value))[0]


_G0 = _f32(0.0)
_G1 = _f32(1.0)
_G2 = _f32(2.0)
_G3 = _f32(3.0)
_G17 = _f32(17.0)
_G18 = _f32(18.0)
_G19 = _f32(19.0)
_G20 = _f32(20.0)
_G21 = _f32(21.0)
_G38_2 = _f32(38.2)
_G90 = _f32(90.0)
_G90_1 = _f32(90.1)
_G91 = _f32(91.0)
_G91_1 = _f32(91.1)

_MOTION_CODES = frozenset({_G0, _G1, _G2, _G3, _G38_2})


class GcodeParser:
    """Interprets G-code commands one at a time, tracking machine state.

    Settings are plain attributes: ``speed_override`` (percent, disabled when
    not positive), ``truncate_decimal_length`` (disabled when not positive),
    ``remove_whitespace``, ``convert_arcs`` (expand arcs into G1 lines while
    preprocessing), ``small_arc_threshold``, ``small_arc_segment_length`` and
    ``traverse_speed``.
    """

    def __init__(self) -> None:
        self._is_metric = True
        self._in_absolute_mode = True
        self._in_absolute_ijk_mode = False
        self._last_gcode_command = -1.0
        self._command_number = 0

        self.speed_override = -1.0
        self.truncate_decimal_length = 40
        self.remove_whitespace = True
        self.convert_arcs = False
        self.small_arc_threshold = 1.0
        self.small_arc_segment_length = 0.3
        self.traverse_speed = 300.0

        self._last_speed = 0.0
        self._last_spindle_speed = 0.0

        self._points: list[PointSegment] = []
        self._current_point = Vec3()
        self._current_plane = Plane.XY
        self.reset()

    @property
    def current_point(self) -> Vec3:
        """The end point of the last processed motion."""
        return self._current_point

    @property
    def current_plane(self) -> Plane:
        return self._current_plane

    @property
    def is_metric(self) -> bool:
        return self._is_metric

    @property
    def in_absolute_mode(self) -> bool:
        return self._in_absolute_mode

    @property
    def in_absolute_ijk_mode(self) -> bool:
        return self._in_absolute_ijk_mode

    @property
    def point_segments(self) -> list[PointSegment]:
        """All point segments produced so far, starting with the home point."""
        return list(self._points)

    @property
    def command_number(self) -> int:
        """Line number given to the most recent motion segment."""
        return self._command_number - 1

    def reset(self) -> None:
        """Drop all segments and return to the home position on the XY plane."""
        self._points.clear()
        self._current_point = Vec3(0.0, 0.0, 0.0)
        self._current_plane = Plane.XY
        self._points.append(PointSegment(point=self._current_point, line_number=-1))

    def add_command(self, command: str) -> PointSegment | None:
        """Process one line of G-code text; returns the segment it produced, if any."""
        return self.add_args(split_command(remove_comment(command)))

    def add_args(self, args: Sequence[str]) -> PointSegment | None:
        """Process a command already split into words."""
        if not args:
            return None
        return self._process_command(args)

    def expand_arc(self) -> list[PointSegment]:
        """Replace a trailing arc segment by line segments along the arc.

        Returns the new segments, or an empty list when the last segment is
        not an arc or could not be expanded.
        """
        if len(self._points) < 2:
            return []
        start_segment = self._points[-2]
        last_segment = self._points[-1]
        if not last_segment.is_arc:
            return []

        center = last_segment.center
        if center is None:
            center = Vec3(math.nan, math.nan, math.nan)

        expanded = generate_points_along_arc(
            start_segment.plane,
            start_segment.point,
            last_segment.point,
            center,
            last_segment.is_clockwise,
            last_segment.radius,
            self.small_arc_threshold,
            self.small_arc_segment_length,
            False,
        )
        if not expanded:
            return []

        self._points.pop()
        self._command_number -= 1

        created: list[PointSegment] = []
        for point in expanded[1:]:
            segment = PointSegment(point=point, line_number=self._command_number)
            self._command_number += 1
            segment.is_metric = last_segment.is_metric
            self._points.append(segment)
            created.append(segment)

        self._current_point = self._points[-1].point
        return created

    def preprocess_commands(self, commands: Iterable[str]) -> list[str]:
        """Preprocess many commands, concatenating the results."""
        return [line for command in commands for line in self.preprocess_command(command)]

    def preprocess_command(self, command: str) -> list[str]:
        """Normalise a command according to the parser settings.

        Comments are kept at the end of their line, comment-only lines are kept
        whole and empty lines disappear.
        """
        new_command = remove_comment(command)
        raw_command = new_command
        has_comment = len(new_command) != len(command)

        if self.remove_whitespace:
            new_command = remove_all_whitespace(new_command)

        if not new_command:
            return [command] if has_comment else []

        if self.speed_override > 0:
            new_command = override_speed(new_command, self.speed_override)
        if self.truncate_decimal_length > 0:
            new_command = truncate_decimals(self.truncate_decimal_length, new_command)

        if self.convert_arcs:
            arc_lines = self.convert_arcs_to_lines(new_command)
            return arc_lines if arc_lines else [new_command]
        if has_comment:
            return [command.replace(raw_command, new_command)]
        return [new_command]

    def convert_arcs_to_lines(self, command: str) -> list[str]:
        """Process a command and, if it is an arc, return G1 lines that trace it."""
        start = self._current_point
        segment = self.add_command(command)
        if segment is None or not segment.is_arc:
            return []

        lines: list[str] = []
        for piece in self.expand_arc():
            lines.append(
                generate_g1_from_points(
                    start, piece.point, self._in_absolute_mode, self.truncate_decimal_length
                )
            )
            start = piece.point
        return lines

    def _process_command(self, args: Sequence[str]) -> PointSegment | None:
        speed = parse_coord(args, "F")
        if not math.isnan(speed):
            self._last_speed = speed if self._is_metric else speed * INCH_TO_MM

        spindle_speed = parse_coord(args, "S")
        if not math.isnan(spindle_speed):
            self._last_spindle_speed = spindle_speed

        dwell = parse_coord(args, "P")
        if not math.isnan(dwell):
            self._points[-1].dwell = dwell

        codes = [_f32(code) for code in parse_codes(args, "G")]
        if not codes and self._last_gcode_command != -1:
            codes.append(self._last_gcode_command)

        segment = None
        for code in codes:
            segment = self._handle_g_code(code, args)
        return segment

    def _handle_g_code(self, code: float, args: Sequence[str]) -> PointSegment | None:
        segment = None
        next_point = update_point_with_command(args, self._current_point, self._in_absolute_mode)

        if code == _G0:
            segment = self._add_linear_segment(next_point, True)
        elif code in (_G1, _G38_2):
            segment = self._add_linear_segment(next_point, False)
        elif code == _G2:
            segment = self._add_arc_segment(next_point, True, args)
        elif code == _G3:
            segment = self._add_arc_segment(next_point, False, args)
        elif code == _G17:
            self._current_plane = Plane.XY
        elif code == _G18:
            self._current_plane = Plane.ZX
        elif code == _G19:
            self._current_plane = Plane.YZ
        elif code == _G20:
            self._is_metric = False
        elif code == _G21:
            self._is_metric = True
        elif code == _G90:
            self._in_absolute_mode = True
        elif code == _G90_1:
            self._in_absolute_ijk_mode = True
        elif code == _G91:
            self._in_absolute_mode = False
        elif code == _G91_1:
            self._in_absolute_ijk_mode = False

        if code in _MOTION_CODES:
            self._last_gcode_command = code
        return segment

    def _next_segment(self, next_point: Vec3) -> PointSegment:
        segment = PointSegment(point=next_point, line_number=self._command_number)
        self._command_number += 1
        return segment

    def _add_linear_segment(self, next_point: Vec3, fast_traverse: bool) -> PointSegment:
        segment = self._next_segment(next_point)
        current = self._current_point
        segment.is_metric = self._is_metric
        segment.is_z_movement = (
            current.x == next_point.x and current.y == next_point.y and current.z != next_point.z
        )
        segment.is_fast_traverse = fast_traverse
        segment.is_absolute = self._in_absolute_mode
        segment.speed = self.traverse_speed if fast_traverse else self._last_speed
        segment.spindle_speed = self._last_spindle_speed
        self._points.append(segment)
        self._current_point = next_point
        return segment

    def _add_arc_segment(
        self, next_point: Vec3, clockwise: bool, args: Sequence[str]
    ) -> PointSegment:
        segment = self._next_segment(next_point)
        center = update_center_with_command(
            args, self._current_point, next_point, self._in_absolute_ijk_mode, clockwise
        )
        radius = parse_coord(args, "R")
        if math.isnan(radius):
            current = self._current_point.to_plane(self._current_plane)
            rotated_center = center.to_plane(self._current_plane)
            radius = math.sqrt(
                (current.x - rotated_center.x) ** 2 + (current.y - rotated_center.y) ** 2
            )

        segment.is_metric = self._is_metric
        segment.set_arc_center(center)
        segment.radius = radius
        segment.is_clockwise = clockwise
        segment.is_absolute = self._in_absolute_mode
        segment.speed = self._last_speed
        segment.spindle_speed = self._last_spindle_speed
        segment.plane = self._current_plane
        self._points.append(segment)
        self._current_point = next_point
        return segment