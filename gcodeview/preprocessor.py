"""Text and geometry helpers used while reading and rewriting G-code commands."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence

from .segments import Plane, Vec3

logger = logging.getLogger(__name__)

_NAN = math.nan
_TWO_PI = math.pi * 2

_SPEED_RE = re.compile(r"[Ff]([0-9.]+)")
_PAREN_COMMENT_RE = re.compile(r"\(+[^\(]*\)+", re.DOTALL)
_SEMICOLON_COMMENT_RE = re.compile(r";.*", re.DOTALL)
_COMMENT_RE = re.compile(r"(\([^\(\)]*\)|;[^;].*)", re.DOTALL)
_DECIMAL_RE = re.compile(r"(\d*\.\d*)")
_WHITESPACE_RE = re.compile(r"\s")
_G_CODE_RE = re.compile(r"[Gg]0*(\d+)")
_M_CODE_RE = re.compile(r"[Mm]0*(\d+)")


def _to_double(text: str) -> float:
    """Parse a number leniently: anything unparsable reads as 0."""
    if "_" in text:
        return 0.0
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_letter(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def _latin1(ch: str) -> str:
    return ch if ord(ch) < 256 else "?"


def _first_upper(word: str) -> str:
    return word[0].upper()[:1]


def _divide(numerator: float, denominator: float) -> float:
    """Floating-point division with IEEE results for a zero denominator."""
    if denominator != 0:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return _NAN
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def override_speed(command: str, speed: float) -> str:
    """Replace every feed word with the first feed scaled to ``speed`` percent."""
    match = _SPEED_RE.search(command)
    if match is None:
        return command
    value = _to_double(match.group(1)) / 100 * speed
    replacement = f"F{value:g}"
    return _SPEED_RE.sub(lambda _m: replacement, command)


def remove_comment(command: str) -> str:
    """Strip parenthesised and semicolon comments and surrounding whitespace."""
    if "(" in command:
        command = _PAREN_COMMENT_RE.sub("", command)
    if ";" in command:
        command = _SEMICOLON_COMMENT_RE.sub("", command)
    return command.strip()


def parse_comment(command: str) -> str:
    """The first comment in the command, delimiters included, or an empty string."""
    match = _COMMENT_RE.search(command)
    return match.group(1) if match else ""


def truncate_decimals(length: int, command: str) -> str:
    """Rewrite every decimal number with exactly ``length`` fractional digits."""
    pos = 0
    while True:
        match = _DECIMAL_RE.search(command, pos)
        if match is None:
            return command
        start = match.start()
        new_number = f"{_to_double(match.group(1)):.{length}f}"
        command = command[:start] + new_number + command[match.end():]
        pos = start + len(new_number) + 1


def remove_all_whitespace(command: str) -> str:
    """Remove every whitespace character."""
    return _WHITESPACE_RE.sub("", command)


def parse_codes(args: Sequence[str], code: str) -> list[float]:
    """Numeric values of every word that starts with the letter ``code``."""
    letter = code.upper()
    return [_to_double(word[1:]) for word in args if word and _first_upper(word) == letter]


def parse_g_codes(command: str) -> list[int]:
    """Integer G codes found anywhere in the command text."""
    return [int(m.group(1)) for m in _G_CODE_RE.finditer(command)]


def parse_m_codes(command: str) -> list[int]:
    """Integer M codes found anywhere in the command text."""
    return [int(m.group(1)) for m in _M_CODE_RE.finditer(command)]


def split_command(command: str) -> list[str]:
    """Split a command into words such as ``G1``, ``X10`` and ``Y-5.5``; spaces are ignored."""
    words: list[str] = []
    read_numeric = False
    current: list[str] = []

    for ch in map(_latin1, command):
        if read_numeric and not _is_digit(ch) and ch != ".":
            read_numeric = False
            words.append("".join(current))
            current = [ch] if _is_letter(ch) else []
        elif _is_digit(ch) or ch in ".-":
            current.append(ch)
            read_numeric = True
        elif _is_letter(ch):
            current.append(ch)

    if current:
        words.append("".join(current))
    return words


def parse_coord(args: Sequence[str], letter: str) -> float:
    """Value of the first word starting with ``letter``, or NaN when absent."""
    wanted = letter.upper()
    for word in args:
        if word and _first_upper(word) == wanted:
            return _to_double(word[1:])
    return _NAN


def update_point(initial: Vec3, x: float, y: float, z: float, absolute_mode: bool) -> Vec3:
    """Apply coordinates to a point; NaN coordinates leave that axis unchanged."""
    def axis(old: float, new: float) -> float:
        if math.isnan(new):
            return old
        return new if absolute_mode else old + new

    return Vec3(axis(initial.x, x), axis(initial.y, y), axis(initial.z, z))


def update_point_with_command(
    args: Sequence[str] | str, initial: Vec3, absolute_mode: bool
) -> Vec3:
    """Apply the X, Y and Z words of a command (text or split words) to a point."""
    if isinstance(args, str):
        args = split_command(args)
    coords = {"X": _NAN, "Y": _NAN, "Z": _NAN}
    for word in args:
        if word:
            letter = _latin1(_first_upper(word))
            if letter in coords:
                coords[letter] = _to_double(word[1:])
    return update_point(initial, coords["X"], coords["Y"], coords["Z"], absolute_mode)


def convert_r_to_center(
    start: Vec3, end: Vec3, radius: float, absolute_ijk: bool, clockwise: bool
) -> Vec3:
    """Centre of an arc given by its radius; a negative radius selects the long arc."""
    x = end.x - start.x
    y = end.y - start.y

    h_x2_div_d = 4 * radius * radius - x * x - y * y
    if h_x2_div_d < 0:
        logger.warning("Error computing arc radius.")
        root = _NAN
    else:
        root = math.sqrt(h_x2_div_d) if not math.isnan(h_x2_div_d) else _NAN
    h_x2_div_d = _divide(-root, math.hypot(x, y))

    if not clockwise:
        h_x2_div_d = -h_x2_div_d
    if radius < 0:
        h_x2_div_d = -h_x2_div_d

    offset_x = 0.5 * (x - y * h_x2_div_d)
    offset_y = 0.5 * (y + x * h_x2_div_d)

    if absolute_ijk:
        return Vec3(offset_x, offset_y, 0.0)
    return Vec3(start.x + offset_x, start.y + offset_y, 0.0)


def update_center_with_command(
    args: Sequence[str],
    initial: Vec3,
    next_point: Vec3,
    absolute_ijk_mode: bool,
    clockwise: bool,
) -> Vec3:
    """Arc centre from the I, J, K words, or from R when none of them is given."""
    values = {"I": _NAN, "J": _NAN, "K": _NAN, "R": _NAN}
    for word in args:
        if word:
            letter = _latin1(_first_upper(word))
            if letter in values:
                values[letter] = _to_double(word[1:])

    i, j, k = values["I"], values["J"], values["K"]
    if math.isnan(i) and math.isnan(j) and math.isnan(k):
        return convert_r_to_center(initial, next_point, values["R"], absolute_ijk_mode, clockwise)
    return update_point(initial, i, j, k, absolute_ijk_mode)


def generate_g1_from_points(start: Vec3, end: Vec3, absolute_mode: bool, precision: int) -> str:
    """A G1 command moving from ``start`` to ``end``."""
    parts = ["G1"]
    for letter, target, origin in zip("XYZ", end, start):
        if math.isnan(target):
            continue
        value = target if absolute_mode else target - origin
        parts.append(f"{letter}{value:.{precision}f}")
    return "".join(parts)


def get_angle(start: Vec3, end: Vec3) -> float:
    """Angle in radians, in [0, 2*pi), of the direction from ``start`` to ``end``."""
    delta_x = end.x - start.x
    delta_y = end.y - start.y

    if delta_x != 0:
        if delta_x > 0 and delta_y >= 0:
            return math.atan(delta_y / delta_x)
        if delta_x < 0 and delta_y >= 0:
            return math.pi - abs(math.atan(delta_y / delta_x))
        if delta_x < 0 and delta_y < 0:
            return math.pi + abs(math.atan(delta_y / delta_x))
        if delta_x > 0 and delta_y < 0:
            return _TWO_PI - abs(math.atan(delta_y / delta_x))
        return 0.0
    return math.pi / 2.0 if delta_y > 0 else math.pi * 3.0 / 2.0


def calculate_sweep(start_angle: float, end_angle: float, is_cw: bool) -> float:
    """Angle swept going from ``start_angle`` to ``end_angle`` in the given direction."""
    if start_angle == end_angle:
        return _TWO_PI
    if end_angle == 0:
        end_angle = _TWO_PI
    if not is_cw and end_angle < start_angle:
        return (_TWO_PI - start_angle) + end_angle
    if is_cw and end_angle > start_angle:
        return (_TWO_PI - end_angle) + start_angle
    return abs(end_angle - start_angle)


def generate_points_along_arc(
    plane: Plane,
    start: Vec3,
    end: Vec3,
    center: Vec3,
    clockwise: bool,
    radius: float,
    min_arc_length: float,
    arc_precision: float,
    arc_degree_mode: bool,
) -> list[Vec3]:
    """Points along an arc after the start point, ending with ``end``.

    The precision is a maximum segment length, or a maximum angle in degrees
    when ``arc_degree_mode`` is set. An empty list means the centre is unknown.
    """
    start = start.to_plane(plane)
    end = end.to_plane(plane)
    center = center.to_plane(plane)

    if math.isnan(center.length()):
        return []

    if radius == 0:
        radius = math.sqrt((start.x - center.x) ** 2 + (end.y - center.y) ** 2)

    start_angle = get_angle(center, start)
    end_angle = get_angle(center, end)
    sweep = calculate_sweep(start_angle, end_angle, clockwise)
    arc_length = sweep * radius

    if arc_degree_mode and arc_precision > 0:
        count = sweep / (math.pi * arc_precision / 180)
        count = count if 1.0 < count else 1.0
    else:
        if arc_precision <= 0 and min_arc_length > 0:
            arc_precision = min_arc_length
        if arc_precision == 0:
            raise ValueError("arc precision must not be zero")
        ratio = arc_length / arc_precision
        if not math.isfinite(ratio):
            raise ValueError("cannot subdivide arc")
        count = math.ceil(ratio)
    if not math.isfinite(count):
        raise ValueError("cannot subdivide arc")
    return interpolate_arc(
        plane, start, end, center, clockwise, radius, start_angle, sweep, int(count)
    )


def interpolate_arc(
    plane: Plane,
    p1: Vec3,
    p2: Vec3,
    center: Vec3,
    is_cw: bool,
    radius: float,
    start_angle: float,
    sweep: float,
    num_points: int,
) -> list[Vec3]:
    """Split an arc given in plane coordinates into ``num_points`` steps.

    Intermediate points are rotated back out of the working plane; the last
    point is ``p2`` rotated back.
    """
    if num_points <= 1:
        return [p2.from_plane(plane)]

    if radius == 0:
        radius = math.sqrt((p1.x - center.x) ** 2 + (p1.y - center.y) ** 2)

    z_increment = (p2.z - p1.z) / num_points
    z = p1.z
    segments: list[Vec3] = []
    for step in range(1, num_points):
        offset = step * sweep / num_points
        angle = start_angle - offset if is_cw else start_angle + offset
        if angle >= _TWO_PI:
            angle -= _TWO_PI
        z += z_increment
        point = Vec3(math.cos(angle) * radius + center.x, math.sin(angle) * radius + center.y, z)
        segments.append(point.from_plane(plane))

    segments.append(p2.from_plane(plane))
    return segments