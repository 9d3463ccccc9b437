import math

import pytest

from gcodeview.preprocessor import (
    calculate_sweep,
    convert_r_to_center,
    generate_g1_from_points,
    generate_points_along_arc,
    get_angle,
    interpolate_arc,
    override_speed,
    parse_codes,
    parse_comment,
    parse_coord,
    parse_g_codes,
    parse_m_codes,
    remove_all_whitespace,
    remove_comment,
    split_command,
    truncate_decimals,
    update_center_with_command,
    update_point,
    update_point_with_command,
)
from gcodeview.segments import Plane, Vec3


def _distance(a, b):
    return (a - b).length()


def test_override_speed_full_percentage_keeps_value():
    assert override_speed("G1X1F100", 100) == "G1X1F100"


def test_override_speed_normalises_lowercase_letter():
    assert override_speed("G1f200", 100) == "G1F200"


def test_override_speed_without_feed_is_unchanged():
    assert override_speed("G0X5Y5", 50) == "G0X5Y5"


def test_remove_comment_parentheses_and_semicolon():
    assert remove_comment("G0 X1 (rapid move)") == "G0 X1"
    assert remove_comment("  G1 Y2 ; trailing note") == "G1 Y2"


def test_remove_comment_only_comment_is_empty():
    assert remove_comment("(just a comment)") == ""


def test_parse_comment():
    assert parse_comment("G0 X1 (move)") == "(move)"
    assert parse_comment("G0 X1 ; hello") == "; hello"
    assert parse_comment("G0 X1") == ""


def test_truncate_decimals_pads_and_skips_integers():
    assert truncate_decimals(2, "X1.5Y2.25") == "X1.50Y2.25"
    assert truncate_decimals(3, "G1X10") == "G1X10"


def test_truncate_decimals_fixes_fraction_length():
    result = truncate_decimals(4, "X1.123456789")
    assert result.startswith("X1.")
    assert len(result.split(".")[1]) == 4


def test_remove_all_whitespace():
    assert remove_all_whitespace("G0 X1\tY2\n") == "G0X1Y2"


def test_parse_codes():
    assert parse_codes(["G1", "X10", "g2"], "G") == [1.0, 2.0]
    assert parse_codes(["X1", "Y2"], "G") == []


def test_parse_g_and_m_codes():
    assert parse_g_codes("G01G2 G038.2") == [1, 2, 38]
    assert parse_m_codes("M3S1000m05") == [3, 5]


def test_split_command():
    assert split_command("G1X10Y-5.5") == ["G1", "X10", "Y-5.5"]
    assert split_command("x1.5 y2") == ["x1.5", "y2"]


def test_split_command_join_round_trip():
    command = "G2X10Y20I5J0F300"
    assert "".join(split_command(command)) == command


def test_parse_coord_first_match_and_missing():
    args = ["G1", "X10", "x20"]
    assert parse_coord(args, "X") == 10.0
    assert math.isnan(parse_coord(args, "Z"))


def test_update_point_absolute_and_relative_from_origin_agree():
    origin = Vec3()
    absolute = update_point(origin, 5.0, math.nan, 7.0, True)
    relative = update_point(origin, 5.0, math.nan, 7.0, False)
    assert absolute == relative == Vec3(5.0, 0.0, 7.0)


def test_update_point_relative_adds_offset():
    initial = Vec3(1.0, 2.0, 3.0)
    offset = Vec3(4.0, 0.0, 0.0)
    assert update_point(initial, 4.0, math.nan, math.nan, False) == initial + offset
    assert update_point(initial, 4.0, math.nan, math.nan, True) == Vec3(4.0, 2.0, 3.0)


def test_update_point_with_command_text_and_words_agree():
    initial = Vec3(1.0, 1.0, 1.0)
    from_text = update_point_with_command("G1 X5 Z9", initial, True)
    from_words = update_point_with_command(["G1", "X5", "Z9"], initial, True)
    assert from_text == from_words == Vec3(5.0, 1.0, 9.0)


def test_update_point_with_command_last_value_wins():
    assert update_point_with_command(["X1", "X2"], Vec3(), True) == Vec3(2.0, 0.0, 0.0)


@pytest.mark.parametrize("clockwise", [True, False])
def test_convert_r_to_center_is_at_radius_from_both_ends(clockwise):
    start = Vec3(0.0, 0.0, 0.0)
    end = Vec3(10.0, 0.0, 0.0)
    center = convert_r_to_center(start, end, 10.0, False, clockwise)
    assert _distance(center, start) == pytest.approx(10.0)
    assert _distance(center, end) == pytest.approx(10.0)


def test_convert_r_to_center_direction_mirrors_center():
    start = Vec3(0.0, 0.0, 0.0)
    end = Vec3(10.0, 0.0, 0.0)
    cw = convert_r_to_center(start, end, 10.0, False, True)
    ccw = convert_r_to_center(start, end, 10.0, False, False)
    assert cw.x == pytest.approx(ccw.x)
    assert cw.y == pytest.approx(-ccw.y)


def test_convert_r_to_center_negative_radius_picks_other_side():
    start = Vec3(0.0, 0.0, 0.0)
    end = Vec3(10.0, 0.0, 0.0)
    positive = convert_r_to_center(start, end, 10.0, False, True)
    negative = convert_r_to_center(start, end, -10.0, False, True)
    assert positive.y == pytest.approx(-negative.y)


def test_convert_r_to_center_absolute_ijk_is_offset():
    start = Vec3(3.0, 4.0, 0.0)
    end = Vec3(13.0, 4.0, 0.0)
    relative = convert_r_to_center(start, end, 10.0, False, True)
    absolute = convert_r_to_center(start, end, 10.0, True, True)
    assert relative.x == pytest.approx(start.x + absolute.x)
    assert relative.y == pytest.approx(start.y + absolute.y)


def test_update_center_with_ij_offsets():
    start = Vec3(1.0, 1.0, 0.0)
    center = update_center_with_command(["G2", "I2", "J0"], start, Vec3(5.0, 1.0, 0.0), False, True)
    assert center == start + Vec3(2.0, 0.0, 0.0)


def test_update_center_with_r_matches_conversion():
    start = Vec3(0.0, 0.0, 0.0)
    end = Vec3(10.0, 0.0, 0.0)
    via_args = update_center_with_command(["G2", "X10", "R10"], start, end, False, True)
    assert via_args == convert_r_to_center(start, end, 10.0, False, True)


def test_generate_g1_absolute_and_relative():
    start = Vec3(1.0, 1.0, 1.0)
    end = Vec3(1.0, 2.0, 3.0)
    assert generate_g1_from_points(start, end, True, 3) == "G1X1.000Y2.000Z3.000"
    assert generate_g1_from_points(start, Vec3(2.0, 3.0, 1.0), False, 1) == "G1X1.0Y2.0Z0.0"


def test_generate_g1_skips_nan_axes():
    result = generate_g1_from_points(Vec3(), Vec3(1.0, math.nan, math.nan), True, 0)
    assert result == "G1X1"


@pytest.mark.parametrize(
    "end, expected",
    [
        (Vec3(1.0, 0.0, 0.0), 0.0),
        (Vec3(0.0, 1.0, 0.0), math.pi / 2),
        (Vec3(-1.0, 0.0, 0.0), math.pi),
        (Vec3(0.0, -1.0, 0.0), math.pi * 3 / 2),
        (Vec3(1.0, 1.0, 0.0), math.pi / 4),
    ],
)
def test_get_angle(end, expected):
    assert get_angle(Vec3(), end) == pytest.approx(expected)


def test_calculate_sweep_full_circle():
    assert calculate_sweep(1.0, 1.0, True) == pytest.approx(2 * math.pi)


@pytest.mark.parametrize("start_angle, end_angle", [(0.0, math.pi / 2), (math.pi, 0.5), (0.3, 4.0)])
def test_calculate_sweep_directions_complement(start_angle, end_angle):
    cw = calculate_sweep(start_angle, end_angle, True)
    ccw = calculate_sweep(start_angle, end_angle, False)
    assert cw + ccw == pytest.approx(2 * math.pi)


def test_arc_degree_mode_points_on_circle_and_end_exact():
    start = Vec3(1.0, 0.0, 0.0)
    end = Vec3(0.0, 1.0, 0.0)
    points = generate_points_along_arc(Plane.XY, start, end, Vec3(), False, 1.0, 0.1, 10.0, True)
    assert points[-1] == end
    assert len(points) > 1
    for point in points:
        assert point.length() == pytest.approx(1.0)
        assert point.x >= -1e-9 and point.y >= -1e-9


def test_arc_clockwise_goes_the_long_way():
    start = Vec3(1.0, 0.0, 0.0)
    end = Vec3(0.0, 1.0, 0.0)
    points = generate_points_along_arc(Plane.XY, start, end, Vec3(), True, 1.0, 0.1, 10.0, True)
    assert any(point.y < -0.5 for point in points)
    assert points[-1] == end


def test_arc_length_mode_chords_within_precision():
    start = Vec3(1.0, 0.0, 0.0)
    end = Vec3(-1.0, 0.0, 0.0)
    points = generate_points_along_arc(Plane.XY, start, end, Vec3(), False, 1.0, 0.0, 0.1, False)
    previous = start
    for point in points:
        assert _distance(point, previous) <= 0.1 + 1e-9
        previous = point
    assert points[-1] == end


def test_arc_helix_z_rises_monotonically():
    start = Vec3(1.0, 0.0, 0.0)
    end = Vec3(0.0, 1.0, 2.0)
    points = generate_points_along_arc(Plane.XY, start, end, Vec3(), False, 1.0, 0.1, 5.0, True)
    zs = [point.z for point in points]
    assert zs == sorted(zs)
    assert zs[-1] == 2.0


def test_arc_in_zx_plane_keeps_y():
    start = Vec3(1.0, 0.0, 0.0)
    end = Vec3(0.0, 0.0, 1.0)
    points = generate_points_along_arc(Plane.ZX, start, end, Vec3(), False, 1.0, 0.1, 10.0, True)
    assert points[-1] == end
    for point in points:
        assert point.y == pytest.approx(0.0)
        assert point.length() == pytest.approx(1.0)


def test_arc_with_nan_center_is_empty():
    center = Vec3(math.nan, 0.0, 0.0)
    assert generate_points_along_arc(Plane.XY, Vec3(), Vec3(1.0, 0.0, 0.0), center, True, 1.0, 0.1, 1.0, True) == []


def test_arc_zero_precision_raises():
    with pytest.raises(ValueError):
        generate_points_along_arc(
            Plane.XY, Vec3(1.0, 0.0, 0.0), Vec3(0.0, 1.0, 0.0), Vec3(), False, 1.0, 0.0, 0.0, False
        )


@pytest.mark.parametrize("count", [0, 1])
def test_interpolate_arc_single_step_returns_end(count):
    end = Vec3(0.0, 1.0, 0.0)
    result = interpolate_arc(Plane.XY, Vec3(1.0, 0.0, 0.0), end, Vec3(), False, 1.0, 0.0, math.pi / 2, count)
    assert result == [end]


def test_interpolate_arc_returns_requested_count():
    end = Vec3(0.0, 1.0, 0.0)
    result = interpolate_arc(Plane.XY, Vec3(1.0, 0.0, 0.0), end, Vec3(), False, 1.0, 0.0, math.pi / 2, 6)
    assert len(result) == 6
    assert result[-1] == end