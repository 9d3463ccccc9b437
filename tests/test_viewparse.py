import math

import pytest

from gcodeview.parser import GcodeParser
from gcodeview.segments import Vec3
from gcodeview.viewparse import GcodeViewParse


def test_straight_lines_connect_end_to_end():
    view = GcodeViewParse()
    lines = view.to_obj_redux(["G0 X10", "G1 Y20 Z-1", "G1 Z5"], 1.0, False)
    assert len(lines) == 3
    assert lines[0].start == Vec3(0, 0, 0)
    assert lines[0].end == Vec3(10, 0, 0)
    assert lines[1].start == lines[0].end
    assert lines[1].end == Vec3(10, 20, -1)
    assert lines[2].end == Vec3(10, 20, 5)
    assert [line.line_number for line in lines] == [0, 1, 2]


def test_line_flags_are_carried_over():
    view = GcodeViewParse()
    lines = view.to_obj_redux(["G0 X10", "G1 X20 F100 S1000", "G1 Z5"], 1.0, False)
    assert lines[0].is_fast_traverse is True
    assert lines[1].is_fast_traverse is False
    assert lines[1].speed == 100
    assert lines[1].spindle_speed == 1000
    assert lines[2].is_z_movement is True
    assert lines[1].is_z_movement is False
    assert not any(line.is_arc for line in lines)


def test_line_indexes_map_commands_to_lines():
    view = GcodeViewParse()
    view.to_obj_redux(["G0 X10", "G1 Y20", "G1 Z5"], 1.0, False)
    assert view.line_indexes == [[0], [1], [2], []]


def test_extremes_use_end_points_only():
    view = GcodeViewParse()
    view.to_obj_redux(["G0 X10", "G1 Y20 Z-1"], 1.0, False)
    assert view.minimum_extremes == Vec3(10, 0, -1)
    assert view.maximum_extremes == Vec3(10, 20, 0)


def test_min_length_and_resolution():
    view = GcodeViewParse()
    view.to_obj_redux(["G1 X10", "G1 Y20"], 1.0, False)
    assert view.min_length == pytest.approx(10)
    assert view.resolution() == (1, 3)


def test_zero_length_lines_do_not_count():
    view = GcodeViewParse()
    view.to_obj_redux(["G1 X0"], 1.0, False)
    assert len(view.lines) == 1
    assert math.isnan(view.min_length)
    with pytest.raises(ValueError):
        view.resolution()


def test_inch_segments_are_converted():
    view = GcodeViewParse()
    lines = view.to_obj_redux(["G20", "G1 X1"], 1.0, False)
    assert len(lines) == 1
    assert lines[0].end.x == pytest.approx(25.4)
    assert lines[0].is_metric is False


def test_arc_is_expanded_onto_circle():
    view = GcodeViewParse()
    lines = view.to_obj_redux(["G2 X10 Y0 I5 J0"], 1.0, False)
    assert len(lines) > 2
    center = Vec3(5, 0, 0)
    for line in lines:
        assert (line.end - center).length() == pytest.approx(5, abs=1e-9)
        assert line.is_arc and line.is_clockwise
        assert line.line_number == 0
    assert lines[0].start == Vec3(0, 0, 0)
    assert lines[-1].end == Vec3(10, 0, 0)
    for previous, current in zip(lines, lines[1:]):
        assert current.start == previous.end
    assert view.line_indexes[0] == list(range(len(lines)))
    assert view.maximum_extremes.y == pytest.approx(5, abs=1e-6)
    assert view.minimum_extremes.y >= -1e-9


def test_finer_degree_precision_gives_more_segments():
    coarse = GcodeViewParse().to_obj_redux(["G3 X10 Y0 I5 J0"], 30.0, True)
    fine = GcodeViewParse().to_obj_redux(["G3 X10 Y0 I5 J0"], 5.0, True)
    assert len(fine) > len(coarse) >= 1


def test_lines_accumulate_until_reset():
    view = GcodeViewParse()
    parser = GcodeParser()
    parser.add_command("G1 X1")
    view.get_lines_from_parser(parser, 1.0, False)
    parser2 = GcodeParser()
    parser2.add_command("G1 X2")
    assert len(view.get_lines_from_parser(parser2, 1.0, False)) == 2
    view.reset()
    assert view.lines == []
    assert view.line_indexes == []
    assert view.minimum_extremes.is_nan()
    assert math.isnan(view.min_length)