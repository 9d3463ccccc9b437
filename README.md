# gcodeview

`gcodeview` reads G-code programs for CNC mills and laser cutters. It turns them into
straight line segments that a toolpath viewer can draw. It uses only the standard
library.

## Modules

### `gcodeview.segments`

- `Vec3` is an immutable 3D vector.
  - It supports `+`, `-`, scaling by a number, and unpacking into `x, y, z`.
  - `length()` returns its length. `is_nan()` says whether any component is NaN.
  - `to_plane(plane)` rotates a point so that the working plane lies on XY, and
    `from_plane(plane)` rotates it back.
- `Plane` is an `IntEnum` of the working planes `XY`, `ZX` and `YZ`.
- `ArcProperties` holds the centre, radius and direction of an arc.
- `PointSegment` is the end point of one parsed motion.
  - It carries the speed, spindle speed, dwell, units, mode and plane of the motion.
  - `center`, `radius` and `is_clockwise` read the arc data. Radius and direction
    count only once a centre has been set with `set_arc_center()`.
  - `convert_to_metric()` turns an inch segment into millimetres in place.
  - `copy()` returns a copy of the segment.
- `LineSegment` is a straight piece of toolpath from `start` to `end`.
  - `points()` returns the six coordinates as one flat list.
  - `contains(point)` tests, with a small tolerance, whether a point lies on the segment.

### `gcodeview.preprocessor`

These functions each work on one command line.

- Cleaning a line and reading its words: `remove_comment`, `parse_comment`,
  `remove_all_whitespace`, `split_command`, `parse_coord`, `parse_codes`,
  `parse_g_codes` and `parse_m_codes`.
- Rewriting a line:
  - `override_speed(command, percent)` scales the feed word.
  - `truncate_decimals(length, command)` writes every decimal number with exactly
    `length` fractional digits.
  - `generate_g1_from_points` builds a `G1` move.
- Moving points:
  - `update_point` and `update_point_with_command` apply X/Y/Z values in absolute or
    relative mode.
  - `update_center_with_command` works out an arc centre from I/J/K words. When none
    is given it uses R, through `convert_r_to_center`.
- Arc geometry:
  - `get_angle` and `calculate_sweep` give the angles of an arc.
  - `generate_points_along_arc` splits an arc into points. The step is a maximum
    segment length, or a maximum angle in degrees when `arc_degree_mode` is set. It
    returns an empty list when the centre is unknown. It raises `ValueError` when the
    arc cannot be subdivided.
  - `interpolate_arc` does the subdivision once the angles are known.

### `gcodeview.parser`

`GcodeParser` reads commands one at a time and keeps machine state between them:

- units (G20/G21)
- absolute or relative mode (G90/G91)
- arc centre mode (G90.1/G91.1)
- the working plane (G17/G18/G19)
- feed (F), spindle speed (S) and dwell (P)

When a line has no G word, the last motion command (G0, G1, G2, G3, G38.2) is
repeated.

- `add_command(text)` and `add_args(words)` process a command. They return the new
  `PointSegment`, or `None`.
- `point_segments` lists every segment so far, starting with the home point.
  `current_point` and `command_number` report where the parser is.
- `expand_arc()` replaces a trailing arc with straight segments.
- `preprocess_command(text)` and `preprocess_commands(lines)` normalise lines for a
  controller:
  - whitespace is removed
  - the feed can be overridden
  - decimals are truncated
  - arcs can be rewritten as G1 moves
  - comments are kept
- `reset()` returns the parser to its starting state.

Settings are plain attributes. Each is shown with its default:

| Attribute | Default | Meaning |
| --- | --- | --- |
| `speed_override` | `-1` | feed percentage; off when not positive |
| `truncate_decimal_length` | `40` | fractional digits kept; off when not positive |
| `remove_whitespace` | `True` | strip whitespace while preprocessing |
| `convert_arcs` | `False` | rewrite arcs as G1 lines while preprocessing |
| `small_arc_threshold` | `1.0` | segment length used when the length setting is not positive |
| `small_arc_segment_length` | `0.3` | segment length when expanding arcs |
| `traverse_speed` | `300` | speed given to G0 moves |

### `gcodeview.viewparse`

`GcodeViewParse` converts parsed segments into `LineSegment` objects. It expands arcs
and converts everything to millimetres.

- `to_obj_redux(lines, arc_precision, arc_degree_mode)` parses text with a fresh
  parser.
- `get_lines_from_parser(parser, ...)` takes an existing `GcodeParser`.
- It records these values:
  - `minimum_extremes` and `maximum_extremes`, the extent of the toolpath
  - `min_length`, the shortest straight move
  - `line_indexes`, the line segments that belong to each command
- `resolution()` gives a grid size over the XY extents. It raises `ValueError`
  before any line of non-zero length has been seen.
- `reset()` clears everything.

### `gcodeview.tables`

These are plain data models for a user interface.

- `GCodeTableModel` holds `GCodeItem` rows. Each row has a command, an `ItemState`,
  a response, a line number and words.
  - The columns are `#`, `Command`, `State`, `Response`, `Line` and `Args`.
  - Only the command column is editable.
  - The last row is the input line, so its number and state show empty.
  - `remove_row` and `remove_rows` raise `IndexError` for rows that do not exist.
- `HeightMapTableModel` is a grid of probed heights. New cells start as NaN.
  - `display(row, col)` shows a cell with three decimals, with rows in reverse
    order.
  - `value(row, col)` reads a cell in storage order.
  - `set_value(..., user_input=True)` addresses rows as displayed, and calls every
    function in `user_input_listeners`.

## Example

```python
from gcodeview.viewparse import GcodeViewParse

program = [
    "G21 G90",
    "G0 X0 Y0 Z5",
    "G1 Z-1 F100",
    "G1 X10",
    "G2 X20 Y0 I5 J0",
]

view = GcodeViewParse()
lines = view.to_obj_redux(program, 5.0, True)   # arcs split every 5 degrees
for segment in lines[:3]:
    print(segment.points())
print(view.minimum_extremes, view.maximum_extremes)
```

Preprocessing lines before sending them to a controller:

```python
from gcodeview.parser import GcodeParser

parser = GcodeParser()
parser.truncate_decimal_length = 3
print(parser.preprocess_commands(["G1 X1.23456 Y2 (move)", "; just a comment"]))
```

## What it does not do

- It is a library only and has no command-line program.
- It does not talk to a machine controller or a serial port.
- It draws nothing, and has no settings dialog or other screens.
- The table models only hold data. Connecting them to a widget toolkit is up to the
  caller.

## Running the tests

```
pip install -e .[test]
pytest
```