"""Geometric primitives and the point and line segments produced by G-code parsing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum

INCH_TO_MM = 25.4


class Plane(IntEnum):
    """Working plane selected by G17, G18 and G19."""

    XY = 0
    ZX = 1
    YZ = 2


@dataclass(frozen=True)
class Vec3:
    """An immutable three-dimensional vector."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vec3) -> Vec3:
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vec3) -> Vec3:
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> Vec3:
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def length(self) -> float:
        """Euclidean length; NaN if any component is NaN."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def is_nan(self) -> bool:
        """True when any component is NaN."""
        return math.isnan(self.x) or math.isnan(self.y) or math.isnan(self.z)

    def to_plane(self, plane: Plane) -> Vec3:
        """Rotate so that the given working plane maps onto XY."""
        if plane == Plane.ZX:
            return Vec3(self.x, -self.z, self.y)
        if plane == Plane.YZ:
            return Vec3(-self.z, self.y, self.x)
        return self

    def from_plane(self, plane: Plane) -> Vec3:
        """Inverse of :meth:`to_plane`."""
        if plane == Plane.ZX:
            return Vec3(self.x, self.z, -self.y)
        if plane == Plane.YZ:
            return Vec3(self.z, self.y, -self.x)
        return self


@dataclass
class ArcProperties:
    """Centre, radius and direction of an arc move."""

    is_clockwise: bool = False
    radius: float = 0.0
    center: Vec3 | None = None


@dataclass
class PointSegment:
    """The end point of a single G-code motion command."""

    point: Vec3 = field(default_factory=Vec3)
    line_number: int = -1
    toolhead: int = 0
    speed: float = 0.0
    spindle_speed: float = 0.0
    dwell: float = 0.0
    is_metric: bool = True
    is_absolute: bool = True
    is_z_movement: bool = False
    is_arc: bool = False
    is_fast_traverse: bool = False
    plane: Plane = Plane.XY
    arc: ArcProperties | None = None

    def _arc(self) -> ArcProperties:
        if self.arc is None:
            self.arc = ArcProperties()
        return self.arc

    def _has_center(self) -> bool:
        return self.arc is not None and self.arc.center is not None

    @property
    def center(self) -> Vec3 | None:
        """Arc centre, or None when the segment has none."""
        return self.arc.center if self._has_center() else None

    @property
    def is_clockwise(self) -> bool:
        return self.arc.is_clockwise if self._has_center() else False

    @is_clockwise.setter
    def is_clockwise(self, clockwise: bool) -> None:
        self._arc().is_clockwise = clockwise

    @property
    def radius(self) -> float:
        return self.arc.radius if self._has_center() else 0.0

    @radius.setter
    def radius(self, radius: float) -> None:
        self._arc().radius = radius

    def set_arc_center(self, center: Vec3) -> None:
        """Set the arc centre and mark the segment as an arc."""
        self._arc().center = center
        self.is_arc = True

    def center_points(self) -> list[float]:
        """Centre coordinates as a list, empty when there is no centre."""
        center = self.center
        return [] if center is None else [center.x, center.y, center.z]

    def points(self) -> list[float]:
        """The X and Y coordinates of the point."""
        return [self.point.x, self.point.y]

    def convert_to_metric(self) -> None:
        """Convert an inch segment to millimetres in place."""
        if self.is_metric:
            return
        self.is_metric = True
        self.point = self.point * INCH_TO_MM
        if self.is_arc and self.arc is not None:
            if self.arc.center is not None:
                self.arc.center = self.arc.center * INCH_TO_MM
            self.arc.radius *= INCH_TO_MM

    def copy(self) -> PointSegment:
        """A copy carrying the motion and arc properties of this segment."""
        result = PointSegment(
            point=self.point,
            line_number=self.line_number,
            toolhead=self.toolhead,
            speed=self.speed,
            is_metric=self.is_metric,
            is_absolute=self.is_absolute,
            is_z_movement=self.is_z_movement,
            is_fast_traverse=self.is_fast_traverse,
        )
        if self.is_arc:
            center = self.center
            if center is not None:
                result.set_arc_center(center)
            else:
                result.is_arc = True
            result.radius = self.radius
            result.is_clockwise = self.is_clockwise
            result.plane = self.plane
        return result


@dataclass
class LineSegment:
    """A straight piece of toolpath between two points."""

    start: Vec3 = field(default_factory=Vec3)
    end: Vec3 = field(default_factory=Vec3)
    line_number: int = -1
    toolhead: int = 0
    speed: float = 0.0
    spindle_speed: float = 0.0
    dwell: float = 0.0
    is_z_movement: bool = False
    is_arc: bool = False
    is_clockwise: bool = False
    is_fast_traverse: bool = False
    drawn: bool = False
    is_metric: bool = True
    is_absolute: bool = True
    is_highlight: bool = False
    vertex_index: int = -1
    plane: Plane = Plane.XY

    def point_array(self) -> list[Vec3]:
        """Start and end points."""
        return [self.start, self.end]

    def points(self) -> list[float]:
        """Start and end coordinates, flattened."""
        return [*self.start, *self.end]

    def contains(self, point: Vec3) -> bool:
        """True when the point lies on the segment, within a small tolerance."""
        line = self.end - self.start
        pt = point - self.start
        delta = (line - pt).length() - (line.length() - pt.length())
        return delta < 0.01

    def copy(self) -> LineSegment:
        """A copy carrying the geometry and display state of this segment."""
        return LineSegment(
            start=self.start,
            end=self.end,
            line_number=self.line_number,
            toolhead=self.toolhead,
            speed=self.speed,
            is_z_movement=self.is_z_movement,
            is_arc=self.is_arc,
            is_fast_traverse=self.is_fast_traverse,
            drawn=self.drawn,
            is_metric=self.is_metric,
            is_absolute=self.is_absolute,
            is_highlight=self.is_highlight,
            vertex_index=self.vertex_index,
        )