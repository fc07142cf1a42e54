"""Port types, plane primitives and the geometry of a connection curve."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from nodeflow.styles import connection_style


class PortType(Enum):
    NONE = auto()
    IN = auto()
    OUT = auto()


class PortLayout(Enum):
    HORIZONTAL = auto()
    VERTICAL = auto()


def opposite_port(port_type: PortType) -> PortType:
    """The port type at the other end of a connection."""
    if port_type is PortType.IN:
        return PortType.OUT
    if port_type is PortType.OUT:
        return PortType.IN
    return PortType.NONE


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Point:
        return Point(-self.x, -self.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> Point:
        return Point(self.x / divisor, self.y / divisor)

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y


@dataclass(frozen=True)
class Rect:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @classmethod
    def from_points(cls, top_left: Point, bottom_right: Point) -> Rect:
        return cls(top_left.x, top_left.y, bottom_right.x - top_left.x, bottom_right.y - top_left.y)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    @property
    def is_null(self) -> bool:
        return self.width == 0 and self.height == 0

    def normalized(self) -> Rect:
        """The same rectangle with non-negative width and height."""
        x, width = (self.x + self.width, -self.width) if self.width < 0 else (self.x, self.width)
        y, height = (self.y + self.height, -self.height) if self.height < 0 else (self.y, self.height)
        return Rect(x, y, width, height)

    def united(self, other: Rect) -> Rect:
        """The smallest rectangle holding both; a null rectangle contributes nothing."""
        if self.is_null:
            return other
        if other.is_null:
            return self
        a, b = self.normalized(), other.normalized()
        return Rect.from_points(
            Point(min(a.left, b.left), min(a.top, b.top)),
            Point(max(a.right, b.right), max(a.bottom, b.bottom)),
        )

    def contains(self, point: Point) -> bool:
        """Whether ``point`` lies inside or on the edge; degenerate rectangles hold nothing."""
        r = self.normalized()
        if r.width == 0 or r.height == 0:
            return False
        return r.left <= point.x <= r.right and r.top <= point.y <= r.bottom


@dataclass
class ConnectionGeometry:
    """End points and hover state of a connection drawn as a cubic curve."""

    in_point: Point = field(default_factory=Point)
    out_point: Point = field(default_factory=Point)
    line_width: float = 3.0
    hovered: bool = False
    port_layout: PortLayout = PortLayout.HORIZONTAL

    @property
    def source(self) -> Point:
        return self.out_point

    @property
    def sink(self) -> Point:
        return self.in_point

    def get_end_point(self, port_type: PortType) -> Point:
        if port_type is PortType.NONE:
            raise ValueError("a connection has no end point for PortType.NONE")
        return self.out_point if port_type is PortType.OUT else self.in_point

    def set_end_point(self, port_type: PortType, point: Point) -> None:
        if port_type is PortType.OUT:
            self.out_point = point
        elif port_type is PortType.IN:
            self.in_point = point

    def move_end_point(self, port_type: PortType, offset: Point) -> None:
        if port_type is PortType.OUT:
            self.out_point = self.out_point + offset
        elif port_type is PortType.IN:
            self.in_point = self.in_point + offset

    def bounding_rect(self) -> Rect:
        """A rectangle covering both end points, both control points and the end markers."""
        c1, c2 = self.points_c1_c2()
        basic = Rect.from_points(self.out_point, self.in_point).normalized()
        controls = Rect.from_points(c1, c2).normalized()
        diameter = float(connection_style().point_diameter)
        common = basic.united(controls)
        corner = Point(diameter, diameter)
        return Rect.from_points(common.top_left - corner, common.bottom_right + corner * 2)

    def points_c1_c2(self) -> tuple[Point, Point]:
        """The two control points of the cubic curve from source to sink."""
        horizontal = self.port_layout is PortLayout.HORIZONTAL
        out, sink = self.out_point, self.in_point
        distance = (sink.x - out.x) if horizontal else (sink.y - out.y)

        minimum = min(50.0, abs(distance))
        offset = 0.0
        ratio = 0.5
        if distance <= 0:
            offset = -minimum
            ratio = 1.0

        if horizontal:
            c1 = Point(out.x + minimum * ratio, out.y + offset)
            c2 = Point(sink.x - minimum * ratio, sink.y + offset)
        else:
            c1 = Point(out.x + offset, out.y + minimum * ratio)
            c2 = Point(sink.x + offset, sink.y - minimum * ratio)
        return c1, c2