"""Shape definitions in UV space.

Every shape is an immutable dataclass that owns its geometry and a
:class:`Style`.  The set of shapes is closed: :data:`Shape` is the union of
the classes below, and code that dispatches on shape type is expected to
reject anything else.

Each shape class declares two classification flags:

``CLOSED``
    Whether the outline returns to its starting point.
``RING``
    Whether the outline is a great-circle style ring that is clipped as
    an open, wrapping curve rather than as a polygon.

:class:`ImportedPath` carries its closed flag per instance.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar, Optional, Tuple, Union

from uvsphere.sphere import UV


@dataclass(frozen=True)
class Style:
    """Drawing style of a shape.

    Attributes:
        stroke: Stroke color (any SVG color string).
        stroke_width: Stroke width in UV units.
        fill: Fill color, or ``None`` for no fill.
    """

    stroke: str = "#000000"
    stroke_width: float = 0.002
    fill: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.stroke, str):
            raise TypeError(f"Style 'stroke' expects str, got {type(self.stroke).__name__}")
        _check_number("stroke_width", self.stroke_width)
        if self.stroke_width < 0:
            raise ValueError(f"Style 'stroke_width' must be >= 0, got {self.stroke_width}")
        if self.fill is not None and not isinstance(self.fill, str):
            raise TypeError(f"Style 'fill' expects str or None, got {type(self.fill).__name__}")


@dataclass(frozen=True)
class Orientation:
    """Optional mirroring of UV space applied before sphere mapping."""

    flip_u: bool = False
    flip_v: bool = False

    def apply(self, uv: UV) -> UV:
        u, v = uv
        if self.flip_u:
            u = 1.0 - u
        if self.flip_v:
            v = 1.0 - v
        return (u, v)


def _check_number(name: str, value: object) -> None:
    """Reject non-numeric and non-finite values (bools included)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Field '{name}' expects a number, got {type(value).__name__}")
    if not math.isfinite(value):
        raise ValueError(f"Field '{name}' must be finite, got {value}")


def _check_uv(name: str, value: object) -> None:
    if not isinstance(value, tuple) or len(value) != 2:
        raise TypeError(f"Field '{name}' expects a (u, v) tuple, got {value!r}")
    _check_number(f"{name}.u", value[0])
    _check_number(f"{name}.v", value[1])


class _ShapeBase:
    """Shared validation for the shape dataclasses."""

    CLOSED: ClassVar[bool] = False
    RING: ClassVar[bool] = False

    # Fields validated as (u, v) pairs; everything else numeric is checked
    # by _check_number.
    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ()
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def __post_init__(self) -> None:
        for name in self._UV_FIELDS:
            _check_uv(name, getattr(self, name))
        for name in self._NUMBER_FIELDS:
            _check_number(name, getattr(self, name))
        if not isinstance(getattr(self, "style"), Style):
            raise TypeError(
                f"{type(self).__name__} 'style' expects Style, "
                f"got {type(getattr(self, 'style')).__name__}"
            )

    @property
    def closed(self) -> bool:
        return self.CLOSED

    @property
    def ring(self) -> bool:
        return self.RING

    @property
    def kind(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class Line(_ShapeBase):
    """Straight UV segment from *a* to *b*."""

    a: UV
    b: UV
    style: Style = field(default_factory=Style)

    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ("a", "b")


@dataclass(frozen=True)
class Rect(_ShapeBase):
    """Axis-aligned UV rectangle anchored at *origin*."""

    origin: UV
    width: float
    height: float
    style: Style = field(default_factory=Style)

    CLOSED: ClassVar[bool] = True
    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ("origin",)
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("width", "height")

    @classmethod
    def from_corners(cls, a: UV, b: UV, style: Optional[Style] = None) -> "Rect":
        """Build a rectangle with non-negative size from two opposite corners."""
        u0, u1 = sorted((a[0], b[0]))
        v0, v1 = sorted((a[1], b[1]))
        return cls((u0, v0), u1 - u0, v1 - v0, style or Style())


@dataclass(frozen=True)
class Circle(_ShapeBase):
    """Circle of *radius* around *center* in UV space."""

    center: UV
    radius: float
    style: Style = field(default_factory=Style)

    CLOSED: ClassVar[bool] = True
    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ("center",)
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("radius",)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.radius < 0:
            raise ValueError(f"Circle 'radius' must be >= 0, got {self.radius}")


@dataclass(frozen=True)
class RegularPolygon(_ShapeBase):
    """Regular polygon with *sides* vertices on a circle of *radius*.

    *rotation* (radians) is the angle of the first vertex.
    """

    center: UV
    radius: float
    sides: int
    rotation: float = 0.0
    style: Style = field(default_factory=Style)

    CLOSED: ClassVar[bool] = True
    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ("center",)
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("radius", "rotation")

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.radius < 0:
            raise ValueError(f"RegularPolygon 'radius' must be >= 0, got {self.radius}")
        if isinstance(self.sides, bool) or not isinstance(self.sides, int):
            raise TypeError(
                f"RegularPolygon 'sides' expects int, got {type(self.sides).__name__}"
            )
        if self.sides < 3:
            raise ValueError(f"RegularPolygon 'sides' must be >= 3, got {self.sides}")


@dataclass(frozen=True)
class LatitudeRing(_ShapeBase):
    """Parallel at constant *v*, all the way around the sphere."""

    v: float
    style: Style = field(default_factory=Style)

    CLOSED: ClassVar[bool] = True
    RING: ClassVar[bool] = True
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("v",)


@dataclass(frozen=True)
class LongitudeRing(_ShapeBase):
    """Great circle through both poles containing the meridian at *u*."""

    u: float
    style: Style = field(default_factory=Style)

    CLOSED: ClassVar[bool] = True
    RING: ClassVar[bool] = True
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("u",)


@dataclass(frozen=True)
class ImportedPath(_ShapeBase):
    """A pre-sampled path placed into UV space.

    *points* are in local coordinates centred on the origin.  The UV
    position of a point ``p`` is ``origin + scale * R(rotation) * p``.
    """

    points: Tuple[UV, ...]
    path_closed: bool = False
    origin: UV = (0.5, 0.5)
    scale: float = 1.0
    rotation: float = 0.0
    style: Style = field(default_factory=Style)

    _UV_FIELDS: ClassVar[Tuple[str, ...]] = ("origin",)
    _NUMBER_FIELDS: ClassVar[Tuple[str, ...]] = ("scale", "rotation")

    def __post_init__(self) -> None:
        # Lists are accepted at construction and frozen into tuples.
        object.__setattr__(self, "points", tuple(tuple(p) for p in self.points))
        super().__post_init__()
        if len(self.points) < 2:
            raise ValueError(
                f"ImportedPath needs at least 2 points, got {len(self.points)}"
            )
        for idx, point in enumerate(self.points):
            _check_uv(f"points[{idx}]", point)
        if not isinstance(self.path_closed, bool):
            raise TypeError(
                f"ImportedPath 'path_closed' expects bool, "
                f"got {type(self.path_closed).__name__}"
            )

    @property
    def closed(self) -> bool:
        return self.path_closed


Shape = Union[Line, Rect, Circle, RegularPolygon, LatitudeRing, LongitudeRing, ImportedPath]

#: Every concrete shape class, in declaration order.
SHAPE_TYPES: Tuple[type, ...] = (
    Line, Rect, Circle, RegularPolygon, LatitudeRing, LongitudeRing, ImportedPath,
)
