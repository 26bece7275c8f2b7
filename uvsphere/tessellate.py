"""Shape tessellation: shape -> ordered UV samples.

Every shape type has a sampler registered in :data:`_SAMPLERS`.
:func:`tessellate` looks the sampler up by exact type and refuses shapes it
does not know, so adding a shape class without a sampler fails loudly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, List

from uvsphere.shapes import (
    SHAPE_TYPES,
    Circle,
    ImportedPath,
    LatitudeRing,
    Line,
    LongitudeRing,
    Rect,
    RegularPolygon,
    Shape,
)
from uvsphere.sphere import UV

# Curved outlines never use fewer steps than this, whatever the density.
MIN_CURVE_STEPS = 64

# Minimum samples on each rectangle edge.
MIN_RECT_EDGE_SAMPLES = 2


@dataclass(frozen=True)
class Tessellation:
    """Ordered UV samples of a shape outline.

    Attributes:
        points: UV samples.  Closed polygons end with a duplicate of the
            first point; rings do not (the clipper wraps them).
        closed: Whether the outline is closed.
    """

    points: List[UV]
    closed: bool


def _sample_line(shape: Line, density: int) -> Tessellation:
    (u0, v0), (u1, v1) = shape.a, shape.b
    points = []
    for i in range(density + 1):
        t = i / density
        points.append((u0 + t * (u1 - u0), v0 + t * (v1 - v0)))
    return Tessellation(points, closed=False)


def _sample_rect(shape: Rect, density: int) -> Tessellation:
    u0, v0 = shape.origin
    u1, v1 = u0 + shape.width, v0 + shape.height
    corners = [(u0, v0), (u1, v0), (u1, v1), (u0, v1)]
    per_edge = max(MIN_RECT_EDGE_SAMPLES, density // 4)

    points = []
    for edge in range(4):
        (su, sv), (eu, ev) = corners[edge], corners[(edge + 1) % 4]
        # Each edge contributes its start corner; the next edge supplies
        # the end corner.
        for i in range(per_edge):
            t = i / per_edge
            points.append((su + t * (eu - su), sv + t * (ev - sv)))
    points.append(points[0])
    return Tessellation(points, closed=True)


def circle_steps(density: int) -> int:
    """Number of chords used for a circle at *density*."""
    return max(MIN_CURVE_STEPS, density)


def _sample_circle(shape: Circle, density: int) -> Tessellation:
    cu, cv = shape.center
    steps = circle_steps(density)
    points = []
    for i in range(steps):
        t = 2.0 * math.pi * i / steps
        points.append((cu + shape.radius * math.cos(t), cv + shape.radius * math.sin(t)))
    points.append(points[0])
    return Tessellation(points, closed=True)


def _sample_polygon(shape: RegularPolygon, density: int) -> Tessellation:
    # Density does not apply: the vertices are the shape.
    cu, cv = shape.center
    step = 2.0 * math.pi / shape.sides
    points = []
    for k in range(shape.sides):
        angle = shape.rotation + k * step
        points.append((cu + shape.radius * math.cos(angle), cv + shape.radius * math.sin(angle)))
    points.append(points[0])
    return Tessellation(points, closed=True)


def _sample_latitude(shape: LatitudeRing, density: int) -> Tessellation:
    # u=1 is the same sphere point as u=0, so it is left to the wrap.
    steps = circle_steps(density)
    points = [(i / steps, shape.v) for i in range(steps)]
    return Tessellation(points, closed=True)


def _sample_longitude(shape: LongitudeRing, density: int) -> Tessellation:
    # Meridian at u from the south pole to the north pole, then the
    # opposite meridian back down.  The poles appear only once.
    steps = circle_steps(density)
    opposite = (shape.u + 0.5) % 1.0
    points = [(shape.u, i / steps) for i in range(steps + 1)]
    points.extend((opposite, 1.0 - i / steps) for i in range(1, steps))
    return Tessellation(points, closed=True)


def _sample_imported(shape: ImportedPath, density: int) -> Tessellation:
    # The path was sampled when it was imported; only place it.
    ou, ov = shape.origin
    cos_r = math.cos(shape.rotation)
    sin_r = math.sin(shape.rotation)
    points = []
    for x, y in shape.points:
        px = (x * cos_r - y * sin_r) * shape.scale
        py = (x * sin_r + y * cos_r) * shape.scale
        points.append((ou + px, ov + py))
    if shape.path_closed and points[0] != points[-1]:
        points.append(points[0])
    return Tessellation(points, closed=shape.path_closed)


_SAMPLERS: Dict[type, Callable[..., Tessellation]] = {
    Line: _sample_line,
    Rect: _sample_rect,
    Circle: _sample_circle,
    RegularPolygon: _sample_polygon,
    LatitudeRing: _sample_latitude,
    LongitudeRing: _sample_longitude,
    ImportedPath: _sample_imported,
}


def tessellate(shape: Shape, density: int = 64) -> Tessellation:
    """Sample *shape* into an ordered UV point list.

    Args:
        shape: Any shape from :mod:`uvsphere.shapes`.
        density: Requested sample density (>= 1).  Higher values never
            make curved outlines coarser.

    Returns:
        The :class:`Tessellation` of the shape.

    Raises:
        TypeError: If *shape* is not a known shape type.
        ValueError: If *density* is less than 1.
    """
    if isinstance(density, bool) or not isinstance(density, int):
        raise TypeError(f"density expects int, got {type(density).__name__}")
    if density < 1:
        raise ValueError(f"density must be >= 1, got {density}")
    try:
        sampler = _SAMPLERS[type(shape)]
    except KeyError:
        available = ", ".join(cls.__name__ for cls in SHAPE_TYPES)
        raise TypeError(
            f"Unknown shape type '{type(shape).__name__}'. Known shapes: {available}"
        ) from None
    return sampler(shape, density)
