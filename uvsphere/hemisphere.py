"""Hemisphere visibility: cut rotated geometry at the ``z = 0`` plane.

The viewer looks down the negative z axis, so the visible hemisphere is
``z >= 0``, give or take :data:`~uvsphere.projection.HORIZON_EPSILON` of
round-off.  Open curves and great-circle rings are cut into fragments;
closed polygons are clipped with Sutherland-Hodgman into a single polygon.
Nothing here raises: geometry that is entirely behind the sphere simply
produces empty output.
"""

from __future__ import annotations

import enum
import math
from typing import List, Sequence, Tuple

from uvsphere.projection import HORIZON_EPSILON
from uvsphere.sphere import Vec3


def is_visible(p: Vec3) -> bool:
    return p[2] >= -HORIZON_EPSILON


def horizon_crossing(a: Vec3, b: Vec3) -> Vec3:
    """Point where the segment *a* -> *b* meets ``z = 0``.

    The linear crossing ``t = z0 / (z0 - z1)`` lies on the chord, inside
    the sphere; it is pushed back out radially so clipped points stay on
    the unit sphere.  The caller guarantees that one of *a* and *b* is
    visible and the other is not.
    """
    # A visible point may sit just below the plane; keep t on the segment.
    t = min(1.0, max(0.0, a[2] / (a[2] - b[2])))
    x = a[0] + t * (b[0] - a[0])
    y = a[1] + t * (b[1] - a[1])
    length = math.hypot(x, y)
    if length < 1e-12:
        # Chord through the view axis; there is no unique direction.
        return (x, y, 0.0)
    return (x / length, y / length, 0.0)


def _append_distinct(path: List[Vec3], p: Vec3) -> None:
    if not path or path[-1] != p:
        path.append(p)


def clip_open_curve(points: Sequence[Vec3], wrap: bool = False) -> List[List[Vec3]]:
    """Split an open curve into its front-facing fragments.

    Args:
        points: Rotated sphere points, in curve order.
        wrap: Treat the curve as a ring: the edge from the last point back
            to the first is clipped too, and a visible run that passes
            through the wrap point is joined into one fragment.

    Returns:
        Zero or more fragments, each a list of points with ``z >= 0``.
        A fully visible ring comes back as a single fragment that repeats
        its first point at the end.
    """
    n = len(points)
    if n == 0:
        return []
    if n == 1:
        return [[points[0]]] if is_visible(points[0]) else []

    fragments: List[List[Vec3]] = []
    current: List[Vec3] = []
    if is_visible(points[0]):
        current.append(points[0])

    edge_count = n if wrap else n - 1
    for i in range(edge_count):
        a = points[i]
        b = points[(i + 1) % n]
        a_in = is_visible(a)
        b_in = is_visible(b)

        if a_in and not b_in:
            _append_distinct(current, horizon_crossing(a, b))
            fragments.append(current)
            current = []
        elif b_in and not a_in:
            current = [horizon_crossing(a, b)]

        # The wrap edge ends on points[0], which is already emitted.
        if b_in and i < n - 1:
            _append_distinct(current, b)

    if current:
        if wrap and is_visible(points[0]):
            if fragments:
                # The last run continues through the seam into the first.
                fragments[0] = current + fragments[0]
            else:
                current.append(points[0])
                fragments.append(current)
        else:
            fragments.append(current)

    return fragments


class Crossing(enum.Enum):
    """Role of a vertex in a clipped cap."""

    NONE = "none"    # original vertex
    EXIT = "exit"    # the outline leaves the visible hemisphere here
    ENTRY = "entry"  # the outline comes back here


def clip_cap(points: Sequence[Vec3]) -> List[Tuple[Vec3, Crossing]]:
    """Sutherland-Hodgman clip of a closed polygon against the visible
    hemisphere, with every vertex tagged by its :class:`Crossing` role.

    For each edge ``prev -> cur``: keep *cur* if it is visible, and insert
    the horizon crossing whenever the edge changes side.  An exit crossing
    is always followed by the entry crossing that closes the cut, so the
    edge between them is the chord across the hidden part.
    """
    n = len(points)
    out: List[Tuple[Vec3, Crossing]] = []
    for i in range(n):
        prev = points[i - 1]
        cur = points[i]
        prev_in = is_visible(prev)
        cur_in = is_visible(cur)
        if cur_in:
            if not prev_in:
                out.append((horizon_crossing(prev, cur), Crossing.ENTRY))
            out.append((cur, Crossing.NONE))
        elif prev_in:
            out.append((horizon_crossing(prev, cur), Crossing.EXIT))
    return out


def clip_closed_polygon(points: Sequence[Vec3]) -> List[Vec3]:
    """Clip a closed polygon against the visible hemisphere.

    Returns:
        The visible cap as one polygon, or an empty list when the polygon
        is entirely behind the sphere.  A fully visible polygon comes back
        with the same vertices.
    """
    return [p for p, _ in clip_cap(points)]
