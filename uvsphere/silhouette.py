"""Silhouette clipping of projected polygons against the limb.

The limb is the unit circle bounding the orthographic image of the sphere.
A filled polygon that leaves the disc is cut where its edges cross the
circle, and each stretch that ran outside is replaced by an arc of the
circle itself, so the fill ends exactly on the limb instead of on a
chord.

The work is split in two:

* :func:`classify_edge` does the geometry.  It solves the line-circle
  quadratic for one polygon edge and labels the edge with an
  :class:`EdgeKind` plus its crossing points.
* :class:`LimbWalker` is the control flow.  It folds the classified edges
  through the states of :class:`ClipState` and splices arcs between an
  exit crossing and the next entry crossing.

:func:`clip_to_limb` feeds the walker edges of an arbitrary polygon.
:func:`close_cap_on_limb` feeds it a cap already cut at the horizon, whose
exit and entry crossings are known, so the cut chords become arcs.

Ties are broken towards "no intersection": tangent edges and edges whose
roots fall outside ``[0, 1]`` are treated as not crossing.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from uvsphere.hemisphere import Crossing
from uvsphere.projection import XY

logger = logging.getLogger(__name__)

# Points within this much of the circle (in squared radius) count as inside.
INSIDE_TOLERANCE = 1e-9

# Roots closer than this (in edge parameter) are one tangent root.
ROOT_MERGE_EPSILON = 1e-6

# Angular resolution of inserted limb arcs.
ARC_STEP = math.radians(2.0)
MIN_ARC_STEPS = 4

# Samples used when the limb is filled completely.
FULL_CIRCLE_STEPS = 180


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

def signed_area(polygon: Sequence[XY]) -> float:
    """Shoelace area; positive for counter-clockwise vertex order."""
    n = len(polygon)
    total = 0.0
    for i in range(n):
        x0, y0 = polygon[i]
        x1, y1 = polygon[(i + 1) % n]
        total += x0 * y1 - x1 * y0
    return total * 0.5


def is_inside(p: XY) -> bool:
    """Whether *p* lies on or inside the unit circle."""
    return p[0] * p[0] + p[1] * p[1] <= 1.0 + INSIDE_TOLERANCE


def circle_roots(a: XY, b: XY) -> List[float]:
    """Parameters ``t`` in ``[0, 1]`` where ``a + t (b - a)`` meets the
    unit circle.

    Returns at most two roots in increasing order.  A double root (tangent
    edge) is reported once.
    """
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    qa = dx * dx + dy * dy
    if qa < 1e-18:
        return []
    qb = 2.0 * (a[0] * dx + a[1] * dy)
    qc = a[0] * a[0] + a[1] * a[1] - 1.0
    disc = qb * qb - 4.0 * qa * qc
    if disc < 0.0:
        return []
    sq = math.sqrt(disc)
    roots: List[float] = []
    for t in sorted(((-qb - sq) / (2.0 * qa), (-qb + sq) / (2.0 * qa))):
        if 0.0 <= t <= 1.0 and not (roots and abs(t - roots[-1]) < ROOT_MERGE_EPSILON):
            roots.append(t)
    return roots


def _on_limb(p: XY) -> XY:
    """Snap *p* radially onto the unit circle."""
    length = math.hypot(p[0], p[1])
    if length < 1e-12:
        return (1.0, 0.0)
    return (p[0] / length, p[1] / length)


def _lerp(a: XY, b: XY, t: float) -> XY:
    return (a[0] + t * (b[0] - a[0]), a[1] + t * (b[1] - a[1]))


def arc_between(start: XY, end: XY, counter_clockwise: bool) -> List[XY]:
    """Interior samples of the limb arc from *start* to *end*.

    The arc is swept in the given direction at :data:`ARC_STEP`, with at
    least :data:`MIN_ARC_STEPS` steps.  The endpoints themselves are not
    included; the caller emits them.
    """
    a0 = math.atan2(start[1], start[0])
    a1 = math.atan2(end[1], end[0])
    if counter_clockwise:
        sweep = (a1 - a0) % (2.0 * math.pi)
    else:
        sweep = -((a0 - a1) % (2.0 * math.pi))
    # Coincident ends: no arc, not a full turn.
    if abs(sweep) < 1e-12 or 2.0 * math.pi - abs(sweep) < 1e-12:
        return []
    steps = max(MIN_ARC_STEPS, int(math.ceil(abs(sweep) / ARC_STEP)))
    return [
        (math.cos(a0 + sweep * k / steps), math.sin(a0 + sweep * k / steps))
        for k in range(1, steps)
    ]


def contains_origin(polygon: Sequence[XY]) -> bool:
    """Even-odd test of the view center against *polygon*."""
    inside = False
    n = len(polygon)
    for i in range(n):
        x0, y0 = polygon[i - 1]
        x1, y1 = polygon[i]
        if (y0 > 0.0) != (y1 > 0.0):
            x_at = x0 + (0.0 - y0) * (x1 - x0) / (y1 - y0)
            if x_at > 0.0:
                inside = not inside
    return inside


# ---------------------------------------------------------------------------
# Edge classification
# ---------------------------------------------------------------------------

class EdgeKind(enum.Enum):
    """How one polygon edge relates to the limb."""

    INSIDE = "inside"      # both ends inside
    EXITING = "exiting"    # inside -> outside, one crossing
    ENTERING = "entering"  # outside -> inside, one crossing
    PASSING = "passing"    # outside -> outside through the disc, two crossings
    OUTSIDE = "outside"    # outside -> outside, misses the disc


@dataclass(frozen=True)
class Edge:
    """A classified polygon edge.

    Attributes:
        kind: Relation of the edge to the limb.
        start: Edge start point.
        end: Edge end point.
        crossings: Limb crossings in edge order: one for exiting and
            entering edges, two for passing edges, none otherwise.
    """

    kind: EdgeKind
    start: XY
    end: XY
    crossings: Tuple[XY, ...] = ()


def classify_edge(a: XY, b: XY) -> Edge:
    """Classify the edge *a* -> *b* against the unit circle."""
    a_in = is_inside(a)
    b_in = is_inside(b)
    if a_in and b_in:
        # The disc is convex, so the whole edge is inside.
        return Edge(EdgeKind.INSIDE, a, b)

    points = [_on_limb(_lerp(a, b, t)) for t in circle_roots(a, b)]

    if a_in:
        # With a on the tolerance band the root can slip below 0; the
        # start point itself is then the exit.
        exit_point = points[-1] if points else _on_limb(a)
        return Edge(EdgeKind.EXITING, a, b, (exit_point,))
    if b_in:
        entry_point = points[0] if points else _on_limb(b)
        return Edge(EdgeKind.ENTERING, a, b, (entry_point,))
    if len(points) == 2:
        return Edge(EdgeKind.PASSING, a, b, (points[0], points[1]))
    return Edge(EdgeKind.OUTSIDE, a, b)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class ClipState(enum.Enum):
    """Where the walk currently is relative to the limb."""

    INSIDE = "inside"
    OUTSIDE_NO_ARC = "outside_no_arc"
    OUTSIDE_PENDING_ARC = "outside_pending_arc"


class LimbWalker:
    """Fold classified edges into the clipped polygon.

    Feed every edge of the polygon, in order, to :meth:`step`, then call
    :meth:`finish` for the result.

    Attributes:
        counter_clockwise: Sweep direction for inserted arcs.
        state: Current :class:`ClipState`.
        pending: Exit crossing waiting for its closing arc, if any.
        output: Points emitted so far.
        arcs_inserted: Number of arcs spliced in.
    """

    def __init__(self, counter_clockwise: bool, start_inside: bool) -> None:
        self.counter_clockwise = counter_clockwise
        self.state = ClipState.INSIDE if start_inside else ClipState.OUTSIDE_NO_ARC
        self.pending: Optional[XY] = None
        self.output: List[XY] = []
        self.arcs_inserted = 0

    def _emit(self, p: XY) -> None:
        if not self.output or self.output[-1] != p:
            self.output.append(p)

    def _splice_arc(self, target: XY) -> None:
        """Close a pending arc at *target*, if one is open."""
        if self.state is ClipState.OUTSIDE_PENDING_ARC and self.pending is not None:
            for p in arc_between(self.pending, target, self.counter_clockwise):
                self._emit(p)
            self.arcs_inserted += 1
        self.pending = None

    def step(self, edge: Edge) -> None:
        kind = edge.kind
        if kind is EdgeKind.INSIDE:
            self._emit(edge.start)
            self.state = ClipState.INSIDE
        elif kind is EdgeKind.EXITING:
            self._emit(edge.start)
            self._emit(edge.crossings[0])
            self.pending = edge.crossings[0]
            self.state = ClipState.OUTSIDE_PENDING_ARC
        elif kind is EdgeKind.ENTERING:
            self._splice_arc(edge.crossings[0])
            self._emit(edge.crossings[0])
            self.state = ClipState.INSIDE
        elif kind is EdgeKind.PASSING:
            first, second = edge.crossings
            self._splice_arc(first)
            self._emit(first)
            self._emit(second)
            self.pending = second
            self.state = ClipState.OUTSIDE_PENDING_ARC
        # OUTSIDE edges emit nothing and keep the state.

    def finish(self) -> List[XY]:
        """Close an unresolved arc back to the first emitted point."""
        if self.state is ClipState.OUTSIDE_PENDING_ARC and self.output:
            self._splice_arc(self.output[0])
            self.state = ClipState.OUTSIDE_NO_ARC
        return self.output


def _cap_edge(a: XY, b: XY, a_role: Crossing, b_role: Crossing) -> Edge:
    if b_role is Crossing.EXIT:
        return Edge(EdgeKind.EXITING, a, b, (b,))
    if a_role is Crossing.EXIT:
        # The straight cut across the hidden side.
        return Edge(EdgeKind.OUTSIDE, a, b)
    if a_role is Crossing.ENTRY:
        return Edge(EdgeKind.ENTERING, a, b, (a,))
    return Edge(EdgeKind.INSIDE, a, b)


def close_cap_on_limb(cap: Sequence[XY], roles: Sequence[Crossing]) -> List[XY]:
    """Replace the cuts of a projected hemisphere cap with limb arcs.

    *cap* is the orthographic image of a polygon clipped by
    :func:`uvsphere.hemisphere.clip_cap`, and *roles* are the vertex roles
    that clip reported.  Each edge from an exit crossing to the next entry
    crossing is a chord through the disc; it is swapped for the limb arc
    between the two points, swept in the cap's winding.

    Returns:
        The closed outline.  A cap that was never cut comes back unchanged.
    """
    n = len(cap)
    if n < 3 or Crossing.EXIT not in roles:
        return list(cap)

    walker = LimbWalker(signed_area(cap) >= 0.0, roles[0] is not Crossing.EXIT)
    for i in range(n):
        j = (i + 1) % n
        walker.step(_cap_edge(cap[i], cap[j], roles[i], roles[j]))
    result = walker.finish()
    logger.debug("Closed %d horizon cut(s) along the limb", walker.arcs_inserted)
    return result


def full_limb(counter_clockwise: bool = True) -> List[XY]:
    """The whole limb as a closed polygon."""
    sign = 1.0 if counter_clockwise else -1.0
    return [
        (math.cos(sign * 2.0 * math.pi * k / FULL_CIRCLE_STEPS),
         math.sin(sign * 2.0 * math.pi * k / FULL_CIRCLE_STEPS))
        for k in range(FULL_CIRCLE_STEPS)
    ]


def clip_to_limb(polygon: Sequence[XY]) -> List[XY]:
    """Clip a closed projected polygon to the unit disc.

    Edges that leave the disc are cut at the circle and the outside
    stretch is replaced by a sampled limb arc swept in the polygon's
    winding direction.  The winding is read once from the input polygon.

    Args:
        polygon: Closed polygon in view-plane coordinates.  A trailing
            duplicate of the first vertex is allowed.

    Returns:
        The clipped polygon.  A polygon entirely inside the disc is
        returned unchanged; one entirely outside it is empty, unless it
        surrounds the disc, in which case the full limb is returned.
    """
    n = len(polygon)
    if n < 3:
        return list(polygon)

    counter_clockwise = signed_area(polygon) >= 0.0
    walker = LimbWalker(counter_clockwise, is_inside(polygon[0]))
    for i in range(n):
        walker.step(classify_edge(polygon[i], polygon[(i + 1) % n]))
    result = walker.finish()

    if not result and contains_origin(polygon):
        logger.debug("Polygon surrounds the limb; filling the whole disc")
        return full_limb(counter_clockwise)
    if walker.arcs_inserted:
        logger.debug("Inserted %d limb arc(s)", walker.arcs_inserted)
    return result
