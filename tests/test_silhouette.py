"""Tests for uvsphere.silhouette - limb clipping of projected polygons."""

from __future__ import annotations

import math

import pytest

from uvsphere.hemisphere import Crossing
from uvsphere.silhouette import (
    FULL_CIRCLE_STEPS,
    ClipState,
    Edge,
    EdgeKind,
    LimbWalker,
    arc_between,
    circle_roots,
    classify_edge,
    clip_to_limb,
    close_cap_on_limb,
    contains_origin,
    full_limb,
    signed_area,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _radius(p) -> float:
    return math.hypot(p[0], p[1])


def _on_unit_circle(p, tol: float = 1e-9) -> bool:
    return abs(_radius(p) - 1.0) < tol


def _small_circle(cx: float, cy: float, r: float, n: int = 32):
    pts = [
        (cx + r * math.cos(2 * math.pi * k / n), cy + r * math.sin(2 * math.pi * k / n))
        for k in range(n)
    ]
    return pts + [pts[0]]


HALF = math.sqrt(0.75)

# Rectangle poking out of the right side of the disc, counter-clockwise.
POKING_CCW = [(0.0, -0.5), (1.5, -0.5), (1.5, 0.5), (0.0, 0.5)]

# Cap cut at the horizon: the chord from the exit at -30 degrees to the
# entry at +30 degrees stands in for the hidden part.
CUT_CAP = [(0.0, -0.5), (HALF, -0.5), (HALF, 0.5), (0.0, 0.5)]
CUT_ROLES = [Crossing.NONE, Crossing.EXIT, Crossing.ENTRY, Crossing.NONE]


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class TestSignedArea:
    def test_winding_sign(self):
        square = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
        assert signed_area(square) == pytest.approx(1.0)
        assert signed_area(square[::-1]) == pytest.approx(-1.0)


class TestCircleRoots:
    def test_one_crossing(self):
        assert circle_roots((0.0, 0.0), (2.0, 0.0)) == pytest.approx([0.5])

    def test_two_crossings_in_order(self):
        assert circle_roots((-2.0, 0.0), (2.0, 0.0)) == pytest.approx([0.25, 0.75])

    def test_tangent_reported_once(self):
        assert circle_roots((-2.0, 1.0), (2.0, 1.0)) == pytest.approx([0.5])

    def test_miss(self):
        assert circle_roots((-2.0, 2.0), (2.0, 2.0)) == []

    def test_roots_outside_segment_ignored(self):
        assert circle_roots((2.0, 0.0), (3.0, 0.0)) == []

    def test_degenerate_edge(self):
        assert circle_roots((2.0, 0.0), (2.0, 0.0)) == []


class TestClassifyEdge:
    def test_inside(self):
        edge = classify_edge((0.0, 0.0), (0.5, 0.5))
        assert edge.kind is EdgeKind.INSIDE
        assert edge.crossings == ()

    def test_exiting(self):
        edge = classify_edge((0.0, 0.0), (2.0, 0.0))
        assert edge.kind is EdgeKind.EXITING
        assert edge.crossings[0] == pytest.approx((1.0, 0.0))

    def test_entering(self):
        edge = classify_edge((0.0, 2.0), (0.0, 0.0))
        assert edge.kind is EdgeKind.ENTERING
        assert edge.crossings[0] == pytest.approx((0.0, 1.0))

    def test_passing(self):
        edge = classify_edge((-2.0, 0.0), (2.0, 0.0))
        assert edge.kind is EdgeKind.PASSING
        assert edge.crossings[0] == pytest.approx((-1.0, 0.0))
        assert edge.crossings[1] == pytest.approx((1.0, 0.0))

    def test_outside(self):
        assert classify_edge((-2.0, 2.0), (2.0, 2.0)).kind is EdgeKind.OUTSIDE

    def test_tangent_is_outside(self):
        assert classify_edge((-2.0, 1.0), (2.0, 1.0)).kind is EdgeKind.OUTSIDE

    def test_crossings_exactly_on_limb(self):
        edge = classify_edge((0.1, 0.2), (1.7, -0.9))
        assert _on_unit_circle(edge.crossings[0], 1e-12)


class TestArcBetween:
    def test_counter_clockwise_quarter(self):
        arc = arc_between((1.0, 0.0), (0.0, 1.0), counter_clockwise=True)
        assert len(arc) >= 44
        assert all(_on_unit_circle(p) for p in arc)
        angles = [math.atan2(y, x) for x, y in arc]
        assert angles == sorted(angles)
        assert all(0.0 < a < math.pi / 2 for a in angles)

    def test_clockwise_goes_the_long_way(self):
        arc = arc_between((1.0, 0.0), (0.0, 1.0), counter_clockwise=False)
        assert len(arc) > 100
        assert arc[0][1] < 0.0
        assert any(x < -0.99 for x, _ in arc)

    def test_short_arc_uses_minimum_steps(self):
        end = (math.cos(math.radians(1)), math.sin(math.radians(1)))
        assert len(arc_between((1.0, 0.0), end, counter_clockwise=True)) == 3

    def test_same_point_is_empty(self):
        assert arc_between((1.0, 0.0), (1.0, 0.0), counter_clockwise=True) == []

    def test_nearly_same_point_is_not_a_full_turn(self):
        end = (math.cos(-1e-14), math.sin(-1e-14))
        assert arc_between((1.0, 0.0), end, counter_clockwise=True) == []
        assert arc_between(end, (1.0, 0.0), counter_clockwise=False) == []


class TestContainsOrigin:
    def test_inside_and_outside(self):
        assert contains_origin([(-2, -2), (2, -2), (2, 2), (-2, 2)])
        assert not contains_origin([(3, 3), (4, 3), (4, 4), (3, 4)])


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class TestLimbWalker:
    def test_exit_then_enter_splices_one_arc(self):
        walker = LimbWalker(counter_clockwise=True, start_inside=True)
        assert walker.state is ClipState.INSIDE

        walker.step(Edge(EdgeKind.EXITING, (0.0, 0.0), (2.0, 0.0), ((1.0, 0.0),)))
        assert walker.state is ClipState.OUTSIDE_PENDING_ARC
        assert walker.pending == (1.0, 0.0)

        walker.step(Edge(EdgeKind.OUTSIDE, (2.0, 0.0), (0.0, 2.0)))
        assert walker.state is ClipState.OUTSIDE_PENDING_ARC

        walker.step(Edge(EdgeKind.ENTERING, (0.0, 2.0), (0.0, 0.0), ((0.0, 1.0),)))
        assert walker.state is ClipState.INSIDE
        assert walker.pending is None
        assert walker.arcs_inserted == 1

        out = walker.finish()
        assert out[0] == (0.0, 0.0)
        assert out[1] == (1.0, 0.0)
        assert out[-1] == (0.0, 1.0)
        assert all(_on_unit_circle(p) for p in out[1:])

    def test_start_outside_has_no_arc_until_exit(self):
        walker = LimbWalker(counter_clockwise=True, start_inside=False)
        assert walker.state is ClipState.OUTSIDE_NO_ARC
        walker.step(Edge(EdgeKind.ENTERING, (0.0, 2.0), (0.0, 0.0), ((0.0, 1.0),)))
        assert walker.arcs_inserted == 0
        assert walker.output == [(0.0, 1.0)]

    def test_finish_closes_pending_arc(self):
        walker = LimbWalker(counter_clockwise=True, start_inside=False)
        walker.step(Edge(EdgeKind.ENTERING, (0.0, 2.0), (0.0, 0.0), ((0.0, 1.0),)))
        walker.step(Edge(EdgeKind.EXITING, (0.0, 0.0), (2.0, 0.0), ((1.0, 0.0),)))
        out = walker.finish()
        assert walker.arcs_inserted == 1
        assert walker.state is ClipState.OUTSIDE_NO_ARC
        assert len(out) > 3


# ---------------------------------------------------------------------------
# Polygon clipping
# ---------------------------------------------------------------------------

class TestClipToLimb:
    def test_polygon_inside_is_unchanged(self):
        polygon = _small_circle(0.2, 0.1, 0.3)
        assert clip_to_limb(polygon) == polygon

    def test_degenerate_input_passed_through(self):
        assert clip_to_limb([(0.0, 0.0), (2.0, 0.0)]) == [(0.0, 0.0), (2.0, 0.0)]

    def test_poking_polygon_follows_limb(self):
        out = clip_to_limb(POKING_CCW)
        assert all(_radius(p) <= 1.0 + 1e-9 for p in out)
        assert out[0] == (0.0, -0.5)
        assert out[1] == pytest.approx((HALF, -0.5))
        assert out[-2] == pytest.approx((HALF, 0.5))
        assert out[-1] == (0.0, 0.5)
        arc = out[2:-2]
        assert len(arc) >= 4
        assert all(_on_unit_circle(p) for p in arc)
        assert max(x for x, _ in out) > 0.999

    def test_clockwise_polygon_arc_stays_on_near_side(self):
        out = clip_to_limb(POKING_CCW[::-1])
        assert all(_radius(p) <= 1.0 + 1e-9 for p in out)
        assert all(x >= -1e-9 for x, _ in out)
        assert max(x for x, _ in out) > 0.999

    def test_polygon_starting_outside(self):
        rotated = POKING_CCW[1:] + POKING_CCW[:1]
        out = clip_to_limb(rotated)
        assert all(_radius(p) <= 1.0 + 1e-9 for p in out)
        assert all(x >= -1e-9 for x, _ in out)
        assert max(x for x, _ in out) > 0.999

    def test_band_passing_through_disc(self):
        band = [(-2.0, -0.1), (2.0, -0.1), (2.0, 0.1), (-2.0, 0.1)]
        out = clip_to_limb(band)
        assert all(_radius(p) <= 1.0 + 1e-9 for p in out)
        assert max(x for x, _ in out) > 0.999
        assert min(x for x, _ in out) < -0.999
        assert all(abs(y) <= 0.1 + 1e-9 for _, y in out)

    def test_polygon_outside_is_empty(self):
        assert clip_to_limb([(3.0, 3.0), (4.0, 3.0), (4.0, 4.0), (3.0, 4.0)]) == []

    def test_surrounding_polygon_fills_limb(self):
        out = clip_to_limb([(-2.0, -2.0), (2.0, -2.0), (2.0, 2.0), (-2.0, 2.0)])
        assert len(out) == FULL_CIRCLE_STEPS
        assert all(_on_unit_circle(p) for p in out)
        assert signed_area(out) > 0.0



class TestCloseCapOnLimb:
    def test_uncut_cap_unchanged(self):
        polygon = _small_circle(0.2, 0.1, 0.3)
        roles = [Crossing.NONE] * len(polygon)
        assert close_cap_on_limb(polygon, roles) == polygon

    def test_chord_replaced_by_arc(self):
        out = close_cap_on_limb(CUT_CAP, CUT_ROLES)
        assert out[:2] == CUT_CAP[:2]
        assert out[-2:] == CUT_CAP[2:]
        arc = out[2:-2]
        assert len(arc) >= 4
        assert all(_on_unit_circle(p) for p in arc)
        assert all(x > HALF for x, _ in arc)
        assert max(x for x, _ in arc) > 0.999

    def test_cap_starting_at_entry_closes_on_finish(self):
        cap = CUT_CAP[2:] + CUT_CAP[:2]
        roles = CUT_ROLES[2:] + CUT_ROLES[:2]
        out = close_cap_on_limb(cap, roles)
        assert out[:4] == cap
        arc = out[4:]
        assert len(arc) >= 4
        assert all(_on_unit_circle(p) and p[0] > HALF for p in arc)

    def test_clockwise_cap_arc_stays_on_near_side(self):
        cap = CUT_CAP[::-1]
        roles = [Crossing.NONE, Crossing.EXIT, Crossing.ENTRY, Crossing.NONE]
        out = close_cap_on_limb(cap, roles)
        assert len(out) > len(cap) + 3
        assert all(x >= -1e-9 for x, _ in out)
        assert max(x for x, _ in out) > 0.999


class TestFullLimb:
    def test_winding_follows_request(self):
        assert signed_area(full_limb(True)) > 0.0
        assert signed_area(full_limb(False)) < 0.0
        assert signed_area(full_limb()) == pytest.approx(math.pi, rel=1e-3)
