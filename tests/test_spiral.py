from pathlib import Path
import math
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from xodrgeom.geometry.arc import Arc
from xodrgeom.geometry.line import Line
from xodrgeom.geometry.spiral import Spiral


def _chord_heading(geom, s, delta):
    ax, ay = geom.get_point(s - delta)
    bx, by = geom.get_point(s + delta)
    return math.atan2(by - ay, bx - ax)


def _angle_diff(a, b):
    return (a - b + math.pi) % (2.0 * math.pi) - math.pi


def test_spiral_end_heading_matches_mean_curvature():
    spiral = Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=100.0, curv_start=0.0, curv_end=0.01)
    gx, gy = spiral.get_grad(spiral.s_end)

    assert math.atan2(gy, gx) == pytest.approx(0.5 * (0.0 + 0.01) * 100.0)
    assert spiral.c_dot == pytest.approx(1e-4)


@pytest.mark.parametrize(
    "spiral, delta, tol",
    [
        (Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=100.0, curv_start=0.0, curv_end=0.01), 1e-3, 1e-6),
        (Spiral(s0=10.0, x0=5.0, y0=-5.0, hdg0=1.2, length=80.0, curv_start=0.02, curv_end=-0.01), 1e-3, 1e-6),
        (Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=-0.4, length=50.0, curv_start=0.0, curv_end=0.2), 0.05, 1e-4),
    ],
)
def test_points_follow_analytic_heading(spiral, delta, tol):
    for idx in range(1, 20):
        s = spiral.s0 + spiral.length * idx / 20.0
        assert _angle_diff(_chord_heading(spiral, s, delta), spiral.get_hdg(s)) == pytest.approx(0.0, abs=tol)


@pytest.mark.parametrize(
    "curv_start, curv_end",
    [(0.0, 0.01), (0.02, -0.01), (-0.05, -0.001), (0.004, 0.004)],
)
def test_curvature_at_ends(curv_start, curv_end):
    spiral = Spiral(
        s0=3.0, x0=1.0, y0=1.0, hdg0=0.2, length=60.0, curv_start=curv_start, curv_end=curv_end
    )
    h = 1e-4

    start_curv = (spiral.get_hdg(spiral.s0 + h) - spiral.get_hdg(spiral.s0)) / h
    end_curv = (spiral.get_hdg(spiral.s_end) - spiral.get_hdg(spiral.s_end - h)) / h

    assert start_curv == pytest.approx(curv_start, abs=1e-6)
    assert end_curv == pytest.approx(curv_end, abs=1e-6)
    assert spiral.get_curvature(spiral.s_end) == pytest.approx(curv_end)


def test_constant_curvature_spiral_matches_arc():
    spiral = Spiral(s0=0.0, x0=2.0, y0=3.0, hdg0=0.7, length=40.0, curv_start=0.03, curv_end=0.03)
    arc = Arc(s0=0.0, x0=2.0, y0=3.0, hdg0=0.7, length=40.0, curvature=0.03)

    for s in (0.0, 13.0, 40.0):
        assert spiral.get_point(s) == pytest.approx(arc.get_point(s))
        assert spiral.get_grad(s) == pytest.approx(arc.get_grad(s))


def test_zero_curvature_spiral_matches_line():
    spiral = Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=-0.3, length=10.0)
    line = Line(s0=0.0, x0=0.0, y0=0.0, hdg0=-0.3, length=10.0)

    assert spiral.get_point(7.0, 1.5) == pytest.approx(line.get_point(7.0, 1.5))


def test_spiral_bbox_contains_heading_extrema():
    # turns through more than a half circle, so the bbox relies on the
    # heading crossings rather than the endpoints alone
    spiral = Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=60.0, curv_start=0.0, curv_end=0.12)
    (xmin, ymin), (xmax, ymax) = spiral.get_bbox()
    end_x, end_y = spiral.get_point(spiral.s_end)

    assert spiral.get_hdg(spiral.s_end) > math.pi
    assert xmax > max(0.0, end_x) + 1.0
    for idx in range(1001):
        x, y = spiral.get_point(spiral.length * idx / 1000.0)
        assert xmin <= x <= xmax
        assert ymin <= y <= ymax


def test_spiral_projection_of_offset_point():
    spiral = Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=100.0, curv_start=0.0, curv_end=0.01)
    x, y = spiral.get_point(37.0, -2.0)

    assert spiral.project(x, y) == pytest.approx(37.0, abs=1e-3)
