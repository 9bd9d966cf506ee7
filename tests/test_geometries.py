from pathlib import Path
import math
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from xodrgeom.geometry.arc import Arc
from xodrgeom.geometry.line import Line
from xodrgeom.geometry.param_poly3 import ParamPoly3
from xodrgeom.geometry.poly3 import Poly3Geometry
from xodrgeom.geometry.spiral import Spiral
from xodrgeom.geometry.variants import GEOMETRY_TYPES


GEOMETRIES = [
    Line(s0=0.0, x0=1.0, y0=2.0, hdg0=0.3, length=40.0),
    Arc(s0=5.0, x0=0.0, y0=0.0, hdg0=0.0, length=math.pi * 25.0, curvature=0.02),
    Arc(s0=0.0, x0=-3.0, y0=4.0, hdg0=2.0, length=120.0, curvature=-0.04),
    Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=100.0, curv_start=0.0, curv_end=0.01),
    Spiral(s0=10.0, x0=5.0, y0=-5.0, hdg0=1.2, length=80.0, curv_start=0.02, curv_end=-0.01),
    Spiral(s0=0.0, x0=0.0, y0=0.0, hdg0=-0.4, length=50.0, curv_start=0.0, curv_end=0.2),
    ParamPoly3(
        s0=0.0, x0=10.0, y0=10.0, hdg0=0.5, length=30.0,
        b_u=30.0, c_u=-2.0, d_u=0.5, c_v=6.0, d_v=-3.0, normalized=True,
    ),
    ParamPoly3(
        s0=3.0, x0=0.0, y0=0.0, hdg0=-1.0, length=20.0,
        b_u=1.0, c_v=0.01, d_v=0.0005, normalized=False,
    ),
    Poly3Geometry(s0=0.0, x0=2.0, y0=-1.0, hdg0=0.8, length=25.0, c=0.01, d=-0.0004),
]


def _ids(geom):
    return f"{geom.kind}@{geom.s0}"


def _stations(geom, count=1001):
    return [geom.s0 + geom.length * idx / (count - 1) for idx in range(count)]


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_gradient_is_unit(geom):
    for s in _stations(geom, 101):
        gx, gy = geom.get_grad(s)
        assert math.hypot(gx, gy) == pytest.approx(1.0, abs=1e-12)


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_start_pose(geom):
    x, y = geom.get_point(geom.s0)
    gx, gy = geom.get_grad(geom.s0)

    assert x == pytest.approx(geom.x0, abs=1e-12)
    assert y == pytest.approx(geom.y0, abs=1e-12)
    diff = (math.atan2(gy, gx) - geom.hdg0) % (2.0 * math.pi)
    assert min(diff, 2.0 * math.pi - diff) == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_bbox_is_conservative(geom):
    (xmin, ymin), (xmax, ymax) = geom.get_bbox()
    tol = 1e-9
    for s in _stations(geom):
        x, y = geom.get_point(s)
        assert xmin - tol <= x <= xmax + tol
        assert ymin - tol <= y <= ymax + tol


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_projection_recovers_station(geom):
    for s in _stations(geom, 23):
        x, y = geom.get_point(s)
        assert geom.project(x, y) == pytest.approx(s, abs=1e-3)


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_lateral_offset_is_perpendicular(geom):
    s = geom.s0 + 0.4 * geom.length
    cx, cy = geom.get_point(s)
    ox, oy = geom.get_point(s, 2.5)
    gx, gy = geom.get_grad(s)

    assert math.hypot(ox - cx, oy - cy) == pytest.approx(2.5)
    # positive offsets go to the left of the tangent
    assert gx * (oy - cy) - gy * (ox - cx) == pytest.approx(2.5)


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_projection_is_clamped(geom):
    s = geom.project(1e6, -1e6)

    assert geom.s0 <= s <= geom.s_end


@pytest.mark.parametrize("geom", GEOMETRIES, ids=_ids)
def test_approximate_linear_covers_interval(geom):
    stations = geom.approximate_linear(0.05)

    assert stations[0] == geom.s0
    assert stations[-1] == pytest.approx(geom.s_end)
    assert stations == sorted(stations)


def test_quarter_arc_end_pose():
    radius = 50.0
    arc = Arc(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=math.pi * radius / 2.0, curvature=1.0 / radius)

    x, y = arc.get_point(arc.s_end)
    gx, gy = arc.get_grad(arc.s_end)

    assert x == pytest.approx(50.0)
    assert y == pytest.approx(50.0)
    assert gx == pytest.approx(0.0, abs=1e-12)
    assert gy == pytest.approx(1.0)
    (xmin, ymin), (xmax, ymax) = arc.get_bbox()
    assert (xmin, ymin, xmax, ymax) == pytest.approx((0.0, 0.0, 50.0, 50.0), abs=1e-9)


def test_arc_projection_outside_swept_range_picks_nearer_end():
    arc = Arc(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=math.pi * 25.0, curvature=0.02)

    # behind the start
    assert arc.project(-10.0, -1.0) == 0.0
    # beyond the end, above the circle top
    assert arc.project(60.0, 70.0) == pytest.approx(arc.s_end)


def test_line_projection_is_orthogonal_foot():
    line = Line(s0=10.0, x0=0.0, y0=0.0, hdg0=0.0, length=20.0)

    assert line.project(5.0, 3.0) == pytest.approx(15.0)
    assert line.project(-5.0, 3.0) == 10.0
    assert line.project(50.0, 3.0) == 30.0
    assert line.get_bbox() == ((0.0, 0.0), (20.0, 0.0))


def test_arc_linear_approximation_respects_sagitta():
    arc = Arc(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=100.0, curvature=0.05)
    eps = 0.01
    stations = arc.approximate_linear(eps)

    for a, b in zip(stations[:-1], stations[1:]):
        pa = arc.get_point(a)
        pb = arc.get_point(b)
        pm = arc.get_point(0.5 * (a + b))
        chord_mid = (0.5 * (pa[0] + pb[0]), 0.5 * (pa[1] + pb[1]))
        assert math.hypot(pm[0] - chord_mid[0], pm[1] - chord_mid[1]) <= eps + 1e-9


def test_param_poly3_normalized_matches_arc_length_form():
    normalized = ParamPoly3(
        s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=10.0, b_u=10.0, c_v=1.0, normalized=True
    )
    arc_length = ParamPoly3(
        s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=10.0, b_u=1.0, c_v=0.01, normalized=False
    )

    for s in (0.0, 2.5, 7.0, 10.0):
        assert normalized.get_point(s) == pytest.approx(arc_length.get_point(s))


def test_poly3_geometry_stations_are_arc_length():
    geom = Poly3Geometry(s0=0.0, x0=0.0, y0=0.0, hdg0=0.0, length=20.0, c=0.02)
    points = [geom.get_point(geom.length * idx / 2000) for idx in range(2001)]
    travelled = sum(
        math.hypot(b[0] - a[0], b[1] - a[1]) for a, b in zip(points[:-1], points[1:])
    )

    assert travelled == pytest.approx(geom.length, rel=1e-4)


def test_geometry_registry_is_closed():
    assert set(GEOMETRY_TYPES) == {"line", "arc", "spiral", "paramPoly3", "poly3"}
