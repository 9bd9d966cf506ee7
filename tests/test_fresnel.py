from pathlib import Path
import math
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from xodrgeom.fresnel import FRESNEL_MAX_ERROR, fresnel, unit_clothoid


@pytest.mark.parametrize(
    "x, expected_s, expected_c",
    [
        (0.0, 0.0, 0.0),
        (0.5, 0.06473243285999929, 0.49234422587144639),
        (1.0, 0.43825914739035476, 0.77989340037682282),
        (2.0, 0.34341567836369824, 0.48825340607534075),
    ],
)
def test_fresnel_known_values(x, expected_s, expected_c):
    s_val, c_val = fresnel(x)

    assert s_val == pytest.approx(expected_s, abs=FRESNEL_MAX_ERROR)
    assert c_val == pytest.approx(expected_c, abs=FRESNEL_MAX_ERROR)


@pytest.mark.parametrize("x", [0.3, 0.99, 1.0, 2.7, 5.99, 6.0, 12.5])
def test_fresnel_is_odd(x):
    s_pos, c_pos = fresnel(x)
    s_neg, c_neg = fresnel(-x)

    assert s_neg == -s_pos
    assert c_neg == -c_pos


def test_fresnel_converges_to_one_half():
    s_val, c_val = fresnel(50.0)

    assert s_val == pytest.approx(0.5, abs=0.01)
    assert c_val == pytest.approx(0.5, abs=0.01)


@pytest.mark.parametrize("x", [0.999999, 5.999999])
def test_fresnel_continuous_across_branches(x):
    below = fresnel(x)
    above = fresnel(x + 2e-6)

    assert below[0] == pytest.approx(above[0], abs=1e-5)
    assert below[1] == pytest.approx(above[1], abs=1e-5)


def test_unit_clothoid_heading_and_symmetry():
    x, y, heading = unit_clothoid(30.0, 2e-3)
    xm, ym, heading_m = unit_clothoid(30.0, -2e-3)

    assert heading == pytest.approx(0.5 * 2e-3 * 900.0)
    assert heading_m == pytest.approx(-heading)
    assert xm == pytest.approx(x)
    assert ym == pytest.approx(-y)
    assert math.hypot(x, y) < 30.0


def test_unit_clothoid_degenerates_to_line():
    assert unit_clothoid(12.0, 0.0) == (12.0, 0.0, 0.0)
