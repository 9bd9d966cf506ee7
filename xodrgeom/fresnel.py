"""Fresnel integrals and the unit clothoid built on top of them.

``C(x) = int_0^x cos(pi*u**2/2) du`` and ``S(x) = int_0^x sin(pi*u**2/2) du``
are evaluated in three regimes:

* ``|x| < 1``: the Maclaurin series, summed until the relative size of the
  next term drops below ``SERIES_EPS``.
* ``1 <= |x| < 6``: rational approximations of the auxiliary functions
  ``f`` and ``g`` (the Abramowitz-Stegun 7.3.5/7.3.6 representation)
  followed by ``C = 1/2 + f*sin(U) - g*cos(U)`` and
  ``S = 1/2 - f*cos(U) - g*sin(U)`` with ``U = pi*x**2/2``.
* ``|x| >= 6``: the asymptotic expansions of ``f`` and ``g``.

The absolute error stays below :data:`FRESNEL_MAX_ERROR` on every branch.
"""

from __future__ import annotations

import math
from typing import Tuple

FRESNEL_MAX_ERROR = 1e-7
SERIES_EPS = 1e-15
ASYMPTOTIC_MAX_TERMS = 64

_HALF_PI = 0.5 * math.pi

_F_NUM = (
    0.49999988085884732562,
    1.3511177791210715095,
    1.3175407836168659241,
    1.1861149300293854992,
    0.7709627298888346769,
    0.4173874338787963957,
    0.19044202705272903923,
    0.06655998896627697537,
    0.022789258616785717418,
    0.0040116689358507943804,
    0.0012192036851249883877,
)
_F_DEN = (
    1.0,
    2.7022305772400260215,
    4.2059268151438492767,
    4.5221882840107715516,
    3.7240352281630359588,
    2.4589286254678152943,
    1.3125491629443702962,
    0.5997685720120932908,
    0.20907680750378849485,
    0.07159621634657901433,
    0.012602969513793714191,
    0.0038302423512931250065,
)
_G_NUM = (
    0.50000014392706344801,
    0.032346434925349128728,
    0.17619325157863254363,
    0.038606273170706486252,
    0.023693692309257725361,
    0.007092018516845033662,
    0.0012492123212412087428,
    0.00044023040894778468486,
    -8.80266827476172521e-6,
    -1.4033554916580018648e-8,
    2.3509221782155474353e-10,
)
_G_DEN = (
    1.0,
    2.0646987497019598937,
    2.9109311766948031235,
    2.6561936751333032911,
    2.0195563983177268073,
    1.1167891129189363902,
    0.57267874755973172715,
    0.19408481169593070798,
    0.07634808341431248904,
    0.011573247407207865977,
    0.0044099273693067311209,
    -0.00009070958410429993314,
)


def _series(x: float) -> Tuple[float, float]:
    t = -(_HALF_PI * x * x) ** 2

    # cosine integral: sum t**n / ((2n)! (4n+1))
    two_n = 0.0
    fact = 1.0
    den = 1.0
    num = 1.0
    total = 1.0
    while True:
        two_n += 2.0
        fact *= two_n * (two_n - 1.0)
        den += 4.0
        num *= t
        term = num / (fact * den)
        total += term
        if abs(term) <= SERIES_EPS * abs(total):
            break
    c_val = x * total

    # sine integral: sum t**n / ((2n+1)! (4n+3))
    two_n = 1.0
    fact = 1.0
    den = 3.0
    num = 1.0
    total = 1.0 / 3.0
    while True:
        two_n += 2.0
        fact *= two_n * (two_n - 1.0)
        den += 4.0
        num *= t
        term = num / (fact * den)
        total += term
        if abs(term) <= SERIES_EPS * abs(total):
            break
    s_val = _HALF_PI * total * x * x * x

    return s_val, c_val


def _rational(num: Tuple[float, ...], den: Tuple[float, ...], x: float) -> float:
    sum_num = 0.0
    sum_den = den[-1]
    for k in range(len(num) - 1, -1, -1):
        sum_num = num[k] + x * sum_num
        sum_den = den[k] + x * sum_den
    return sum_num / sum_den


def _asymptotic(x: float, shift: float) -> float:
    t = -((math.pi * x * x) ** -2)
    numterm = -1.0
    term = 1.0
    total = 1.0
    previous = 1.0
    for _ in range(ASYMPTOTIC_MAX_TERMS):
        numterm += 4.0
        term *= numterm * (numterm + shift) * t
        if abs(term) > previous:
            # the expansion started to diverge; the partial sum is already
            # as accurate as it gets
            break
        total += term
        if abs(term) <= 0.1 * SERIES_EPS * abs(total):
            break
        previous = abs(term)
    return total


def fresnel(x: float) -> Tuple[float, float]:
    """Return ``(S(x), C(x))``."""

    ax = abs(x)
    if ax < 1.0:
        s_val, c_val = _series(ax)
    else:
        if ax < 6.0:
            f = _rational(_F_NUM, _F_DEN, ax)
            g = _rational(_G_NUM, _G_DEN, ax)
        else:
            f = _asymptotic(ax, -2.0) / (math.pi * ax)
            g = _asymptotic(ax, 2.0) / ((math.pi * ax) * (math.pi * ax) * ax)
        u = _HALF_PI * ax * ax
        sin_u = math.sin(u)
        cos_u = math.cos(u)
        c_val = 0.5 + f * sin_u - g * cos_u
        s_val = 0.5 - f * cos_u - g * sin_u

    if x < 0.0:
        return -s_val, -c_val
    return s_val, c_val


def unit_clothoid(u: float, c_dot: float) -> Tuple[float, float, float]:
    """Evaluate the clothoid through the origin with heading 0 and curvature ``c_dot * u``.

    Returns ``(x, y, heading)`` at arc length ``u``.
    """

    if abs(c_dot) <= 1e-12:
        return u, 0.0, 0.0

    a = math.sqrt(math.pi / abs(c_dot))
    s_val, c_val = fresnel(u / a)
    x = a * c_val
    y = a * s_val
    if c_dot < 0.0:
        y = -y
    heading = 0.5 * c_dot * u * u
    return x, y, heading
