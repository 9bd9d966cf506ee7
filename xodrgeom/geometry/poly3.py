"""Cubic polynomial planView segment (``<poly3>``)."""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple

from xodrgeom.config import DEFAULT_CONFIG, EvaluatorConfig
from xodrgeom.geometry._common import (
    BBox2D,
    GeometryRecord,
    bbox_of,
    bounded_minimize,
    quadratic_roots,
    subdivide_stations,
)
from xodrgeom.vector import Vec2D

POLY3_TABLE_SAMPLES = 256


@dataclass(frozen=True)
class Poly3Geometry(GeometryRecord):
    """``v = a + b*u + c*u**2 + d*u**3`` with ``u`` along the start tangent.

    Stations are arc length along the curve.  Because ``u`` is not arc
    length, a table of cumulative arc length over ``u`` (Simpson's rule per
    interval) is built once and inverted by linear interpolation.
    """

    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0
    _u_table: Tuple[float, ...] = field(default=(), init=False, repr=False, compare=False)
    _arc_table: Tuple[float, ...] = field(default=(), init=False, repr=False, compare=False)

    kind: ClassVar[str] = "poly3"

    def __post_init__(self) -> None:
        # 弧長は u 以上なので u ∈ [0, length] の積分で必ず全長を覆える
        count = POLY3_TABLE_SAMPLES
        u_vals = [self.length * idx / count for idx in range(count + 1)]
        arc_vals = [0.0]
        for u_a, u_b in zip(u_vals[:-1], u_vals[1:]):
            u_m = 0.5 * (u_a + u_b)
            step = (u_b - u_a) / 6.0 * (self._speed(u_a) + 4.0 * self._speed(u_m) + self._speed(u_b))
            arc_vals.append(arc_vals[-1] + step)
        object.__setattr__(self, "_u_table", tuple(u_vals))
        object.__setattr__(self, "_arc_table", tuple(arc_vals))

    def _v(self, u: float) -> float:
        return ((self.d * u + self.c) * u + self.b) * u + self.a

    def _dv(self, u: float) -> float:
        return (3.0 * self.d * u + 2.0 * self.c) * u + self.b

    def _speed(self, u: float) -> float:
        slope = self._dv(u)
        return math.sqrt(1.0 + slope * slope)

    def _u_at(self, s: float) -> float:
        arc = s - self.s0
        arcs = self._arc_table
        us = self._u_table
        if arc <= 0.0:
            return arc
        if arc >= arcs[-1]:
            return us[-1] + (arc - arcs[-1])
        idx = max(bisect.bisect_right(arcs, arc) - 1, 0)
        span = arcs[idx + 1] - arcs[idx]
        if span <= 0.0:
            return us[idx]
        ratio = (arc - arcs[idx]) / span
        return us[idx] + ratio * (us[idx + 1] - us[idx])

    def _local_to_world(self, u: float, v: float) -> Vec2D:
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        return self.x0 + cos_h * u - sin_h * v, self.y0 + sin_h * u + cos_h * v

    def get_point(self, s: float, t: float = 0.0) -> Vec2D:
        u = self._u_at(s)
        x, y = self._local_to_world(u, self._v(u))
        if t == 0.0:
            return x, y
        gx, gy = self.get_grad(s)
        return x - t * gy, y + t * gx

    def get_grad(self, s: float) -> Vec2D:
        slope = self._dv(self._u_at(s))
        magnitude = math.sqrt(1.0 + slope * slope)
        du = 1.0 / magnitude
        dv = slope / magnitude
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        return cos_h * du - sin_h * dv, sin_h * du + cos_h * dv

    def get_bbox(self, config: Optional[EvaluatorConfig] = None) -> BBox2D:
        cfg = config or DEFAULT_CONFIG
        u_end = self._u_at(self.s_end)
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        params = [0.0, u_end]
        # x(u) = x0 + cos*u - sin*v(u),  y(u) = y0 + sin*u + cos*v(u)
        for lin, rot in ((cos_h, -sin_h), (sin_h, cos_h)):
            for root in quadratic_roots(3.0 * rot * self.d, 2.0 * rot * self.c, lin + rot * self.b):
                if 0.0 < root < u_end:
                    params.append(root)
        return bbox_of(
            (self._local_to_world(u, self._v(u)) for u in params), padding=cfg.bbox_padding
        )

    def project(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        def distance_sq(s: float) -> float:
            px, py = self.get_point(s)
            return (px - x) ** 2 + (py - y) ** 2

        return self.clamp(bounded_minimize(distance_sq, self.s0, self.s_end, config))

    def approximate_linear(self, eps: float) -> List[float]:
        return subdivide_stations(self.get_point, self.s0, self.s_end, eps)
