from __future__ import annotations

import math
from dataclasses import dataclass
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


@dataclass(frozen=True)
class ParamPoly3(GeometryRecord):
    """Parametric cubic ``(u(p), v(p))`` in the frame of the start pose.

    ``p`` runs over ``[0, 1]`` when ``normalized`` (``pRange="normalized"``)
    and over ``[0, length]`` otherwise (``pRange="arcLength"``).
    """

    a_u: float = 0.0
    b_u: float = 0.0
    c_u: float = 0.0
    d_u: float = 0.0
    a_v: float = 0.0
    b_v: float = 0.0
    c_v: float = 0.0
    d_v: float = 0.0
    normalized: bool = True

    kind: ClassVar[str] = "paramPoly3"

    @property
    def p_end(self) -> float:
        return 1.0 if self.normalized else self.length

    def _param(self, s: float) -> float:
        ds = s - self.s0
        if self.normalized:
            return ds / self.length
        return ds

    def _station(self, p: float) -> float:
        if self.normalized:
            return self.s0 + p * self.length
        return self.s0 + p

    def _world_coefficients(self) -> Tuple[Tuple[float, ...], Tuple[float, ...]]:
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        u_coeffs = (self.a_u, self.b_u, self.c_u, self.d_u)
        v_coeffs = (self.a_v, self.b_v, self.c_v, self.d_v)
        x_coeffs = tuple(cos_h * cu - sin_h * cv for cu, cv in zip(u_coeffs, v_coeffs))
        y_coeffs = tuple(sin_h * cu + cos_h * cv for cu, cv in zip(u_coeffs, v_coeffs))
        x_coeffs = (self.x0 + x_coeffs[0],) + x_coeffs[1:]
        y_coeffs = (self.y0 + y_coeffs[0],) + y_coeffs[1:]
        return x_coeffs, y_coeffs

    def get_point(self, s: float, t: float = 0.0) -> Vec2D:
        p = self._param(s)
        u = ((self.d_u * p + self.c_u) * p + self.b_u) * p + self.a_u
        v = ((self.d_v * p + self.c_v) * p + self.b_v) * p + self.a_v
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        x = self.x0 + cos_h * u - sin_h * v
        y = self.y0 + sin_h * u + cos_h * v
        if t == 0.0:
            return x, y
        gx, gy = self.get_grad(s)
        return x - t * gy, y + t * gx

    def get_grad(self, s: float) -> Vec2D:
        p = self._param(s)
        du = (3.0 * self.d_u * p + 2.0 * self.c_u) * p + self.b_u
        dv = (3.0 * self.d_v * p + 2.0 * self.c_v) * p + self.b_v
        cos_h = math.cos(self.hdg0)
        sin_h = math.sin(self.hdg0)
        dx = cos_h * du - sin_h * dv
        dy = sin_h * du + cos_h * dv
        magnitude = math.hypot(dx, dy)
        if magnitude <= 1e-12:
            return cos_h, sin_h
        return dx / magnitude, dy / magnitude

    def get_bbox(self, config: Optional[EvaluatorConfig] = None) -> BBox2D:
        cfg = config or DEFAULT_CONFIG
        params = [0.0, self.p_end]
        for coeffs in self._world_coefficients():
            _, b, c, d = coeffs
            for root in quadratic_roots(3.0 * d, 2.0 * c, b):
                if 0.0 < root < self.p_end:
                    params.append(root)
        return bbox_of(
            (self.get_point(self._station(p)) for p in params), padding=cfg.bbox_padding
        )

    def project(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        def distance_sq(s: float) -> float:
            px, py = self.get_point(s)
            return (px - x) ** 2 + (py - y) ** 2

        return self.clamp(bounded_minimize(distance_sq, self.s0, self.s_end, config))

    def approximate_linear(self, eps: float) -> List[float]:
        return subdivide_stations(self.get_point, self.s0, self.s_end, eps)
