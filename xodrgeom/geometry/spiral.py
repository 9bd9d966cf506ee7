"""Euler spiral (clothoid) segment evaluated through Fresnel integrals."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, List, Optional

from xodrgeom.config import DEFAULT_CONFIG, EvaluatorConfig
from xodrgeom.fresnel import unit_clothoid
from xodrgeom.geometry._common import (
    BBox2D,
    GeometryRecord,
    bbox_of,
    bounded_minimize,
    even_stations,
    heading_crossings,
    offset_point,
    sagitta_step,
)
from xodrgeom.vector import Vec2D, rotate


@dataclass(frozen=True)
class Spiral(GeometryRecord):
    """Segment whose curvature changes linearly from ``curv_start`` to ``curv_end``.

    The segment is a window of the unit clothoid ``x + iy = int exp(i*c_dot*u**2/2) du``
    starting at the clothoid parameter ``u_start = curv_start / c_dot``.
    Evaluation subtracts the clothoid point at ``u_start``, rotates by
    ``hdg0`` minus the clothoid heading there and translates to ``(x0, y0)``.
    A spiral whose curvature does not change is evaluated as the arc (or
    line) it degenerates into.
    """

    curv_start: float = 0.0
    curv_end: float = 0.0

    kind: ClassVar[str] = "spiral"

    @property
    def c_dot(self) -> float:
        return (self.curv_end - self.curv_start) / self.length

    @property
    def u_start(self) -> float:
        c_dot = self.c_dot
        if abs(c_dot) <= 1e-12:
            return 0.0
        return self.curv_start / c_dot

    @property
    def u_end(self) -> float:
        return self.u_start + self.length

    def get_curvature(self, s: float) -> float:
        return self.curv_start + self.c_dot * (s - self.s0)

    def get_hdg(self, s: float) -> float:
        ds = s - self.s0
        return self.hdg0 + self.curv_start * ds + 0.5 * self.c_dot * ds * ds

    def _centerline_point(self, ds: float) -> Vec2D:
        c_dot = self.c_dot
        if abs(c_dot) <= 1e-12:
            # 曲率一定: 円弧または直線として評価する
            curvature = self.curv_start
            if abs(curvature) <= 1e-12:
                return (
                    self.x0 + ds * math.cos(self.hdg0),
                    self.y0 + ds * math.sin(self.hdg0),
                )
            hdg = self.hdg0 + curvature * ds
            return (
                self.x0 + (math.sin(hdg) - math.sin(self.hdg0)) / curvature,
                self.y0 - (math.cos(hdg) - math.cos(self.hdg0)) / curvature,
            )

        u_start = self.u_start
        xs, ys, hdg_s = unit_clothoid(u_start, c_dot)
        xe, ye, _ = unit_clothoid(u_start + ds, c_dot)
        dx, dy = rotate((xe - xs, ye - ys), self.hdg0 - hdg_s)
        return self.x0 + dx, self.y0 + dy

    def get_point(self, s: float, t: float = 0.0) -> Vec2D:
        x, y = self._centerline_point(s - self.s0)
        if t == 0.0:
            return x, y
        return offset_point(x, y, self.get_hdg(s), t)

    def get_grad(self, s: float) -> Vec2D:
        hdg = self.get_hdg(s)
        return math.cos(hdg), math.sin(hdg)

    def get_bbox(self, config: Optional[EvaluatorConfig] = None) -> BBox2D:
        cfg = config or DEFAULT_CONFIG
        stations = [self.s0, self.s_end]
        stations.extend(
            self.s0 + ds
            for ds in heading_crossings(self.hdg0, self.curv_start, self.c_dot, self.length)
        )
        return bbox_of((self.get_point(s) for s in stations), padding=cfg.bbox_padding)

    def project(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        def distance_sq(s: float) -> float:
            px, py = self.get_point(s)
            return (px - x) ** 2 + (py - y) ** 2

        return self.clamp(bounded_minimize(distance_sq, self.s0, self.s_end, config))

    def approximate_linear(self, eps: float) -> List[float]:
        curvature = max(abs(self.curv_start), abs(self.curv_end))
        return even_stations(self.s0, self.s_end, sagitta_step(curvature, eps))
