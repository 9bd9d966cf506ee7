"""Reference line: piecewise planView curve lifted to 3D by the elevation profile."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from xodrgeom.config import EvaluatorConfig
from xodrgeom.geometry.variants import RoadGeometry
from xodrgeom.piecewise import PiecewiseMap
from xodrgeom.poly import CubicSpline
from xodrgeom.vector import Vec3D


@dataclass(frozen=True)
class RefLine:
    length: float
    geometries: PiecewiseMap = field(default_factory=PiecewiseMap)
    elevation: CubicSpline = field(default_factory=CubicSpline)

    @classmethod
    def from_geometries(
        cls,
        geometries: Iterable[RoadGeometry],
        elevation: Optional[CubicSpline] = None,
        length: Optional[float] = None,
    ) -> "RefLine":
        pieces = PiecewiseMap((geom.s0, geom) for geom in geometries)
        if length is None:
            last = pieces.last()
            length = last[1].s_end if last is not None else 0.0
        return cls(length=float(length), geometries=pieces, elevation=elevation or CubicSpline())

    def get_geometry(self, s: float) -> Optional[RoadGeometry]:
        return self.geometries.get(s)

    def get_geometry_s0(self, s: float) -> Optional[float]:
        return self.geometries.get_key(s)

    def get_geometries(self) -> List[RoadGeometry]:
        return self.geometries.values()

    def get_xyz(self, s: float) -> Vec3D:
        geom = self.get_geometry(s)
        z = self.elevation.get(s)
        if geom is None:
            return 0.0, 0.0, z
        x, y = geom.get_point(s)
        return x, y, z

    def get_grad(self, s: float) -> Vec3D:
        geom = self.get_geometry(s)
        dz = self.elevation.get_grad(s)
        if geom is None:
            return 1.0, 0.0, dz
        dx, dy = geom.get_grad(s)
        return dx, dy, dz

    def get_hdg(self, s: float) -> float:
        dx, dy, _ = self.get_grad(s)
        return math.atan2(dy, dx)

    def match(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        """Station of the point on the reference line closest to ``(x, y)``."""

        best_s = 0.0
        best_dist = math.inf
        for geom in self.geometries.values():
            s = geom.project(x, y, config)
            px, py = geom.get_point(s)
            dist = math.hypot(px - x, py - y)
            if dist < best_dist:
                best_dist = dist
                best_s = s
        return best_s

    def approximate_linear(
        self, eps: float, s_start: Optional[float] = None, s_end: Optional[float] = None
    ) -> List[float]:
        """Stations in ``[s_start, s_end]`` whose chords follow the line within ``eps``."""

        lo = 0.0 if s_start is None else s_start
        hi = self.length if s_end is None else s_end
        if hi < lo:
            lo, hi = hi, lo

        stations: List[float] = [lo, hi]
        for geom in self.geometries.values():
            if geom.s_end < lo or geom.s0 > hi:
                continue
            stations.extend(s for s in geom.approximate_linear(eps) if lo <= s <= hi)

        stations.sort()
        result: List[float] = []
        for s in stations:
            if result and abs(s - result[-1]) <= 1e-9:
                continue
            result.append(s)
        return result
