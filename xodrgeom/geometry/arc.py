from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, List, Optional

from xodrgeom.config import EvaluatorConfig
from xodrgeom.geometry._common import (
    BBox2D,
    GeometryRecord,
    bbox_of,
    even_stations,
    heading_crossings,
    offset_point,
    sagitta_step,
)
from xodrgeom.vector import Vec2D


@dataclass(frozen=True)
class Arc(GeometryRecord):
    """Constant-curvature segment; ``curvature`` must be non-zero."""

    curvature: float = 0.0

    kind: ClassVar[str] = "arc"

    @property
    def radius(self) -> float:
        return 1.0 / self.curvature

    @property
    def center(self) -> Vec2D:
        return (
            self.x0 - math.sin(self.hdg0) * self.radius,
            self.y0 + math.cos(self.hdg0) * self.radius,
        )

    def get_hdg(self, s: float) -> float:
        return self.hdg0 + self.curvature * (s - self.s0)

    def get_point(self, s: float, t: float = 0.0) -> Vec2D:
        hdg = self.get_hdg(s)
        x = self.x0 + (math.sin(hdg) - math.sin(self.hdg0)) * self.radius
        y = self.y0 - (math.cos(hdg) - math.cos(self.hdg0)) * self.radius
        return offset_point(x, y, hdg, t)

    def get_grad(self, s: float) -> Vec2D:
        hdg = self.get_hdg(s)
        return math.cos(hdg), math.sin(hdg)

    def get_bbox(self) -> BBox2D:
        stations = [self.s0, self.s_end]
        stations.extend(
            self.s0 + ds for ds in heading_crossings(self.hdg0, self.curvature, 0.0, self.length)
        )
        return bbox_of(self.get_point(s) for s in stations)

    def project(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        cx, cy = self.center
        angle_query = math.atan2(y - cy, x - cx)
        angle_start = math.atan2(self.y0 - cy, self.x0 - cx)
        direction = 1.0 if self.curvature > 0.0 else -1.0
        swept = (direction * (angle_query - angle_start)) % (2.0 * math.pi)
        ds = swept / abs(self.curvature)
        if ds <= self.length:
            return self.clamp(self.s0 + ds)

        # outside the swept range: nearer endpoint, start wins ties
        sx, sy = self.get_point(self.s0)
        ex, ey = self.get_point(self.s_end)
        dist_start = math.hypot(x - sx, y - sy)
        dist_end = math.hypot(x - ex, y - ey)
        return self.s_end if dist_end < dist_start else self.s0

    def approximate_linear(self, eps: float) -> List[float]:
        return even_stations(self.s0, self.s_end, sagitta_step(self.curvature, eps))
