from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, List, Optional

from xodrgeom.config import EvaluatorConfig
from xodrgeom.geometry._common import BBox2D, GeometryRecord, bbox_of, offset_point
from xodrgeom.vector import Vec2D


@dataclass(frozen=True)
class Line(GeometryRecord):
    kind: ClassVar[str] = "line"

    def get_point(self, s: float, t: float = 0.0) -> Vec2D:
        ds = s - self.s0
        x = self.x0 + ds * math.cos(self.hdg0)
        y = self.y0 + ds * math.sin(self.hdg0)
        return offset_point(x, y, self.hdg0, t)

    def get_grad(self, s: float) -> Vec2D:
        return math.cos(self.hdg0), math.sin(self.hdg0)

    def get_bbox(self) -> BBox2D:
        return bbox_of([self.get_point(self.s0), self.get_point(self.s_end)])

    def project(self, x: float, y: float, config: Optional[EvaluatorConfig] = None) -> float:
        dx = x - self.x0
        dy = y - self.y0
        along = dx * math.cos(self.hdg0) + dy * math.sin(self.hdg0)
        return self.clamp(self.s0 + along)

    def approximate_linear(self, eps: float) -> List[float]:
        return [self.s0, self.s_end]
