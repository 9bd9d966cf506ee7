"""Road surface evaluator.

A :class:`Road` combines the reference line, the superelevation and
crossfall profiles and the lane sections into the mapping
``(s, t, h) -> (x, y, z)``.  Everything is immutable after construction,
so all queries are safe to run concurrently.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Union

from xodrgeom.config import DEFAULT_CONFIG
from xodrgeom.lanes import Lane, LaneSection
from xodrgeom.piecewise import PiecewiseMap
from xodrgeom.poly import CubicSpline
from xodrgeom.refline import RefLine
from xodrgeom.vector import Mat3D, Vec3D, cross, mat_from_columns, mat_vec_mul, normalize

_logger = logging.getLogger(__name__)

Superelevation = CubicSpline


class Side(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union[str, "Side", None]) -> "Side":
        if value is None:
            return cls.BOTH
        if isinstance(value, Side):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        raise ValueError(f"unknown crossfall side: {value!r}")


@dataclass(frozen=True)
class Crossfall:
    """Crossfall polynomials with the side of the road each one applies to."""

    spline: CubicSpline = field(default_factory=CubicSpline)
    sides: PiecewiseMap = field(default_factory=PiecewiseMap)

    def get_side(self, s: float) -> Side:
        key = self.spline.pieces.get_key(s)
        if key is None:
            return Side.BOTH
        return self.sides.find(key, Side.BOTH)

    def get_crossfall(self, s: float, on_left_side: bool) -> float:
        poly = self.spline.get_poly(s)
        if poly is None:
            return 0.0

        side = self.get_side(s)
        if on_left_side and side is Side.RIGHT:
            return 0.0
        if not on_left_side and side is Side.LEFT:
            return 0.0
        return poly.get(s)


@dataclass(frozen=True)
class Road:
    id: str
    length: float
    ref_line: RefLine
    superelevation: CubicSpline = field(default_factory=CubicSpline)
    crossfall: Crossfall = field(default_factory=Crossfall)
    lanesections: PiecewiseMap = field(default_factory=PiecewiseMap)

    # -- lane sections -----------------------------------------------------

    def get_lanesection(self, s: float) -> Optional[LaneSection]:
        return self.lanesections.get(s)

    def get_lanesections(self) -> List[LaneSection]:
        return self.lanesections.values()

    def get_lanesection_s0(self, s: float) -> Optional[float]:
        return self.lanesections.get_key(s)

    def get_lanesection_end(self, section: Union[LaneSection, float]) -> float:
        s0 = section.s0 if isinstance(section, LaneSection) else self.get_lanesection_s0(section)
        if s0 is None:
            return self.length
        following = self.lanesections.key_after(s0)
        return self.length if following is None else following

    def get_lanesection_length(self, section: Union[LaneSection, float]) -> float:
        s0 = section.s0 if isinstance(section, LaneSection) else self.get_lanesection_s0(section)
        if s0 is None:
            return 0.0
        return self.get_lanesection_end(s0) - s0

    # -- frame -------------------------------------------------------------

    def get_transformation_matrix(self, s: float) -> Mat3D:
        """Affine frame at ``s`` with columns ``e_t``, ``e_h`` and the origin.

        ``e_t`` is the lateral axis rolled by the superelevation; its lift is
        scaled by ``|g_y|`` so it vanishes when the road runs along the
        x-axis.
        """

        grad = self.ref_line.get_grad(s)
        superelevation = self.superelevation.get(s)

        e_t = normalize((-grad[1], grad[0], math.tan(superelevation) * abs(grad[1])))
        e_h = normalize(cross(grad, e_t))
        p0 = self.ref_line.get_xyz(s)
        return mat_from_columns(e_t, e_h, p0)

    def get_xyz(self, s: float, t: float, h: float = 0.0) -> Vec3D:
        return mat_vec_mul(self.get_transformation_matrix(s), (t, h, 1.0))

    # -- surface -----------------------------------------------------------

    def _lane_height(self, lane: Lane, s: float, t: float) -> float:
        t_inner = lane.inner_border.get(s)
        crossfall = self.crossfall.get_crossfall(s, lane.id > 0)

        if lane.level:
            # 内側境界で横断勾配を打ち消し、外側へは片勾配分を戻す
            h_inner = -math.tan(crossfall) * abs(t_inner)
            superelevation = self.superelevation.get(s)
            h_t = h_inner + math.tan(superelevation) * (t - t_inner)
        else:
            h_t = -math.tan(crossfall) * abs(t)

        offset = lane.get_height_offset(s)
        if offset is None:
            return h_t

        t_outer = lane.outer_border.get(s)
        p_t = (t - t_inner) / (t_outer - t_inner) if t_outer != t_inner else 0.0
        return h_t + p_t * (offset.outer - offset.inner) + offset.inner

    def get_surface_pt(self, s: float, t: float) -> Vec3D:
        lanesection = self.get_lanesection(s)
        if lanesection is None:
            _logger.warning("road #%s - could not get lane section for s: %.2f", self.id, s)
            return self.get_xyz(s, t, 0.0)

        lane = lanesection.get_lane(s, t)
        if lane is None:
            _logger.warning("road #%s - lane section at s: %.2f has no lanes", self.id, s)
            return self.get_xyz(s, t, 0.0)
        return self.get_xyz(s, t, self._lane_height(lane, s, t))

    def get_lane_border_point(self, lane: Lane, s: float, outer: bool = True) -> Vec3D:
        t = lane.get_border(s, outer=outer)
        return self.get_xyz(s, t, self._lane_height(lane, s, t))

    def get_lane_border_line(
        self, lane: Lane, eps: Optional[float] = None, outer: bool = True
    ) -> List[Vec3D]:
        """Polyline of a lane border over its lane section."""

        if eps is None:
            eps = DEFAULT_CONFIG.linear_approx_eps
        s_start = lane.section_s0
        s_end = self.get_lanesection_end(s_start)
        stations = self.ref_line.approximate_linear(eps, s_start, s_end)
        return [self.get_lane_border_point(lane, s, outer=outer) for s in stations]
