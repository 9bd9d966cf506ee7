"""Lane sections, lanes and per-lane height offsets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from xodrgeom.piecewise import PiecewiseMap
from xodrgeom.poly import CubicSpline


@dataclass(frozen=True)
class HeightOffset:
    inner: float = 0.0
    outer: float = 0.0


@dataclass(frozen=True)
class Lane:
    """A lane bounded by two lateral borders given as splines of ``s``.

    ``section_s0`` and ``road_id`` identify the owning section and road; they
    are plain keys, not references.
    """

    id: int
    inner_border: CubicSpline = field(default_factory=CubicSpline)
    outer_border: CubicSpline = field(default_factory=CubicSpline)
    level: bool = False
    height_offsets: PiecewiseMap = field(default_factory=PiecewiseMap)
    type: str = "driving"
    section_s0: float = 0.0
    road_id: str = ""

    @property
    def is_left(self) -> bool:
        return self.id > 0

    def get_border(self, s: float, outer: bool = True) -> float:
        border = self.outer_border if outer else self.inner_border
        return border.get(s)

    def get_height_offset(self, s: float) -> Optional[HeightOffset]:
        """Height offset at ``s``, linearly interpolated towards the next entry."""

        item = self.height_offsets.get_item(s)
        if item is None:
            return None
        s_entry, current = item
        following = self.height_offsets.next_item(s)
        if following is None:
            return current
        s_next, nxt = following
        ds = s_next - s_entry
        if ds <= 0.0:
            return current
        ratio = (s - s_entry) / ds
        return HeightOffset(
            inner=current.inner + ratio * (nxt.inner - current.inner),
            outer=current.outer + ratio * (nxt.outer - current.outer),
        )


@dataclass(frozen=True)
class LaneSection:
    s0: float
    lanes: Tuple[Lane, ...] = ()
    road_id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "lanes", tuple(sorted(self.lanes, key=lambda lane: lane.id)))

    @property
    def id_to_lane(self) -> Dict[int, Lane]:
        return {lane.id: lane for lane in self.lanes}

    def get_lane_by_id(self, lane_id: int) -> Optional[Lane]:
        for lane in self.lanes:
            if lane.id == lane_id:
                return lane
        return None

    def get_left_lanes(self) -> List[Lane]:
        return [lane for lane in self.lanes if lane.id > 0]

    def get_right_lanes(self) -> List[Lane]:
        return [lane for lane in reversed(self.lanes) if lane.id < 0]

    def get_center_border(self, s: float) -> float:
        """Lateral position at ``s`` that separates left and right lanes.

        This is the centre lane's border, which already carries the road's
        lane offset.  Without a centre lane the innermost lane's inner
        border is used.
        """

        center = self.get_lane_by_id(0)
        if center is not None:
            return center.outer_border.get(s)
        innermost = min(self.lanes, key=lambda lane: abs(lane.id))
        return innermost.inner_border.get(s)

    def get_lane(self, s: float, t: float) -> Optional[Lane]:
        """Lane whose border interval at ``s`` contains ``t``.

        The side is chosen by comparing ``t`` with :meth:`get_center_border`;
        left lanes are then scanned outward in increasing id and right lanes
        in decreasing id.  A ``t`` beyond the outermost border saturates to
        the outermost lane on that side.
        """

        if not self.lanes:
            return None

        t_center = self.get_center_border(s)
        if t > t_center:
            candidates = self.get_left_lanes()
        elif t < t_center:
            candidates = self.get_right_lanes()
        else:
            candidates = []

        if not candidates:
            center = self.get_lane_by_id(0)
            if center is not None:
                return center
            return min(self.lanes, key=lambda lane: abs(lane.id))

        for lane in candidates:
            inner = lane.inner_border.get(s)
            outer = lane.outer_border.get(s)
            if min(inner, outer) <= t <= max(inner, outer):
                return lane
        return candidates[-1]

    def get_lane_id(self, s: float, t: float) -> Optional[int]:
        lane = self.get_lane(s, t)
        return lane.id if lane is not None else None
