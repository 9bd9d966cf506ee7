"""planView ジオメトリ共通の基底レコードと数値ヘルパー。"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from xodrgeom.config import DEFAULT_CONFIG, EvaluatorConfig
from xodrgeom.vector import Vec2D

BBox2D = Tuple[Vec2D, Vec2D]

_GOLDEN = (math.sqrt(5.0) - 1.0) * 0.5


@dataclass(frozen=True)
class GeometryRecord:
    """全ジオメトリが共有する始点姿勢と区間長。"""

    s0: float
    x0: float
    y0: float
    hdg0: float
    length: float

    @property
    def s_end(self) -> float:
        return self.s0 + self.length

    def clamp(self, s: float) -> float:
        return min(max(s, self.s0), self.s_end)


def offset_point(x: float, y: float, hdg: float, t: float) -> Vec2D:
    """Shift ``(x, y)`` by ``t`` along the left normal of heading ``hdg``."""

    if t == 0.0:
        return x, y
    return x - t * math.sin(hdg), y + t * math.cos(hdg)


def bbox_of(points: Iterable[Vec2D], padding: float = 0.0) -> BBox2D:
    xs: List[float] = []
    ys: List[float] = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    return (min(xs) - padding, min(ys) - padding), (max(xs) + padding, max(ys) + padding)


def quadratic_roots(a: float, b: float, c: float) -> List[float]:
    """Real roots of ``a*x**2 + b*x + c``."""

    if abs(a) <= 1e-15:
        if abs(b) <= 1e-15:
            return []
        return [-c / b]
    disc = b * b - 4.0 * a * c
    if disc < 0.0:
        return []
    root = math.sqrt(disc)
    # 桁落ちを避けるため符号をそろえた形で解く
    q = -0.5 * (b + math.copysign(root, b))
    roots = [q / a]
    if q != 0.0:
        roots.append(c / q)
    return roots


def heading_crossings(
    hdg0: float, curvature: float, c_dot: float, length: float
) -> List[float]:
    """Offsets ``ds`` in ``(0, length)`` where the heading is a multiple of pi/2.

    The heading is ``hdg0 + curvature*ds + c_dot*ds**2/2``; at those offsets
    one tangent component vanishes, so the curve attains an axis extremum.
    """

    def tau(ds: float) -> float:
        return hdg0 + curvature * ds + 0.5 * c_dot * ds * ds

    candidates = [tau(0.0), tau(length)]
    if abs(c_dot) > 1e-15:
        vertex = -curvature / c_dot
        if 0.0 < vertex < length:
            candidates.append(tau(vertex))
    lo = min(candidates)
    hi = max(candidates)

    quarter = 0.5 * math.pi
    k_start = math.ceil(lo / quarter)
    k_end = math.floor(hi / quarter)

    result: List[float] = []
    for k in range(k_start, k_end + 1):
        target = k * quarter
        for ds in quadratic_roots(0.5 * c_dot, curvature, hdg0 - target):
            if 0.0 < ds < length:
                result.append(ds)
    return sorted(result)


def sagitta_step(curvature: float, eps: float) -> float:
    """Longest chord on a circle of ``curvature`` whose sagitta stays below ``eps``."""

    if abs(curvature) <= 1e-12:
        return math.inf
    return math.sqrt(8.0 * eps / abs(curvature))


def even_stations(s_start: float, s_end: float, step: float) -> List[float]:
    span = s_end - s_start
    if span <= 0.0:
        return [s_start]
    if not math.isfinite(step) or step >= span:
        return [s_start, s_end]
    count = int(math.ceil(span / step))
    return [s_start + span * idx / count for idx in range(count)] + [s_end]


def subdivide_stations(
    point: Callable[[float], Vec2D],
    s_start: float,
    s_end: float,
    eps: float,
    *,
    initial_segments: int = 4,
    max_depth: int = 12,
) -> List[float]:
    """Split ``[s_start, s_end]`` until every chord midpoint lies within ``eps`` of the curve."""

    if s_end <= s_start:
        return [s_start]

    def _split(a: float, pa: Vec2D, b: float, pb: Vec2D, depth: int) -> List[float]:
        mid = 0.5 * (a + b)
        pm = point(mid)
        chord_x = 0.5 * (pa[0] + pb[0])
        chord_y = 0.5 * (pa[1] + pb[1])
        if depth >= max_depth or math.hypot(pm[0] - chord_x, pm[1] - chord_y) <= eps:
            return [a]
        return _split(a, pa, mid, pm, depth + 1) + _split(mid, pm, b, pb, depth + 1)

    bounds = even_stations(s_start, s_end, (s_end - s_start) / max(initial_segments, 1))
    stations: List[float] = []
    for a, b in zip(bounds[:-1], bounds[1:]):
        stations.extend(_split(a, point(a), b, point(b), 0))
    stations.append(s_end)
    return stations


def bounded_minimize(
    func: Callable[[float], float],
    lo: float,
    hi: float,
    config: Optional[EvaluatorConfig] = None,
) -> float:
    """Minimise ``func`` on ``[lo, hi]`` with a coarse scan and golden-section refinement.

    The scan picks the first strict minimum so ties resolve to the smallest
    argument.  The refinement is capped at ``projection_max_iterations``
    and stops once the bracket is narrower than
    ``projection_tolerance * (hi - lo)``.
    """

    cfg = config or DEFAULT_CONFIG
    span = hi - lo
    if span <= 0.0:
        return lo

    samples = max(int(cfg.projection_scan_samples), 2)
    best_idx = 0
    best_val = func(lo)
    for idx in range(1, samples + 1):
        value = func(lo + span * idx / samples)
        if value < best_val:
            best_val = value
            best_idx = idx
    best_s = lo + span * best_idx / samples

    a = lo + span * max(best_idx - 1, 0) / samples
    b = lo + span * min(best_idx + 1, samples) / samples
    tolerance = cfg.projection_tolerance * span

    x1 = b - _GOLDEN * (b - a)
    x2 = a + _GOLDEN * (b - a)
    f1 = func(x1)
    f2 = func(x2)
    for _ in range(int(cfg.projection_max_iterations)):
        if b - a <= tolerance:
            break
        if f1 <= f2:
            b = x2
            x2 = x1
            f2 = f1
            x1 = b - _GOLDEN * (b - a)
            f1 = func(x1)
        else:
            a = x1
            x1 = x2
            f1 = f2
            x2 = a + _GOLDEN * (b - a)
            f2 = func(x2)

    candidate = 0.5 * (a + b)
    if func(candidate) < best_val:
        best_s = candidate
    return min(max(best_s, lo), hi)
