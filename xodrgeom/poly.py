"""Cubic polynomials and piecewise cubic splines keyed by start station."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from xodrgeom.piecewise import PiecewiseMap


@dataclass(frozen=True)
class Poly3:
    """``a + b*u + c*u**2 + d*u**3`` with ``u = s - s0``."""

    s0: float = 0.0
    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    d: float = 0.0

    def get(self, s: float) -> float:
        u = s - self.s0
        return ((self.d * u + self.c) * u + self.b) * u + self.a

    def get_grad(self, s: float) -> float:
        u = s - self.s0
        return (3.0 * self.d * u + 2.0 * self.c) * u + self.b

    def shifted(self, s0: float) -> "Poly3":
        """Return the same polynomial expanded around a new origin ``s0``."""

        delta = s0 - self.s0
        if delta == 0.0:
            return self
        a = ((self.d * delta + self.c) * delta + self.b) * delta + self.a
        b = (3.0 * self.d * delta + 2.0 * self.c) * delta + self.b
        c = 3.0 * self.d * delta + self.c
        return Poly3(s0=s0, a=a, b=b, c=c, d=self.d)

    def add(self, other: "Poly3") -> "Poly3":
        rebased = other.shifted(self.s0)
        return Poly3(
            s0=self.s0,
            a=self.a + rebased.a,
            b=self.b + rebased.b,
            c=self.c + rebased.c,
            d=self.d + rebased.d,
        )

    def negate(self) -> "Poly3":
        return Poly3(s0=self.s0, a=-self.a, b=-self.b, c=-self.c, d=-self.d)

    @classmethod
    def from_record(cls, record: Mapping[str, Any], s_offset: float = 0.0) -> "Poly3":
        """Build a polynomial from a ``{"s"|"sOffset", "a", "b", "c", "d"}`` entry."""

        if "s" in record:
            start = record["s"]
        else:
            start = record.get("sOffset", 0.0)
        values = [start] + [record.get(key, 0.0) for key in ("a", "b", "c", "d")]
        floats = [float(value) for value in values]
        if not all(math.isfinite(value) for value in floats):
            raise ValueError(f"non-finite polynomial record: {dict(record)!r}")
        s0, a, b, c, d = floats
        return cls(s0=s0 + s_offset, a=a, b=b, c=c, d=d)


class CubicSpline:
    """Piecewise :class:`Poly3` selected by the greatest start ``s`` <= query."""

    __slots__ = ("_pieces",)

    def __init__(self, polys: Iterable[Poly3] = ()):
        self._pieces: PiecewiseMap[Poly3] = PiecewiseMap((poly.s0, poly) for poly in polys)

    @classmethod
    def from_records(
        cls, records: Optional[Iterable[Mapping[str, Any]]], s_offset: float = 0.0
    ) -> "CubicSpline":
        if not records:
            return cls()
        return cls(Poly3.from_record(record, s_offset=s_offset) for record in records)

    @classmethod
    def constant(cls, value: float, s0: float = 0.0) -> "CubicSpline":
        return cls([Poly3(s0=s0, a=value)])

    def __len__(self) -> int:
        return len(self._pieces)

    def __bool__(self) -> bool:
        return bool(self._pieces)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CubicSpline):
            return NotImplemented
        return self._pieces == other._pieces

    def __hash__(self) -> int:
        return hash(self._pieces)

    def __repr__(self) -> str:
        return f"CubicSpline({self.polys()!r})"

    @property
    def pieces(self) -> PiecewiseMap[Poly3]:
        return self._pieces

    def polys(self) -> List[Poly3]:
        return self._pieces.values()

    def get_poly(self, s: float) -> Optional[Poly3]:
        return self._pieces.get(s)

    def get(self, s: float) -> float:
        poly = self._pieces.get(s)
        if poly is None:
            return 0.0
        return poly.get(s)

    def get_grad(self, s: float) -> float:
        poly = self._pieces.get(s)
        if poly is None:
            return 0.0
        return poly.get_grad(s)

    def negate(self) -> "CubicSpline":
        return CubicSpline(poly.negate() for poly in self._pieces.values())

    def add(self, other: "CubicSpline") -> "CubicSpline":
        """Sum of two splines over the union of their breakpoints."""

        if not other:
            return self
        if not self:
            return other

        breakpoints = sorted(set(self._pieces.keys()) | set(other._pieces.keys()))
        summed: List[Poly3] = []
        for s0 in breakpoints:
            summed.append(self._active_at(s0).add(other._active_at(s0)))
        return CubicSpline(summed)

    def _active_at(self, s0: float) -> Poly3:
        # 最初の区間より手前では外挿せず 0 として足し合わせる
        first = self._pieces.first()
        if first is None or s0 < first[0]:
            return Poly3(s0=s0)
        return self._pieces.get(s0).shifted(s0)
