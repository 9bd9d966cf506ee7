"""Ordered ``start-s -> value`` container shared by every piecewise lookup."""

from __future__ import annotations

import bisect
from typing import Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class PiecewiseMap(Generic[T]):
    """Immutable mapping of start stations to values.

    Lookups select the entry with the greatest key that does not exceed the
    query.  Queries before the first key saturate to the first entry, the
    same way the planView, lane sections and profiles of a road are
    resolved near ``s = 0``.
    """

    __slots__ = ("_keys", "_values")

    def __init__(self, items: Iterable[Tuple[float, T]] = ()):
        merged = {}
        for key, value in items:
            merged[float(key)] = value
        ordered = sorted(merged.items(), key=lambda item: item[0])
        self._keys: Tuple[float, ...] = tuple(key for key, _ in ordered)
        self._values: Tuple[T, ...] = tuple(value for _, value in ordered)

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __iter__(self) -> Iterator[float]:
        return iter(self._keys)

    def __repr__(self) -> str:
        return f"PiecewiseMap({list(self.items())!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PiecewiseMap):
            return NotImplemented
        return self._keys == other._keys and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._keys, self._values))

    def keys(self) -> List[float]:
        return list(self._keys)

    def values(self) -> List[T]:
        return list(self._values)

    def items(self) -> List[Tuple[float, T]]:
        return list(zip(self._keys, self._values))

    def index_of(self, s: float) -> Optional[int]:
        if not self._keys:
            return None
        idx = bisect.bisect_right(self._keys, s) - 1
        return max(idx, 0)

    def get_item(self, s: float) -> Optional[Tuple[float, T]]:
        idx = self.index_of(s)
        if idx is None:
            return None
        return self._keys[idx], self._values[idx]

    def get(self, s: float) -> Optional[T]:
        idx = self.index_of(s)
        if idx is None:
            return None
        return self._values[idx]

    def get_key(self, s: float) -> Optional[float]:
        idx = self.index_of(s)
        if idx is None:
            return None
        return self._keys[idx]

    def find(self, key: float, default: Optional[T] = None) -> Optional[T]:
        """Exact-key lookup."""

        idx = bisect.bisect_left(self._keys, key)
        if idx < len(self._keys) and self._keys[idx] == key:
            return self._values[idx]
        return default

    def next_item(self, s: float) -> Optional[Tuple[float, T]]:
        """Return the entry following the one selected for ``s``."""

        idx = self.index_of(s)
        if idx is None or idx + 1 >= len(self._keys):
            return None
        return self._keys[idx + 1], self._values[idx + 1]

    def key_after(self, key: float) -> Optional[float]:
        idx = bisect.bisect_right(self._keys, key)
        if idx >= len(self._keys):
            return None
        return self._keys[idx]

    def first(self) -> Optional[Tuple[float, T]]:
        if not self._keys:
            return None
        return self._keys[0], self._values[0]

    def last(self) -> Optional[Tuple[float, T]]:
        if not self._keys:
            return None
        return self._keys[-1], self._values[-1]
