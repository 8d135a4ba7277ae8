"""Memoisation of an SDF on a quantised grid.

Queries that round to the same grid cell share one evaluation.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

import numpy as np

from ._math import as_points

_Key = Tuple[int, int, int]


class DistanceCache:
    """Wrap *evaluator* so that results are cached per cell of size *resolution*.

    Points are keyed by ``round(p / resolution)``; any two points in the same
    cell return the value computed for whichever was queried first.
    """

    def __init__(self, evaluator: Callable[[np.ndarray], float], resolution: float) -> None:
        if not resolution > 0:
            raise ValueError(f"cache resolution must be positive, got {resolution}")
        self.evaluator = evaluator
        self.resolution = resolution
        self._inv = 1.0 / resolution
        self._cache: Dict[_Key, float] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def key(self, p) -> _Key:
        k = np.rint(as_points(p) * self._inv)
        return int(k[0]), int(k[1]), int(k[2])

    def evaluate(self, p) -> float:
        k = self.key(p)
        try:
            value = self._cache[k]
        except KeyError:
            self.misses += 1
            value = self._cache[k] = self.evaluator(np.asarray(p, dtype=np.float64))
            return value
        self.hits += 1
        return value

    def clear(self) -> None:
        self._cache.clear()
        self.hits = self.misses = 0
