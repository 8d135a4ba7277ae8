"""Bounded max-heaps that collect the results of :meth:`Tree.nearest_set`.

A keeper decides which visited items to retain and exposes its current
maximum retained distance, which the tree uses to prune the search.  Both
keepers start out holding a *sentinel* (an entry whose item is ``None``)
that marks the largest acceptable distance; the tree removes it when the
search finishes.
"""

from __future__ import annotations

import heapq
import itertools
import math
from abc import ABC, abstractmethod
from typing import Any, Iterator, List, NamedTuple, Optional


class ComparableDist(NamedTuple):
    """An item paired with its squared distance to a query."""

    item: Optional[Any]
    dist: float


class Keeper(ABC):
    """Conditional max-heap ordered on :attr:`ComparableDist.dist`."""

    def __init__(self, sentinel: float) -> None:
        self._sentinel = sentinel
        self._counter = itertools.count()
        self._heap: List[tuple] = []
        self._done: Optional[List[ComparableDist]] = None
        self._push(ComparableDist(None, sentinel))

    def _push(self, cd: ComparableDist) -> None:
        heapq.heappush(self._heap, (-cd.dist, next(self._counter), cd))

    def _pop(self) -> ComparableDist:
        return heapq.heappop(self._heap)[2]

    @abstractmethod
    def keep(self, cd: ComparableDist) -> None:
        """Offer *cd* to the keeper."""

    def reset(self) -> None:
        """Drop every retained entry, leaving only the sentinel."""
        self._heap.clear()
        self._done = None
        self._push(ComparableDist(None, self._sentinel))

    def max(self) -> ComparableDist:
        """The retained entry with the largest distance."""
        if not self._heap:
            return ComparableDist(None, math.inf)
        return self._heap[0][2]

    def finish(self) -> None:
        """Sort the retained entries ascending and drop sentinels."""
        entries = [e[2] for e in self._heap]
        entries.sort(key=lambda cd: cd.dist)
        self._done = [cd for cd in entries if cd.item is not None]

    def results(self) -> List[ComparableDist]:
        """Retained entries, nearest first (sentinels removed after a search)."""
        if self._done is not None:
            return list(self._done)
        return sorted((e[2] for e in self._heap), key=lambda cd: cd.dist)

    def __len__(self) -> int:
        if self._done is not None:
            return len(self._done)
        return len(self._heap)

    def __iter__(self) -> Iterator[ComparableDist]:
        return iter(self.results())


class NKeeper(Keeper):
    """Retain the *n* nearest items seen."""

    def __init__(self, n: int) -> None:
        if n < 1:
            raise ValueError(f"NKeeper needs a positive capacity, got {n}")
        self.n = n
        super().__init__(math.inf)

    def keep(self, cd: ComparableDist) -> None:
        # Ties favour later finds so the sentinel is displaced.
        if cd.dist <= self.max().dist:
            if len(self._heap) == self.n:
                self._pop()
            self._push(cd)


class DistKeeper(Keeper):
    """Retain every item within *radius* of the query.

    Tree distances are squared, so entries are compared against
    ``radius ** 2``.
    """

    def __init__(self, radius: float) -> None:
        if radius < 0:
            raise ValueError(f"DistKeeper radius must be non-negative, got {radius}")
        self.radius = radius
        super().__init__(radius * radius)

    def keep(self, cd: ComparableDist) -> None:
        if cd.dist <= self.max().dist:
            self._push(cd)
