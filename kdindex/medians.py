"""Pivot selection and partitioning for k-d tree construction.

All functions work in place on a half-open range ``items[lo:hi]`` of a
Python list and order elements by a caller-supplied *key* (the coordinate
along the current splitting plane).  Working on ranges instead of slices
keeps construction free of per-level copies.
"""

from __future__ import annotations

import random
from typing import Any, Callable, List, Optional

_Key = Callable[[Any], float]

# Maximum number of elements sampled by :func:`median_of_randoms`.
RANDOMS = 100


def partition(items: List[Any], lo: int, hi: int, pivot: int, key: _Key) -> int:
    """Partition ``items[lo:hi]`` around the element at index *pivot*.

    Returns the final index of the pivot element.  Afterwards every element
    before that index has ``key <= key(pivot)`` and every element after it
    has ``key > key(pivot)``.  Returns ``-1`` for an empty range.
    """
    last = hi - 1
    if last < lo:
        return -1
    items[pivot], items[last] = items[last], items[pivot]
    pk = key(items[last])
    index = lo
    for i in range(lo, last):
        if key(items[i]) <= pk:
            items[index], items[i] = items[i], items[index]
            index += 1
    items[last], items[index] = items[index], items[last]
    return index


def median_of_randoms(
    items: List[Any],
    lo: int,
    hi: int,
    key: _Key,
    n: int = RANDOMS,
    rng: Optional[random.Random] = None,
) -> int:
    """Estimate the median of ``items[lo:hi]`` from at most *n* random samples.

    The sampled elements are moved to the front of the range and sorted, so
    the returned index points at an element whose key is the sample median.
    When the range holds fewer than *n* elements the whole range is sorted
    and the exact median index is returned.
    """
    size = hi - lo
    if size <= 0:
        return -1
    if size > n:
        rng = rng or random
        # Partial Fisher-Yates: the first n slots end up as a uniform sample.
        for i in range(lo, lo + n):
            j = rng.randrange(i, hi)
            items[i], items[j] = items[j], items[i]
    else:
        n = size
    items[lo:lo + n] = sorted(items[lo:lo + n], key=key)
    return lo + n // 2


def select(items: List[Any], lo: int, hi: int, k: int, key: _Key,
           rng: Optional[random.Random] = None) -> int:
    """Quickselect: place the *k*-th smallest element of ``items[lo:hi]`` at ``lo + k``.

    Returns ``lo + k``.  Raises :class:`IndexError` if *k* is outside the range.
    """
    if not 0 <= k < hi - lo:
        raise IndexError(f"k={k} outside range of length {hi - lo}")
    rng = rng or random
    target = lo + k
    while True:
        if hi - lo == 1:
            return target
        p = partition(items, lo, hi, rng.randrange(lo, hi), key)
        if p == target:
            return target
        if target < p:
            hi = p
        else:
            lo = p + 1
