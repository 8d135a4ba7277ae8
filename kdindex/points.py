"""Item protocol for :mod:`kdindex` and a reference point type.

A *point* is any sequence of coordinates: ``len(p)`` is its dimensionality
and ``p[d]`` its component along axis ``d``.

An *item* stored in a :class:`~kdindex.tree.Tree` provides

``point()``
    the representative point used for partitioning,
``compare_point(p, d)``
    ``point()[d] - p[d]``, the signed distance of the item from the plane
    through *p* perpendicular to axis *d*,
``distance(p)``
    the **squared** Euclidean distance from the item to *p*.

Items may additionally provide ``bounds()`` (their spatial extent, needed
for bounded trees) and ``extend(bounding)`` (needed to keep bounding
volumes up to date on :meth:`~kdindex.tree.Tree.insert`).  Extended items
such as triangles return a box larger than their representative point.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

Point = Sequence[float]


@runtime_checkable
class Comparable(Protocol):
    """Structural type of values stored in a k-d tree."""

    def point(self) -> Point: ...

    def compare_point(self, p: Point, d: int) -> float: ...

    def distance(self, p: Point) -> float: ...


@runtime_checkable
class Bounder(Protocol):
    """An item with a spatial extent."""

    def bounds(self) -> Tuple[Point, Point]: ...


@runtime_checkable
class Extender(Protocol):
    """An item able to grow a bounding volume to include itself."""

    def extend(self, b: Optional["Bounding"]) -> "Bounding": ...


class Bounding:
    """Axis-aligned bounding volume with inclusive bounds."""

    __slots__ = ("min", "max")

    def __init__(self, lo: Point, hi: Point) -> None:
        self.min = tuple(float(v) for v in lo)
        self.max = tuple(float(v) for v in hi)
        if len(self.min) != len(self.max):
            raise ValueError(
                f"bounding corners differ in dimension: {len(self.min)} != {len(self.max)}"
            )

    def __repr__(self) -> str:
        return f"Bounding(min={self.min}, max={self.max})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bounding):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    def contains(self, p: Point) -> bool:
        """Return whether *p* lies inside the box, faces included."""
        for d in range(len(p)):
            c = p[d]
            if c < self.min[d] or c > self.max[d]:
                return False
        return True

    def distance2(self, p: Point) -> float:
        """Squared distance from *p* to the box; zero inside."""
        s = 0.0
        for d in range(len(p)):
            c = p[d]
            if c < self.min[d]:
                s += (self.min[d] - c) ** 2
            elif c > self.max[d]:
                s += (c - self.max[d]) ** 2
        return s

    def union(self, lo: Point, hi: Point) -> "Bounding":
        """Return a new box containing this one and the box ``[lo, hi]``."""
        return Bounding(
            [min(a, b) for a, b in zip(self.min, lo)],
            [max(a, b) for a, b in zip(self.max, hi)],
        )


def bounds_of(items: Sequence) -> Optional[Bounding]:
    """Tight bounding volume of the extents of *items*, or ``None`` if empty."""
    it = iter(items)
    try:
        first = next(it)
    except StopIteration:
        return None
    lo, hi = first.bounds()
    lo = list(lo)
    hi = list(hi)
    dims = len(lo)
    for item in it:
        a, b = item.bounds()
        for d in range(dims):
            if a[d] < lo[d]:
                lo[d] = a[d]
            if b[d] > hi[d]:
                hi[d] = b[d]
    return Bounding(lo, hi)


class Vec(tuple):
    """A point in k-d space that is its own tree item.

    >>> Vec((1.0, 2.0)).distance((4.0, 6.0))
    25.0
    """

    __slots__ = ()

    def __new__(cls, coords: Sequence[float]) -> "Vec":
        return super().__new__(cls, (float(c) for c in coords))

    def __repr__(self) -> str:
        return f"Vec({tuple(self)})"

    def dims(self) -> int:
        return len(self)

    def point(self) -> "Vec":
        return self

    def compare_point(self, p: Point, d: int) -> float:
        return self[d] - p[d]

    def distance(self, p: Point) -> float:
        if len(p) != len(self):
            raise ValueError(f"dimension mismatch: {len(self)} != {len(p)}")
        s = 0.0
        for a, b in zip(self, p):
            s += (a - b) * (a - b)
        return s

    def bounds(self) -> Tuple["Vec", "Vec"]:
        return self, self

    def extend(self, b: Optional[Bounding]) -> Bounding:
        if b is None:
            return Bounding(self, self)
        return b.union(self, self)
