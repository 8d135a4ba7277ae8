"""k-d tree construction and search.

Construction, search and traversal all run on explicit stacks, so the tree
depth (logarithmic on average, linear after adversarial insertions) is not
limited by the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple

from .keepers import ComparableDist, Keeper
from .medians import RANDOMS, median_of_randoms, partition
from .points import Bounder, Bounding, Extender, Point, bounds_of

logger = logging.getLogger(__name__)

# fn(item, bounding, depth) -> done
Operation = Callable[[Any, Optional[Bounding], int], bool]


class Node:
    """A single item of a k-d tree and the two subtrees it splits.

    Every item in ``left`` has ``point()[plane] <=`` that of ``item`` and
    every item in ``right`` has it ``>=``.  ``bounding`` is the tight box
    around the extents of the whole subtree, or ``None`` for unbounded trees.
    """

    __slots__ = ("item", "plane", "left", "right", "bounding")

    def __init__(self, item: Any, plane: int, bounding: Optional[Bounding] = None) -> None:
        self.item = item
        self.plane = plane
        self.left: Optional[Node] = None
        self.right: Optional[Node] = None
        self.bounding = bounding

    def __repr__(self) -> str:
        return f"Node({self.item.point()!r}, plane={self.plane})"


def _axis_key(plane: int) -> Callable[[Any], float]:
    def key(item: Any) -> float:
        return item.point()[plane]
    return key


class Tree:
    """A k-d tree over items implementing the :mod:`kdindex.points` protocol.

    Parameters
    ----------
    items:
        Items to index.  The sequence is copied; its order is not altered.
    bounding:
        Store the tight bounding volume of every subtree.  Requires items
        with a ``bounds()`` method.  Bounded trees are required for items
        with a spatial extent (e.g. triangles keyed by centroid), since the
        search then prunes on box distance rather than on the splitting
        plane through a representative point.
    sample_size:
        Number of random elements sampled to estimate each pivot.
    seed:
        Seed for the pivot sampler, for reproducible tree shapes.
    """

    def __init__(
        self,
        items: Sequence[Any] = (),
        bounding: bool = False,
        *,
        sample_size: int = RANDOMS,
        seed: Optional[int] = None,
    ) -> None:
        self.root: Optional[Node] = None
        self.count = 0
        items = list(items)
        if not items:
            return
        if bounding:
            for item in items:
                if not isinstance(item, Bounder):
                    raise TypeError(
                        f"bounded tree requires items with bounds(); got {type(item).__name__}"
                    )
        self.root = _build(items, bounding, sample_size, random.Random(seed))
        self.count = len(items)
        logger.debug(f"Built k-d tree of {self.count} items (bounded={bounding}).")

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Any]:
        for node, _ in self._walk(None):
            yield node.item

    def __repr__(self) -> str:
        return f"Tree(count={self.count}, bounded={self.bounded})"

    @property
    def bounded(self) -> bool:
        return self.root is not None and self.root.bounding is not None

    def depth(self) -> int:
        """Depth of the deepest node; ``-1`` for an empty tree."""
        return max((d for _, d in self._walk(None)), default=-1)

    def contains(self, p: Point) -> bool:
        """Whether *p* is within the root bounding volume.

        Unbounded non-empty trees always return ``True``.
        """
        if self.root is None:
            return False
        if self.root.bounding is None:
            return True
        return self.root.bounding.contains(p)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def nearest(self, q: Point) -> Tuple[Optional[Any], float]:
        """Return the item nearest to *q* and its squared distance.

        An empty tree returns ``(None, inf)``.
        """
        best, best_d = None, math.inf
        if self.root is None:
            return best, best_d
        stack: List[Tuple[Node, float]] = [(self.root, 0.0)]
        while stack:
            node, lower = stack.pop()
            if lower >= best_d:
                continue
            item = node.item
            d = item.distance(q)
            if d < best_d:
                best, best_d = item, d
            c = -item.compare_point(q, node.plane)
            near, far = (node.left, node.right) if c <= 0 else (node.right, node.left)
            if far is not None:
                stack.append((far, _lower_bound(far, q, c)))
            if near is not None:
                stack.append((near, lower))
        return best, best_d

    def nearest_set(self, keeper: Keeper, q: Point) -> None:
        """Feed the items near *q* into *keeper*.

        Uses the same traversal as :meth:`nearest`, pruning on the keeper's
        maximum retained distance.  Afterwards the keeper holds its results
        sorted nearest first with any sentinel removed.

        A keeper reused across calls is reset first, so it only reports the
        items of the latest query.
        """
        keeper.reset()
        if self.root is not None:
            stack: List[Tuple[Node, float]] = [(self.root, 0.0)]
            while stack:
                node, lower = stack.pop()
                if lower > keeper.max().dist:
                    continue
                item = node.item
                keeper.keep(ComparableDist(item, item.distance(q)))
                c = -item.compare_point(q, node.plane)
                near, far = (node.left, node.right) if c <= 0 else (node.right, node.left)
                if far is not None:
                    stack.append((far, _lower_bound(far, q, c)))
                if near is not None:
                    stack.append((near, lower))
        keeper.finish()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, item: Any, bounding: bool = True) -> None:
        """Add *item* without rebalancing.

        Bounding volumes are grown along the insertion path when the tree is
        bounded (or empty and *bounding* is set) and *item* can extend a box.
        Inserting a non-extending item into a bounded tree drops every
        bounding volume, turning it into an unbounded tree.
        """
        if self.root is not None:
            bounding = self.root.bounding is not None
        extend = bounding and isinstance(item, Extender)
        if bounding and not extend and self.root is not None:
            logger.debug(f"{type(item).__name__} cannot extend bounds; dropping tree bounds.")
            for node, _ in self._walk(None):
                node.bounding = None
        self.count += 1
        if self.root is None:
            self.root = Node(item, 0, item.extend(None) if extend else None)
            return
        dims = len(item.point())
        node = self.root
        while True:
            if extend:
                node.bounding = item.extend(node.bounding)
            plane = (node.plane + 1) % dims
            if item.compare_point(node.item.point(), node.plane) <= 0:
                if node.left is None:
                    node.left = Node(item, plane, item.extend(None) if extend else None)
                    return
                node = node.left
            else:
                if node.right is None:
                    node.right = Node(item, plane, item.extend(None) if extend else None)
                    return
                node = node.right

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def do(self, fn: Operation) -> bool:
        """Apply *fn* to every item in order.

        Returns ``True`` if *fn* stopped the traversal by returning ``True``.
        """
        for node, depth in self._walk(None):
            if fn(node.item, node.bounding, depth):
                return True
        return False

    def do_bounded(self, b: Optional[Bounding], fn: Operation) -> bool:
        """Apply *fn* in order to every item whose point lies within *b*.

        Subtrees that cannot hold such a point are skipped.  ``b=None`` is
        equivalent to :meth:`do`.
        """
        if b is None:
            return self.do(fn)
        for node, depth in self._walk(b):
            if b.contains(node.item.point()) and fn(node.item, node.bounding, depth):
                return True
        return False

    def _walk(self, b: Optional[Bounding]) -> Iterator[Tuple[Node, int]]:
        stack: List[Tuple[Node, int]] = []
        node, depth = self.root, 0
        while stack or node is not None:
            while node is not None:
                stack.append((node, depth))
                if node.left is not None and (
                    b is None or node.item.compare_point(b.min, node.plane) >= 0
                ):
                    node, depth = node.left, depth + 1
                else:
                    node = None
            node, depth = stack.pop()
            yield node, depth
            if node.right is not None and (
                b is None or node.item.compare_point(b.max, node.plane) <= 0
            ):
                node, depth = node.right, depth + 1
            else:
                node = None


def _lower_bound(child: Node, q: Point, c: float) -> float:
    """Lower bound on the squared distance from *q* to anything in *child*.

    *c* is the query's signed offset from the parent's splitting plane.
    """
    if child.bounding is not None:
        return child.bounding.distance2(q)
    return c * c


def _build(items: List[Any], bounding: bool, sample_size: int, rng: random.Random) -> Node:
    dims = len(items[0].point())
    root: Optional[Node] = None
    # (lo, hi, plane, parent, is_right)
    work: List[Tuple[int, int, int, Optional[Node], bool]] = [(0, len(items), 0, None, False)]
    while work:
        lo, hi, plane, parent, is_right = work.pop()
        if lo >= hi:
            continue
        key = _axis_key(plane)
        piv = partition(items, lo, hi, median_of_randoms(items, lo, hi, key, sample_size, rng), key)
        node = Node(items[piv], plane, bounds_of(items[lo:hi]) if bounding else None)
        if parent is None:
            root = node
        elif is_right:
            parent.right = node
        else:
            parent.left = node
        nxt = (plane + 1) % dims
        work.append((lo, piv, nxt, node, False))
        work.append((piv + 1, hi, nxt, node, True))
    return root
