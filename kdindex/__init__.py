"""kdindex: a generic k-d tree for nearest-neighbour and range queries.

Items are duck-typed (see :mod:`kdindex.points`): anything with a
representative point, a signed per-axis comparison and a squared distance
can be indexed, including extended objects such as triangles.

Quick start
-----------
>>> from kdindex import Tree, Vec, NKeeper
>>> tree = Tree([Vec(p) for p in [(2, 3), (5, 4), (9, 6), (4, 7), (8, 1), (7, 2)]])
>>> tree.nearest((4, 6))
(Vec((4.0, 7.0)), 1.0)
>>> keeper = NKeeper(2)
>>> tree.nearest_set(keeper, (4, 6))
>>> [cd.item for cd in keeper]
[Vec((4.0, 7.0)), Vec((5.0, 4.0))]

Distances are squared throughout.
"""

from .keepers import ComparableDist, DistKeeper, Keeper, NKeeper
from .medians import RANDOMS, median_of_randoms, partition, select
from .points import Bounder, Bounding, Comparable, Extender, Vec, bounds_of
from .tree import Node, Operation, Tree

__all__ = [
    # Tree
    "Tree",
    "Node",
    "Operation",

    # Items and bounds
    "Comparable",
    "Bounder",
    "Extender",
    "Bounding",
    "Vec",
    "bounds_of",

    # Keepers
    "ComparableDist",
    "Keeper",
    "NKeeper",
    "DistKeeper",

    # Partitioning
    "RANDOMS",
    "partition",
    "median_of_randoms",
    "select",
]
