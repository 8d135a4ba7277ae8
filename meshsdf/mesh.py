"""Indexed triangle mesh with angle-weighted pseudo-normals.

A triangle soup is welded into shared vertices by hashing positions on a
grid of spacing *tol*.  While welding, every vertex accumulates the face
normals of its triangles weighted by the opening angle at that vertex, and
every edge accumulates ``pi`` times the normals of its two triangles
(Bærentzen & Aanæs, "Signed distance computation using the angle weighted
pseudonormal", 2005).  The sign of ``dot(pseudo_normal, p - closest)`` is
then correct for any closed, consistently wound mesh, whichever feature of
the nearest triangle is closest.

Windings are **not** checked: all triangles must be oriented with
``cross(v1 - v0, v2 - v0)`` pointing outward.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Dict, List, Optional, Tuple

import numpy as np

from kdindex import Bounding

from ._math import _F, as_triangles, cos_angle, length
from .config import DEFAULT_MERGE_TOLERANCE
from .errors import DegenerateGeometryError
from .transform import RigidTransform
from .triangle import Feature, closest_on_local, unit_normal

logger = logging.getLogger(__name__)

EdgeKey = Tuple[int, int]


def edge_key(i: int, j: int) -> EdgeKey:
    """Canonical key of the edge joining vertices *i* and *j*: lower index first."""
    return (i, j) if i < j else (j, i)


class MeshVertex:
    """A welded vertex and its angle-weighted pseudo-normal."""

    __slots__ = ("position", "normal")

    def __init__(self, position: _F) -> None:
        self.position = position
        self.normal = np.zeros(3)

    def __repr__(self) -> str:
        return f"MeshVertex(position={self.position.tolist()})"


class MeshTriangle:
    """A mesh triangle, indexable by :class:`kdindex.Tree` through its centroid.

    ``vertices`` are indices into the owning mesh's vertex table; the
    triangle keeps no reference to the mesh itself.  ``local`` holds the
    triangle's 2D coordinates in ``frame``.
    """

    __slots__ = ("index", "vertices", "centroid", "normal", "frame", "inverse", "local", "lo", "hi")

    def __init__(self, index: int, vertices: Tuple[int, int, int], positions: _F) -> None:
        self.index = index
        self.vertices = vertices
        self.frame = RigidTransform.from_triangle(positions)
        self.inverse = self.frame.inverse()
        self.local = self.frame.apply_triangle(positions)[:, :2]
        self.centroid = positions.mean(axis=0)
        self.normal = unit_normal(positions)
        self.lo = positions.min(axis=0)
        self.hi = positions.max(axis=0)

    def __repr__(self) -> str:
        return f"MeshTriangle(index={self.index}, vertices={self.vertices})"

    def closest(self, p: _F) -> Tuple[_F, Feature, float]:
        """``(closest point, feature, squared distance)`` from *p* to this triangle."""
        return closest_on_local(p, self.local, self.frame, self.inverse)

    # kdindex item protocol

    def point(self) -> _F:
        return self.centroid

    def compare_point(self, p, d: int) -> float:
        return float(self.centroid[d] - p[d])

    def distance(self, p) -> float:
        return self.closest(p)[2]

    def bounds(self) -> Tuple[_F, _F]:
        return self.lo, self.hi

    def extend(self, b: Optional[Bounding]) -> Bounding:
        if b is None:
            return Bounding(self.lo, self.hi)
        return b.union(self.lo, self.hi)


class Mesh:
    """Welded triangle mesh with vertex and edge pseudo-normals.

    Parameters
    ----------
    triangles:
        ``(F, 3, 3)`` triangle soup, consistently wound outward.
    tol:
        Vertices whose positions round to the same multiple of *tol* are
        merged.

    Raises
    ------
    ShapeError
        *triangles* is not ``(F, 3, 3)``.
    ValueError
        *tol* is not positive.
    DegenerateGeometryError
        A triangle is degenerate, or becomes so once vertices are merged.
    """

    def __init__(self, triangles, tol: float = DEFAULT_MERGE_TOLERANCE) -> None:
        tris = as_triangles(triangles)
        if not tol > 0:
            raise ValueError(f"merge tolerance must be positive, got {tol}")
        self.tol = tol
        self.vertices: List[MeshVertex] = []
        self.triangles: List[MeshTriangle] = []
        self.edge_normals: Dict[EdgeKey, _F] = {}

        cache: Dict[Tuple[int, int, int], int] = {}
        edge_uses: Counter = Counter()
        inv = 1.0 / tol
        for ti, tri in enumerate(tris):
            idx = []
            for v in tri:
                key = tuple(int(k) for k in np.rint(v * inv))
                vi = cache.get(key)
                if vi is None:
                    vi = len(self.vertices)
                    cache[key] = vi
                    self.vertices.append(MeshVertex(v.copy()))
                idx.append(vi)
            if len(set(idx)) < 3:
                raise DegenerateGeometryError(
                    f"triangle {ti} collapses when merging vertices closer than {tol}"
                )
            positions = np.array([self.vertices[i].position for i in idx])
            try:
                mt = MeshTriangle(ti, tuple(idx), positions)
            except DegenerateGeometryError as exc:
                raise DegenerateGeometryError(f"triangle {ti}: {exc}") from exc
            self.triangles.append(mt)

            n = mt.normal
            for j in range(3):
                s1 = positions[j] - positions[(j + 1) % 3]
                s2 = positions[j] - positions[(j + 2) % 3]
                alpha = math.acos(float(cos_angle(s1, s2)))
                self.vertices[idx[j]].normal += alpha * n
            for j in range(3):
                key = edge_key(idx[j], idx[(j + 1) % 3])
                self.edge_normals[key] = self.edge_normals.get(key, np.zeros(3)) + math.pi * n
                edge_uses[key] += 1

        open_edges = sum(1 for c in edge_uses.values() if c != 2)
        if open_edges:
            logger.warning(
                f"{open_edges} of {len(edge_uses)} edges are not shared by exactly two "
                f"triangles; signs near them are unreliable."
            )
        if self.triangles:
            shortest = float(np.min(length(np.roll(tris, -1, axis=1) - tris)))
            logger.debug(
                f"Mesh built: {len(tris)} triangles, {len(self.vertices)} vertices, "
                f"{len(self.edge_normals)} edges, shortest edge {shortest:.3g}."
            )

    def __len__(self) -> int:
        return len(self.triangles)

    def __repr__(self) -> str:
        return f"Mesh(triangles={len(self.triangles)}, vertices={len(self.vertices)})"

    def edge_normal(self, i: int, j: int) -> _F:
        """Pseudo-normal of the edge joining vertices *i* and *j*."""
        return self.edge_normals[edge_key(i, j)]

    def vertex_positions(self) -> _F:
        """``(V, 3)`` welded vertex positions."""
        if not self.vertices:
            return np.zeros((0, 3))
        return np.array([v.position for v in self.vertices])

    def vertex_normals(self) -> _F:
        """``(V, 3)`` unit vertex pseudo-normals."""
        if not self.vertices:
            return np.zeros((0, 3))
        n = np.array([v.normal for v in self.vertices])
        return n / length(n)[:, None]

    def faces(self) -> _F:
        """``(F, 3)`` vertex indices of each triangle."""
        return np.array([t.vertices for t in self.triangles], dtype=np.int64).reshape(-1, 3)

    def triangles_array(self) -> _F:
        """The welded triangle soup, ``(F, 3, 3)``."""
        return self.vertex_positions()[self.faces()].reshape(-1, 3, 3)
