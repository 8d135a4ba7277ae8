"""Single-triangle geometry: measures and closest-point projection.

Closest point
-------------
A point and a triangle are moved into the triangle's rigid local frame
(:meth:`RigidTransform.from_triangle`), where the triangle lies in the xy
plane.  Dropping z reduces the problem to 2D: if the projected point is
inside the triangle the face itself is closest, otherwise the nearest of
the three clamped edge projections is.  The 2D answer is mapped back with
the inverse frame.  Alongside the point, the *feature* realising the
minimum (a vertex, an edge interior or the face) is reported, which is what
the pseudo-normal sign test needs.
"""

from __future__ import annotations

import math
from enum import IntEnum
from typing import Tuple

import numpy as np

from ._math import _F, dot2, length
from .config import DEGENERATE_TOLERANCE
from .transform import RigidTransform


class Feature(IntEnum):
    """Part of a triangle realising a closest point.

    Edge ``Ei`` joins vertex ``i`` and vertex ``(i + 1) % 3``.
    """

    V0 = 0
    V1 = 1
    V2 = 2
    E0 = 3
    E1 = 4
    E2 = 5
    FACE = 6

    @property
    def is_vertex(self) -> bool:
        return self <= Feature.V2

    @property
    def is_edge(self) -> bool:
        return Feature.E0 <= self <= Feature.E2


# ---------------------------------------------------------------------------
# Measures
# ---------------------------------------------------------------------------

def normal(tri: _F) -> _F:
    """``cross(v1 - v0, v2 - v0)``: not unit length, oriented by vertex order."""
    tri = np.asarray(tri, dtype=np.float64)
    return np.cross(tri[1] - tri[0], tri[2] - tri[0])


def unit_normal(tri: _F) -> _F:
    n = normal(tri)
    return n / length(n)


def centroid(tri: _F) -> _F:
    return np.asarray(tri, dtype=np.float64).mean(axis=0)


def edges(tri: _F) -> _F:
    """``(3, 2, 3)`` array of edges ``(v[i], v[(i + 1) % 3])``."""
    tri = np.asarray(tri, dtype=np.float64)
    return np.stack([tri, np.roll(tri, -1, axis=0)], axis=1)


def _ordered_lengths(tri: _F) -> Tuple[float, float, float]:
    tri = np.asarray(tri, dtype=np.float64)
    a, b, c = sorted(float(x) for x in length(np.roll(tri, -1, axis=0) - tri))
    return a, b, c


def area(tri: _F) -> float:
    """Surface area, using Kahan's formula for needle-like triangles."""
    a, b, c = _ordered_lengths(tri)
    s = (c + (b + a)) * (a - (c - b)) * (a + (c - b)) * (c + (b - a))
    return math.sqrt(max(s, 0.0)) / 4


def is_degenerate(tri: _F, tol: float = DEGENERATE_TOLERANCE) -> bool:
    """True if the vertices are collinear (or coincident) to within *tol*."""
    a, b, c = _ordered_lengths(tri)
    # The two shorter sides of a proper triangle sum to more than the longest.
    return a + b < c + tol


def bounds(tri: _F) -> Tuple[_F, _F]:
    tri = np.asarray(tri, dtype=np.float64)
    return tri.min(axis=0), tri.max(axis=0)


# ---------------------------------------------------------------------------
# Closest point
# ---------------------------------------------------------------------------

def _cross2(o: _F, a: _F, b: _F) -> float:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def closest_on_triangle2(p: _F, tri: _F) -> Tuple[_F, Feature]:
    """Closest point to 2D point *p* on 2D triangle *tri* (``(3, 2)``).

    Either vertex winding is accepted.  Returns the point and the feature
    realising it; a point inside the triangle is returned unchanged with
    :attr:`Feature.FACE`.
    """
    p = np.asarray(p, dtype=np.float64)
    tri = np.asarray(tri, dtype=np.float64)
    orient = _cross2(tri[0], tri[1], tri[2])
    inside = True
    for i in range(3):
        if _cross2(tri[i], tri[(i + 1) % 3], p) * orient < 0:
            inside = False
            break
    if inside:
        return p.copy(), Feature.FACE

    best = math.inf
    best_pt = p
    best_feat = Feature.FACE
    for i in range(3):
        s = tri[i]
        e = tri[(i + 1) % 3]
        d = e - s
        t = float(np.dot(p - s, d) / np.dot(d, d))
        if t <= 0:
            q, feat = s, Feature(i)
        elif t >= 1:
            q, feat = e, Feature((i + 1) % 3)
        else:
            q, feat = s + t * d, Feature(3 + i)
        dist = float(dot2(p - q))
        if dist < best:
            best, best_pt, best_feat = dist, q, feat
    return best_pt.copy(), best_feat


def closest_on_local(p: _F, local: _F, frame: RigidTransform,
                     inverse: RigidTransform) -> Tuple[_F, Feature, float]:
    """Closest point using a precomputed frame.

    *local* holds the triangle's 2D coordinates in *frame*, and *inverse*
    is ``frame.inverse()``.  Returns ``(point, feature, squared distance)``.
    """
    p = np.asarray(p, dtype=np.float64)
    pl = frame.apply(p)
    q2, feat = closest_on_triangle2(pl[:2], local)
    q = inverse.apply(np.array([q2[0], q2[1], 0.0]))
    return q, feat, float(dot2(p - q))


def closest_on_triangle(p: _F, tri: _F) -> Tuple[_F, Feature, float]:
    """Closest point to 3D point *p* on triangle *tri*.

    Returns ``(point, feature, squared distance)``.  Raises
    :class:`~meshsdf.errors.DegenerateGeometryError` for degenerate
    triangles.
    """
    frame = RigidTransform.from_triangle(tri)
    local = frame.apply_triangle(tri)[:, :2]
    return closest_on_local(p, local, frame, frame.inverse())
