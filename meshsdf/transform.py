"""Rigid (rotation + translation) transforms of 3D points."""

from __future__ import annotations

from typing import Optional

import numpy as np

from ._math import _F, as_points, cross, dot, length
from .config import DEGENERATE_TOLERANCE
from .errors import DegenerateGeometryError, ShapeError


class RigidTransform:
    """``p -> rotation @ p + translation`` with an orthonormal *rotation*.

    Distances, angles and areas are preserved, and the inverse is obtained
    by transposition instead of a general matrix inverse.
    """

    __slots__ = ("rotation", "translation")

    def __init__(self, rotation: Optional[_F] = None, translation: Optional[_F] = None) -> None:
        r = np.eye(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
        t = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        if r.shape != (3, 3):
            raise ShapeError(f"rotation must be (3, 3), got {r.shape}")
        if t.shape != (3,):
            raise ShapeError(f"translation must be (3,), got {t.shape}")
        self.rotation = r
        self.translation = t

    def __repr__(self) -> str:
        return f"RigidTransform(rotation={self.rotation.tolist()}, translation={self.translation.tolist()})"

    @classmethod
    def from_triangle(cls, tri: _F) -> RigidTransform:
        """Local frame of triangle *tri* (rows ``v0, v1, v2``).

        In the returned frame ``v0`` is the origin, ``v1`` lies on the
        positive x axis and ``v2`` in the xy plane with positive y.

        Raises :class:`DegenerateGeometryError` if the first edge has zero
        length or the three vertices are collinear.
        """
        v0, v1, v2 = np.asarray(tri, dtype=np.float64)
        e1 = v1 - v0
        l1 = length(e1)
        if l1 <= DEGENERATE_TOLERANCE:
            raise DegenerateGeometryError(f"zero-length edge in triangle {np.asarray(tri).tolist()}")
        x = e1 / l1
        # Gram-Schmidt: the part of v2 - v0 orthogonal to the first axis.
        w = v2 - v0
        w = w - dot(w, x) * x
        l2 = length(w)
        if l2 <= DEGENERATE_TOLERANCE * max(l1, 1.0):
            raise DegenerateGeometryError(f"zero-area triangle {np.asarray(tri).tolist()}")
        y = w / l2
        rot = np.stack([x, y, cross(x, y)])
        return cls(rot, -rot @ v0)

    def apply(self, p) -> _F:
        """Transform a point or a ``(..., 3)`` batch of points."""
        return as_points(p) @ self.rotation.T + self.translation

    def apply_triangle(self, tri: _F) -> _F:
        """Transform the three vertices of *tri*."""
        return self.apply(tri)

    def inverse(self) -> RigidTransform:
        rt = self.rotation.T
        return RigidTransform(rt, -rt @ self.translation)
