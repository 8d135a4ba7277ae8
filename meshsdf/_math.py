"""Vector helpers shared by the meshsdf modules.

This module provides:

* **Type alias**: :data:`_F`
* **Constructors / validation**: :func:`as_points`, :func:`as_triangles`
* **Math helpers**: :func:`length`, :func:`dot`, :func:`dot2`,
  :func:`cross`, :func:`unit`, :func:`cos_angle`, :func:`clamp`

All helpers operate along the last axis, so they accept a single ``(3,)``
vector as well as ``(..., 3)`` batches.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .errors import ShapeError

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------
_F = npt.NDArray[np.floating]

__all__ = [
    "_F",
    "as_points", "as_triangles",
    "length", "dot", "dot2", "cross", "unit", "cos_angle", "clamp",
]


# ===========================================================================
# Constructors / validation
# ===========================================================================

def as_points(p) -> _F:
    """Convert *p* to a float64 ``(..., 3)`` array or raise :class:`ShapeError`."""
    arr = np.asarray(p, dtype=np.float64)
    if arr.ndim == 0 or arr.shape[-1] != 3:
        raise ShapeError(f"expected points of shape (..., 3), got {arr.shape}")
    return arr


def as_triangles(triangles) -> _F:
    """Convert *triangles* to a float64 ``(F, 3, 3)`` array or raise :class:`ShapeError`."""
    arr = np.asarray(triangles, dtype=np.float64)
    if arr.ndim != 3 or arr.shape[1:] != (3, 3):
        raise ShapeError(f"expected triangles of shape (F, 3, 3), got {arr.shape}")
    return arr


# ===========================================================================
# Math helpers
# ===========================================================================

def length(v: _F) -> _F:
    """Euclidean length along the last axis."""
    return np.linalg.norm(v, axis=-1)


def dot(a: _F, b: _F) -> _F:
    """Dot product along the last axis."""
    return np.sum(a * b, axis=-1)


def dot2(a: _F) -> _F:
    """Squared length: ``dot(a, a)``."""
    return dot(a, a)


def cross(a: _F, b: _F) -> _F:
    """Cross product along the last axis."""
    return np.cross(a, b)


def unit(v: _F) -> _F:
    """*v* scaled to unit length.  Zero vectors are returned unchanged."""
    n = np.where(length(v) == 0.0, 1.0, length(v))
    return v / n[..., None]


def cos_angle(a: _F, b: _F) -> _F:
    """Cosine of the angle between *a* and *b*, clamped to ``[-1, 1]``."""
    return clamp(dot(a, b) / (length(a) * length(b)), -1.0, 1.0)


def clamp(x: _F, lo: float | _F, hi: float | _F) -> _F:
    """Clamp *x* element-wise to ``[lo, hi]``."""
    return np.minimum(np.maximum(x, lo), hi)
