"""Triangle mesh → Signed Distance Field.

Algorithm overview
------------------
Unsigned distance: the welded triangles (:class:`~meshsdf.mesh.Mesh`) are
    indexed by centroid in a bounded :class:`kdindex.Tree`.  A nearest query
    descends the half-space containing the point first and only visits the
    other half when that subtree's bounding box could still hold a closer
    triangle, computing exact point-triangle distances in each triangle's
    local frame.

Sign determination: angle-weighted pseudo-normals.
    The nearest triangle reports which of its features (vertex, edge or
    face) realises the minimum.  The sign of the dot product between that
    feature's pseudo-normal and ``p - closest`` decides inside (phi < 0) or
    outside.  Requires a **closed, consistently wound** mesh; windings are
    not validated.

Complexity: O(F log F) to build, about O(log F) per query point.
"""

from __future__ import annotations

import logging
import math
import struct
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from kdindex import Tree

from ._math import _F, as_points, dot, unit
from .config import DEFAULT_MERGE_TOLERANCE, NORMAL_STEP
from .errors import ShapeError
from .grid import _Bounds3D, _Resolution3D, sample_levelset
from .mesh import Mesh
from .triangle import Feature

logger = logging.getLogger(__name__)


class MeshSDF:
    """Signed distance to a closed triangle mesh.

    Parameters
    ----------
    triangles:
        ``(F, 3, 3)`` triangle soup wound so that ``cross(v1 - v0, v2 - v0)``
        points outward, or an already built :class:`Mesh`.
    tol:
        Vertex merge tolerance (ignored when a :class:`Mesh` is given).
    seed:
        Seed for the k-d tree's pivot sampling.

    Examples
    --------
    >>> sdf = MeshSDF(triangles)
    >>> sdf.evaluate([0.0, 0.0, 0.0])      # negative: inside
    >>> sdf(np.zeros((4, 4, 3))).shape
    (4, 4)
    """

    def __init__(
        self,
        triangles: Union[Mesh, np.ndarray],
        tol: float = DEFAULT_MERGE_TOLERANCE,
        *,
        seed: Optional[int] = None,
    ) -> None:
        self.mesh = triangles if isinstance(triangles, Mesh) else Mesh(triangles, tol)
        self.tree = Tree(self.mesh.triangles, bounding=True, seed=seed)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"MeshSDF ready: {len(self.mesh)} triangles, tree depth {self.tree.depth()}.")

    @classmethod
    def from_mesh(cls, mesh: Mesh, *, seed: Optional[int] = None) -> MeshSDF:
        return cls(mesh, seed=seed)

    def __repr__(self) -> str:
        return f"MeshSDF({self.mesh!r})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def closest(self, p) -> Tuple[Optional[_F], Optional[Feature], int, float]:
        """Closest surface point to *p*.

        Returns ``(point, feature, triangle index, squared distance)``;
        ``(None, None, -1, inf)`` for an empty mesh.
        """
        p = _as_point(p)
        tri, _ = self.tree.nearest(p)
        if tri is None:
            return None, None, -1, math.inf
        q, feat, d2 = tri.closest(p)
        return q, feat, tri.index, d2

    def evaluate(self, p) -> float:
        """Signed distance from *p* to the surface: negative inside.

        An empty mesh gives ``inf``.
        """
        p = _as_point(p)
        q, feat, ti, d2 = self.closest(p)
        if ti < 0:
            return math.inf
        tri = self.mesh.triangles[ti]
        if feat.is_vertex:
            v = self.mesh.vertices[tri.vertices[feat]]
            s = dot(v.normal, p - v.position)
        elif feat.is_edge:
            i = feat - Feature.E0
            n = self.mesh.edge_normal(tri.vertices[i], tri.vertices[(i + 1) % 3])
            s = dot(n, p - q)
        else:
            s = dot(tri.normal, p - q)
        return math.copysign(math.sqrt(d2), float(s))

    def sdf(self, p) -> _F:
        """Evaluate signed distance at *p* (shape ``(..., 3)``)."""
        pts = as_points(p)
        flat = pts.reshape(-1, 3)
        out = np.fromiter((self.evaluate(x) for x in flat), dtype=np.float64, count=len(flat))
        return out.reshape(pts.shape[:-1])

    def __call__(self, p) -> _F:
        return self.sdf(p)

    def normal(self, p, h: float = NORMAL_STEP) -> _F:
        """Unit gradient of the field at *p* by central differences."""
        p = _as_point(p)
        g = np.empty(3)
        for d in range(3):
            e = np.zeros(3)
            e[d] = h
            g[d] = self.evaluate(p + e) - self.evaluate(p - e)
        return unit(g)

    def bounds(self) -> Tuple[_F, _F]:
        """``(min, max)`` corners of the mesh's bounding box."""
        if not self.tree.bounded:
            return np.full(3, np.inf), np.full(3, -np.inf)
        b = self.tree.root.bounding
        return np.array(b.min), np.array(b.max)


def _as_point(p) -> _F:
    arr = np.asarray(p, dtype=np.float64)
    if arr.shape != (3,):
        raise ShapeError(f"expected a single point of shape (3,), got {arr.shape}")
    return arr


# ---------------------------------------------------------------------------
# STL loading
# ---------------------------------------------------------------------------

_STL_HEADER = 84
_STL_RECORD = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attr", "<u2"),
])


def load_stl(path: Union[str, Path]) -> np.ndarray:
    """Read the triangles of an STL file as a ``(F, 3, 3)`` float64 array.

    Binary files are recognised by their size (header, count, then one
    50-byte record per triangle), since some exporters begin binary headers
    with ``solid``.  Anything else is parsed as ASCII.  Stored facet normals
    are ignored; vertex order, and hence winding, is kept.
    """
    raw = Path(path).read_bytes()
    if len(raw) >= _STL_HEADER:
        (count,) = struct.unpack_from("<I", raw, 80)
        if len(raw) == _STL_HEADER + _STL_RECORD.itemsize * count:
            return _load_binary_stl(raw)
    return _load_ascii_stl(raw.decode("ascii", errors="replace"))


def _load_binary_stl(raw: bytes) -> np.ndarray:
    if len(raw) < _STL_HEADER:
        raise ShapeError(f"binary STL needs at least {_STL_HEADER} bytes, got {len(raw)}")
    (count,) = struct.unpack_from("<I", raw, 80)
    available = (len(raw) - _STL_HEADER) // _STL_RECORD.itemsize
    if count > available:
        raise ShapeError(f"binary STL declares {count} triangles but holds {available}")
    records = np.frombuffer(raw, dtype=_STL_RECORD, count=count, offset=_STL_HEADER)
    return records["vertices"].astype(np.float64)


def _load_ascii_stl(text: str) -> np.ndarray:
    coords = [
        [float(v) for v in line.split()[1:4]]
        for line in text.splitlines()
        if line.lstrip().startswith("vertex")
    ]
    if len(coords) % 3:
        raise ShapeError(f"ASCII STL has {len(coords)} vertices, not a multiple of 3")
    return np.array(coords, dtype=np.float64).reshape(-1, 3, 3)


# ---------------------------------------------------------------------------
# Batch helpers
# ---------------------------------------------------------------------------

def mesh_to_sdf(
    points: np.ndarray,
    triangles: np.ndarray,
    *,
    tol: float = DEFAULT_MERGE_TOLERANCE,
) -> np.ndarray:
    """Compute the signed distance field at *points* for a triangulated mesh.

    Parameters
    ----------
    points:
        ``(N, 3)`` query point coordinates.
    triangles:
        ``(F, 3, 3)`` triangle vertex array, e.g. from :func:`load_stl`.
    tol:
        Vertex merge tolerance, see :class:`~meshsdf.mesh.Mesh`.

    Returns
    -------
    numpy.ndarray
        ``(N,)`` signed distances.  Negative inside, positive outside.
    """
    return MeshSDF(triangles, tol).sdf(points)


def sample_sdf_from_stl(
    path: Union[str, Path],
    bounds: _Bounds3D,
    resolution: _Resolution3D,
    *,
    tol: float = DEFAULT_MERGE_TOLERANCE,
) -> np.ndarray:
    """Load an STL file and sample its SDF on a uniform cell-centred grid.

    Parameters
    ----------
    path:
        Path to the ``.stl`` file.
    bounds:
        ``((x0, x1), (y0, y1), (z0, z1))`` physical extents of the domain.
    resolution:
        ``(nx, ny, nz)`` number of cells along each axis.
    tol:
        Vertex merge tolerance.

    Returns
    -------
    numpy.ndarray
        Shape ``(nz, ny, nx)`` signed distance field.
    """
    sdf = MeshSDF(load_stl(path), tol)
    return sample_levelset(sdf, bounds, resolution)
