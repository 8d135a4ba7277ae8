"""meshsdf: signed distance to triangle meshes.

Turns a closed triangle soup into a queryable signed distance function:
negative inside, positive outside, exact Euclidean magnitude.

Quick start
-----------
>>> from meshsdf import MeshSDF, load_stl
>>> sdf = MeshSDF(load_stl("part.stl"))
>>> sdf.evaluate([0.0, 0.0, 0.0])
-0.42
>>> sdf(points).shape          # any (..., 3) array
(32, 32, 32)

Winding requirement
-------------------
Sign determination uses angle-weighted pseudo-normals at the closest
vertex, edge or face.  The result is only correct for **closed** meshes
whose triangles are all wound so that ``cross(v1 - v0, v2 - v0)`` points
outward.  Windings are not validated; an inconsistent mesh silently yields
wrong signs.  Degenerate triangles raise
:class:`~meshsdf.errors.DegenerateGeometryError` and must be filtered out
first (see :func:`~meshsdf.triangle.is_degenerate`).

Performance
-----------
Triangles are held in a bounded k-d tree (:mod:`kdindex`), so a query
costs about O(log F) point-triangle distance evaluations after an
O(F log F) build.  Built objects are read-only and may be queried from
several threads.
"""

from .cache import DistanceCache
from .errors import DegenerateGeometryError, MeshSDFError, ShapeError
from .grid import cell_centres, sample_levelset, save_npy
from .logging_config import setup_logging
from .mesh import Mesh, MeshTriangle, MeshVertex
from .mesh_sdf import MeshSDF, load_stl, mesh_to_sdf, sample_sdf_from_stl
from .transform import RigidTransform
from .triangle import Feature, closest_on_triangle, closest_on_triangle2, is_degenerate

__version__ = "0.1.0"

__all__ = [
    # Evaluator
    "MeshSDF",
    "mesh_to_sdf",

    # Mesh
    "Mesh",
    "MeshTriangle",
    "MeshVertex",

    # Geometry
    "RigidTransform",
    "Feature",
    "closest_on_triangle",
    "closest_on_triangle2",
    "is_degenerate",

    # I/O and grids
    "load_stl",
    "sample_sdf_from_stl",
    "sample_levelset",
    "cell_centres",
    "save_npy",
    "DistanceCache",

    # Errors
    "MeshSDFError",
    "ShapeError",
    "DegenerateGeometryError",

    # Logging
    "setup_logging",
]
