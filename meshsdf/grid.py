"""Grid sampling utilities for signed distance functions."""

from __future__ import annotations

import os
from typing import Callable, Tuple

import numpy as np
import numpy.typing as npt

_Array = npt.NDArray[np.floating]
_Bounds3D = Tuple[Tuple[float, float], Tuple[float, float], Tuple[float, float]]
_Resolution3D = Tuple[int, int, int]


def cell_centres(bounds: _Bounds3D, resolution: _Resolution3D) -> _Array:
    """Cell-centre coordinates of a uniform grid, shape ``(nz, ny, nx, 3)``."""
    (x0, x1), (y0, y1), (z0, z1) = bounds
    nx, ny, nz = resolution

    xs = np.linspace(x0, x1, nx, endpoint=False) + (x1 - x0) / (2.0 * nx)
    ys = np.linspace(y0, y1, ny, endpoint=False) + (y1 - y0) / (2.0 * ny)
    zs = np.linspace(z0, z1, nz, endpoint=False) + (z1 - z0) / (2.0 * nz)

    Z, Y, X = np.meshgrid(zs, ys, xs, indexing="ij")
    return np.stack([X, Y, Z], axis=-1)


def sample_levelset(
    sdf: Callable[[_Array], _Array],
    bounds: _Bounds3D,
    resolution: _Resolution3D,
) -> _Array:
    """Sample *sdf* on a uniform 3-D cell-centred grid.

    Parameters
    ----------
    sdf:
        Callable accepting ``(..., 3)`` arrays, e.g. a
        :class:`~meshsdf.mesh_sdf.MeshSDF`.
    bounds:
        ``((x0, x1), (y0, y1), (z0, z1))`` physical extents of the domain.
    resolution:
        ``(nx, ny, nz)`` number of cells along each axis.

    Returns
    -------
    numpy.ndarray
        Shape ``(nz, ny, nx)`` array of signed distances, z-first indexing.
    """
    return sdf(cell_centres(bounds, resolution))


def save_npy(path: str, phi: _Array) -> None:
    """Save *phi* array to *path* (creates parent directories if needed)."""
    out_dir = os.path.dirname(path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    np.save(path, phi)
