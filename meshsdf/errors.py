"""Exceptions raised by meshsdf.

Querying an empty index is not an error (it returns an infinite distance),
and inconsistent triangle winding is never detected: both are documented
behaviour rather than exceptions.
"""


class MeshSDFError(Exception):
    """Base class for meshsdf errors."""


class ShapeError(MeshSDFError, ValueError):
    """An array argument does not have the required shape."""


class DegenerateGeometryError(MeshSDFError, ValueError):
    """A triangle has a zero-length edge or zero area.

    Degenerate triangles must be removed before building a mesh, e.g. with
    :func:`meshsdf.triangle.is_degenerate`.
    """
