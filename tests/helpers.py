"""Shared test helpers: reference meshes and brute-force distance oracles."""
from __future__ import annotations

import struct

import numpy as np


# ---------------------------------------------------------------------------
# Meshes
# ---------------------------------------------------------------------------

def icosahedron(radius: float = 1.0):
    x = 0.525731112119133606 * radius
    z = 0.850650808352039932 * radius
    n = 0.0
    vertices = [
        (-x, n, z), (x, n, z), (-x, n, -z), (x, n, -z),
        (n, z, x), (n, z, -x), (n, -z, x), (n, -z, -x),
        (z, x, n), (-z, x, n), (z, -x, n), (-z, -x, n),
    ]
    faces = [
        (0, 1, 4), (0, 4, 9), (9, 4, 5), (4, 8, 5),
        (4, 1, 8), (8, 1, 10), (8, 10, 3), (5, 8, 3),
        (5, 3, 2), (2, 3, 7), (7, 3, 10), (7, 10, 6),
        (7, 6, 11), (11, 6, 0), (0, 6, 1), (6, 10, 1),
        (9, 11, 0), (9, 2, 11), (9, 5, 2), (7, 11, 2),
    ]
    return [np.array(v) for v in vertices], faces


def icosphere(subdivisions: int = 2) -> np.ndarray:
    """Outward-wound unit icosphere as a ``(F, 3, 3)`` soup of ``20 * 4**subdivisions`` triangles."""
    vertices, faces = icosahedron()
    for _ in range(subdivisions):
        lookup = {}
        result = []

        def midpoint(a, b):
            key = (a, b) if a < b else (b, a)
            if key not in lookup:
                m = vertices[a] + vertices[b]
                vertices.append(m / np.linalg.norm(m))
                lookup[key] = len(vertices) - 1
            return lookup[key]

        for a, b, c in faces:
            ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
            result += [(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)]
        faces = result
    return np.array([[vertices[i] for i in f] for f in faces], dtype=np.float64)


def box_triangles(hx: float = 0.5, hy: float = 0.5, hz: float = 0.5) -> np.ndarray:
    """12-triangle watertight box [-hx,hx]×[-hy,hy]×[-hz,hz], wound outward."""
    verts = np.array([
        [-hx, -hy, -hz], [ hx, -hy, -hz], [ hx,  hy, -hz], [-hx,  hy, -hz],
        [-hx, -hy,  hz], [ hx, -hy,  hz], [ hx,  hy,  hz], [-hx,  hy,  hz],
    ], dtype=np.float64)
    face_indices = [
        (0, 2, 1), (0, 3, 2),   # -Z
        (4, 5, 6), (4, 6, 7),   # +Z
        (0, 4, 7), (0, 7, 3),   # -X
        (1, 2, 6), (1, 6, 5),   # +X
        (0, 1, 5), (0, 5, 4),   # -Y
        (3, 7, 6), (3, 6, 2),   # +Y
    ]
    return np.array([[verts[i], verts[j], verts[k]] for i, j, k in face_indices],
                    dtype=np.float64)


def voxel_triangles(voxels) -> np.ndarray:
    """Outward-wound surface of a union of unit cubes.

    *voxels* are integer ``(i, j, k)`` cells; only faces between a filled
    and an empty cell are emitted, two triangles per unit square.
    """
    filled = {tuple(v) for v in voxels}
    tris = []
    for cell in sorted(filled):
        for a in range(3):
            u, w = (a + 1) % 3, (a + 2) % 3
            for s in (-1, 1):
                nb = list(cell)
                nb[a] += s
                if tuple(nb) in filled:
                    continue
                p0 = np.array(cell, dtype=np.float64)
                if s > 0:
                    p0[a] += 1.0
                eu = np.eye(3)[u]
                ew = np.eye(3)[w]
                p1, p2, p3 = p0 + eu, p0 + eu + ew, p0 + ew
                if s > 0:
                    tris += [(p0, p1, p2), (p0, p2, p3)]
                else:
                    tris += [(p0, p2, p1), (p0, p3, p2)]
    return np.array(tris, dtype=np.float64)


# Three arms on a corner cube: reflex edges along x=y=1, y=z=1, x=z=1 and a
# saddle vertex at (1, 1, 1).
L_VOXELS = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]


def write_binary_stl(triangles: np.ndarray) -> bytes:
    header  = b"\x00" * 80
    count   = struct.pack("<I", len(triangles))
    records = bytearray()
    for tri in triangles:
        records += struct.pack("<fff", 0.0, 0.0, 0.0)
        for v in tri:
            records += struct.pack("<fff", float(v[0]), float(v[1]), float(v[2]))
        records += struct.pack("<H", 0)
    return header + count + bytes(records)


def write_ascii_stl(triangles: np.ndarray) -> str:
    lines = ["solid test"]
    for tri in triangles:
        lines.append("  facet normal 0 0 0")
        lines.append("    outer loop")
        for v in tri:
            lines.append(f"      vertex {v[0]:.9g} {v[1]:.9g} {v[2]:.9g}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append("endsolid test")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Brute-force oracles
# ---------------------------------------------------------------------------

def triangle_sq_dist(P: np.ndarray, tri: np.ndarray) -> np.ndarray:
    """Squared distance from each point in P (N, 3) to triangle tri (3, 3).

    Ericson's Voronoi-region method (Real-Time Collision Detection §5.1.5),
    independent of the local-frame projection under test.
    """
    A, B, C = tri[0], tri[1], tri[2]
    AB = B - A
    AC = C - A
    AP = P - A

    d1 = AP @ AB
    d2 = AP @ AC
    d3 = (P - B) @ AB
    d4 = (P - B) @ AC
    d5 = (P - C) @ AB
    d6 = (P - C) @ AC

    vc = d1 * d4 - d3 * d2
    vb = d5 * d2 - d1 * d6
    va = d3 * d6 - d5 * d4

    denom_uv = np.maximum(va + vb + vc, 1e-30)
    denom_u  = np.maximum(d1 - d3, 1e-30)
    denom_v  = np.maximum((d4 - d3) + (d5 - d6), 1e-30)

    cond_A  = (d1 <= 0.0) & (d2 <= 0.0)
    cond_B  = (d3 >= 0.0) & (d4 <= d3)
    cond_C  = (d6 >= 0.0) & (d5 <= d6)
    cond_AB = (vc <= 0.0) & (d1 >= 0.0) & (d3 <= 0.0)
    cond_AC = (vb <= 0.0) & (d2 >= 0.0) & (d6 <= 0.0)
    cond_BC = (va <= 0.0) & ((d4 - d3) >= 0.0) & ((d5 - d6) >= 0.0)

    def _sq(cp):
        diff = P - cp
        return (diff * diff).sum(axis=-1)

    t_AB  = np.clip(d1 / denom_u, 0.0, 1.0)
    cp_AB = A + t_AB[:, None] * AB

    t_AC  = np.clip(d2 / np.maximum(d2 - d6, 1e-30), 0.0, 1.0)
    cp_AC = A + t_AC[:, None] * AC

    t_BC  = np.clip((d4 - d3) / denom_v, 0.0, 1.0)
    cp_BC = B + t_BC[:, None] * (C - B)

    w_v    = vb / denom_uv
    w_w    = vc / denom_uv
    cp_int = A + w_v[:, None] * AB + w_w[:, None] * AC

    return np.select(
        [cond_A, cond_B, cond_C, cond_AB, cond_AC, cond_BC],
        [_sq(A), _sq(B), _sq(C), _sq(cp_AB), _sq(cp_AC), _sq(cp_BC)],
        default=_sq(cp_int),
    )


def mesh_sq_dist(P: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Minimum squared distance from each point in P to any triangle."""
    sq_min = np.full(len(P), np.inf)
    for tri in triangles:
        sq_min = np.minimum(sq_min, triangle_sq_dist(P, tri))
    return sq_min


def convex_inside(P: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Inside test for a convex, outward-wound mesh: behind every face plane."""
    inside = np.ones(len(P), dtype=bool)
    for tri in triangles:
        n = np.cross(tri[1] - tri[0], tri[2] - tri[0])
        inside &= (P - tri[0]) @ n < 0
    return inside


def voxel_inside(P: np.ndarray, voxels) -> np.ndarray:
    """Membership of each point in P in the union of unit cubes *voxels*."""
    filled = {tuple(v) for v in voxels}
    cells = np.floor(P).astype(int)
    return np.array([tuple(c) in filled for c in cells], dtype=bool)
