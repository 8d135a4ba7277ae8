"""Tests for single-triangle geometry and rigid local frames."""
from __future__ import annotations

import numpy as np
import numpy.testing as npt
import pytest

from helpers import icosphere, triangle_sq_dist
from meshsdf import DegenerateGeometryError, Feature, RigidTransform, ShapeError
from meshsdf.triangle import (
    area,
    bounds,
    centroid,
    closest_on_triangle,
    closest_on_triangle2,
    edges,
    is_degenerate,
    normal,
    unit_normal,
)


def _angles(tri):
    out = []
    for i in range(3):
        a = tri[(i + 1) % 3] - tri[i]
        b = tri[(i + 2) % 3] - tri[i]
        out.append(np.arccos(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b))))
    return np.array(out)


def _random_point_on_triangle2(rnd, tri):
    a, b = rnd.random(), rnd.random()
    if a + b >= 1:
        a, b = 1 - a, 1 - b
    return tri[0] + b * (tri[2] - tri[0]) + a * (tri[1] - tri[0])


# ===========================================================================
# Measures
# ===========================================================================

class TestMeasures:
    def setup_method(self):
        self.tri = np.array([[0, 0, 0], [2, 0, 0], [0, 1, 0]], dtype=np.float64)

    def test_normal_follows_winding(self):
        npt.assert_allclose(normal(self.tri), [0, 0, 2])
        npt.assert_allclose(normal(self.tri[[0, 2, 1]]), [0, 0, -2])
        npt.assert_allclose(unit_normal(self.tri), [0, 0, 1])

    def test_area(self):
        assert area(self.tri) == pytest.approx(1.0)

    def test_area_needle(self):
        tri = np.array([[0, 0, 0], [10, 0, 0], [5, 1e-3, 0]])
        assert area(tri) == pytest.approx(5e-3, rel=1e-6)

    def test_centroid(self):
        npt.assert_allclose(centroid(self.tri), [2 / 3, 1 / 3, 0])

    def test_edges(self):
        e = edges(self.tri)
        assert e.shape == (3, 2, 3)
        npt.assert_allclose(e[2], [self.tri[2], self.tri[0]])

    def test_bounds(self):
        lo, hi = bounds(self.tri)
        npt.assert_allclose(lo, [0, 0, 0])
        npt.assert_allclose(hi, [2, 1, 0])

    def test_is_degenerate(self):
        assert not is_degenerate(self.tri)
        assert is_degenerate(np.array([[0, 0, 0], [1, 1, 1], [2, 2, 2]], dtype=float))
        assert is_degenerate(np.array([[0, 0, 0], [0, 0, 0], [1, 0, 0]], dtype=float))


# ===========================================================================
# Rigid local frame
# ===========================================================================

class TestRigidFrame:
    def test_icosphere_round_trip(self):
        for tri in icosphere(2):
            frame = RigidTransform.from_triangle(tri)
            inv = frame.inverse()
            npt.assert_allclose(inv.apply(frame.apply(tri)), tri, atol=1e-9)

    def test_icosphere_preserves_area_and_angles(self):
        for tri in icosphere(2):
            local = RigidTransform.from_triangle(tri).apply_triangle(tri)
            assert area(local) == pytest.approx(area(tri), abs=1e-12)
            npt.assert_allclose(_angles(local), _angles(tri), atol=1e-9)

    def test_canonical_placement(self):
        for tri in icosphere(1):
            local = RigidTransform.from_triangle(tri).apply_triangle(tri)
            npt.assert_allclose(local[0], [0, 0, 0], atol=1e-12)
            assert local[1, 0] > 0
            npt.assert_allclose(local[1, 1:], [0, 0], atol=1e-12)
            assert local[2, 1] > 0
            assert abs(local[2, 2]) < 1e-12

    def test_is_rotation(self):
        frame = RigidTransform.from_triangle(icosphere(0)[3])
        npt.assert_allclose(frame.rotation @ frame.rotation.T, np.eye(3), atol=1e-12)
        assert np.linalg.det(frame.rotation) == pytest.approx(1.0)

    def test_inverse_undoes_frame(self):
        frame = RigidTransform.from_triangle(icosphere(0)[5])
        inv = frame.inverse()
        npt.assert_allclose(inv.rotation @ frame.rotation, np.eye(3), atol=1e-12)
        npt.assert_allclose(inv.apply(frame.translation), np.zeros(3), atol=1e-12)

    def test_batch_apply(self):
        frame = RigidTransform.from_triangle(icosphere(0)[0])
        pts = np.random.default_rng(0).normal(size=(4, 5, 3))
        out = frame.apply(pts)
        assert out.shape == (4, 5, 3)
        npt.assert_allclose(out[2, 3], frame.apply(pts[2, 3]))

    @pytest.mark.parametrize("tri", [
        [[0, 0, 0], [0, 0, 0], [1, 0, 0]],
        [[0, 0, 0], [1, 0, 0], [2, 0, 0]],
        [[0, 0, 0], [1, 0, 0], [0, 0, 0]],
    ])
    def test_degenerate_raises(self, tri):
        with pytest.raises(DegenerateGeometryError):
            RigidTransform.from_triangle(np.array(tri, dtype=float))

    def test_bad_shapes(self):
        with pytest.raises(ShapeError):
            RigidTransform(np.eye(2))
        with pytest.raises(ShapeError):
            RigidTransform(translation=np.zeros(4))
        with pytest.raises(ShapeError):
            RigidTransform().apply([1.0, 2.0])


# ===========================================================================
# 2D closest point
# ===========================================================================

class TestClosestOnTriangle2:
    def setup_method(self):
        self.tri = np.array([[0, 0], [1, 0], [0, 1]], dtype=np.float64)

    @pytest.mark.parametrize("p, want, feat", [
        ((-1, -1), (0, 0), Feature.V0),
        ((2, -1), (1, 0), Feature.V1),
        ((-1, 2), (0, 1), Feature.V2),
        ((0.5, -1), (0.5, 0), Feature.E0),
        ((0.8, 0.8), (0.5, 0.5), Feature.E1),
        ((-1, 0.5), (0, 0.5), Feature.E2),
        ((0.2, 0.2), (0.2, 0.2), Feature.FACE),
    ])
    def test_regions(self, p, want, feat):
        got, got_feat = closest_on_triangle2(np.array(p, dtype=float), self.tri)
        npt.assert_allclose(got, want, atol=1e-12)
        assert got_feat == feat

    def test_clockwise_winding(self):
        tri = self.tri[[0, 2, 1]]
        got, feat = closest_on_triangle2(np.array([0.5, -1.0]), tri)
        npt.assert_allclose(got, [0.5, 0])
        assert feat == Feature.E2
        _, feat = closest_on_triangle2(np.array([0.1, 0.1]), tri)
        assert feat == Feature.FACE

    def test_point_on_edge_is_face(self):
        _, feat = closest_on_triangle2(np.array([0.5, 0.0]), self.tri)
        assert feat == Feature.FACE

    def test_random_no_closer_point(self):
        rnd = np.random.default_rng(1)
        for _ in range(100):
            tri = (rnd.random((3, 2)) - 0.5) * 2
            p = (rnd.random(2) - 0.5) * 6
            got, _ = closest_on_triangle2(p, tri)
            got_d = np.linalg.norm(got - p)
            for _ in range(300):
                q = _random_point_on_triangle2(rnd, tri)
                assert np.linalg.norm(q - p) >= got_d - 1e-12


# ===========================================================================
# 3D closest point
# ===========================================================================

class TestClosestOnTriangle:
    def setup_method(self):
        self.tri = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=np.float64)

    def test_interior(self):
        q, feat, d2 = closest_on_triangle(np.array([0.2, 0.3, 0.5]), self.tri)
        npt.assert_allclose(q, [0.2, 0.3, 0.0], atol=1e-12)
        assert feat == Feature.FACE
        assert d2 == pytest.approx(0.25)

    def test_vertex(self):
        q, feat, d2 = closest_on_triangle(np.array([2.0, -1.0, 0.0]), self.tri)
        npt.assert_allclose(q, [1, 0, 0], atol=1e-12)
        assert feat == Feature.V1
        assert d2 == pytest.approx(2.0)

    def test_edge(self):
        q, feat, d2 = closest_on_triangle(np.array([-1.0, 0.5, 1.0]), self.tri)
        npt.assert_allclose(q, [0, 0.5, 0], atol=1e-12)
        assert feat == Feature.E2
        assert d2 == pytest.approx(2.0)

    def test_matches_voronoi_region_oracle(self):
        rnd = np.random.default_rng(2)
        for _ in range(200):
            tri = rnd.normal(size=(3, 3))
            if is_degenerate(tri, 1e-3):
                continue
            P = rnd.normal(size=(20, 3)) * 2
            want = triangle_sq_dist(P, tri)
            got = [closest_on_triangle(p, tri)[2] for p in P]
            npt.assert_allclose(got, want, rtol=1e-9, atol=1e-12)

    def test_closest_point_lies_on_triangle(self):
        rnd = np.random.default_rng(3)
        tri = rnd.normal(size=(3, 3))
        for p in rnd.normal(size=(50, 3)):
            q, _, d2 = closest_on_triangle(p, tri)
            assert d2 == pytest.approx(np.sum((p - q) ** 2))
            # Coplanar with the triangle
            assert abs(np.dot(q - tri[0], unit_normal(tri))) < 1e-12
