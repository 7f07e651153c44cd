"""Element geometry tests: Gauss elimination, measures and shell bases."""

import numpy as np
import pytest

from statfem.elements import quadrature
from statfem.elements.geometry import (
    expand_transform,
    gauss_solve,
    shape_coefficients,
    transform_matrix,
    volume_1d2,
    volume_2d3,
    volume_2d4,
    volume_3d4,
    volume_3d8,
)
from statfem.errors import NumericError


class TestGaussSolve:

    def test_matches_numpy(self):
        rng = np.random.default_rng(0)
        a = rng.normal(size=(6, 6)) + 6.0 * np.eye(6)
        b = rng.normal(size=6)
        np.testing.assert_allclose(gauss_solve(a, b), np.linalg.solve(a, b), rtol=1e-12)

    def test_needs_pivoting(self):
        a = np.array([[0.0, 1.0], [1.0, 0.0]])
        np.testing.assert_allclose(gauss_solve(a, [2.0, 3.0]), [3.0, 2.0])

    def test_matrix_right_hand_side(self):
        a = np.array([[2.0, 1.0], [1.0, 3.0]])
        np.testing.assert_allclose(a @ gauss_solve(a, np.eye(2)), np.eye(2), atol=1e-14)

    def test_singular(self):
        with pytest.raises(NumericError, match="singular"):
            gauss_solve(np.array([[1.0, 2.0], [2.0, 4.0]]), [1.0, 1.0])

    def test_bad_element(self):
        # three collinear triangle nodes
        p = np.array([[1.0, 0.0, 0.0], [1.0, 1.0, 1.0], [1.0, 2.0, 2.0]])
        with pytest.raises(NumericError, match="bad finite element"):
            shape_coefficients(p)


class TestQuadrature:

    @pytest.mark.parametrize("rule, n_points, measure", [
        (quadrature.gauss_line_3pt, 3, 2.0),
        (quadrature.gauss_triangle_midedge, 3, 0.5),
        (quadrature.gauss_quad_2x2, 4, 4.0),
        (quadrature.gauss_tet_5pt, 5, 1.0 / 6.0),
        (quadrature.gauss_hex_2x2x2, 8, 8.0),
    ])
    def test_weights_sum_to_reference_measure(self, rule, n_points, measure):
        points, weights = rule()
        assert len(points) == len(weights) == n_points
        assert np.isclose(np.sum(weights), measure, atol=1e-14)

    def test_triangle_rule_integrates_quadratics(self):
        points, weights = quadrature.gauss_triangle_midedge()
        # integral of xi^2 over the reference triangle is 1/12
        assert np.isclose(np.sum(weights * points[:, 0] ** 2), 1.0 / 12.0)

    def test_tet_rule_integrates_quadratics(self):
        points, weights = quadrature.gauss_tet_5pt()
        # integral of xi * eta over the reference tetrahedron is 1/120
        assert np.isclose(np.sum(weights * points[:, 0] * points[:, 1]), 1.0 / 120.0)


class TestMeasures:

    def test_segment(self):
        assert volume_1d2([[0.0, 0.0, 0.0], [3.0, 4.0, 0.0]]) == pytest.approx(5.0)

    def test_triangle(self):
        assert volume_2d3([[0, 0], [1, 0], [0, 1]]) == pytest.approx(0.5)
        # same triangle lying in 3D space
        assert volume_2d3([[0, 0, 1], [2, 0, 1], [0, 2, 1]]) == pytest.approx(2.0)

    @pytest.mark.parametrize("x, area", [
        ([[0, 0], [1, 0], [1, 1], [0, 1]], 1.0),
        ([[0, 0], [2, 0], [3, 1], [1, 1]], 2.0),
        ([[0, 0], [4, 0], [3, 2], [1, 2]], 6.0),
        ([[0, 0, 0], [1, 0, 0], [1, 0, 3], [0, 0, 3]], 3.0),
    ])
    def test_quadrilateral(self, x, area):
        assert volume_2d4(x) == pytest.approx(area)

    def test_tetrahedron(self):
        x = [[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]]
        assert volume_3d4(x) == pytest.approx(1.0 / 6.0)

    def test_hexahedron(self):
        x = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                      [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]], dtype=float)
        assert volume_3d8(x) == pytest.approx(1.0)
        assert volume_3d8(x * [2.0, 3.0, 0.5]) == pytest.approx(3.0)


class TestShellBasis:

    def test_orthonormal(self):
        x = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 2.0]])
        T = transform_matrix(x)
        np.testing.assert_allclose(T @ T.T, np.eye(3), atol=1e-14)
        assert np.isclose(np.linalg.det(T), 1.0)
        np.testing.assert_allclose(T[0], [1.0 / np.sqrt(2.0), 1.0 / np.sqrt(2.0), 0.0])

    def test_plane_element_keeps_global_axes(self):
        x = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0]])
        np.testing.assert_allclose(transform_matrix(x), np.eye(3), atol=1e-14)

    def test_normal_is_perpendicular_to_element(self):
        x = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])
        vz = transform_matrix(x)[2]
        assert np.isclose(vz @ (x[1] - x[0]), 0.0)
        assert np.isclose(vz @ (x[2] - x[0]), 0.0)

    def test_degenerate(self):
        with pytest.raises(NumericError):
            transform_matrix([[0, 0, 0], [0, 0, 0], [1, 1, 1]])

    def test_expand(self):
        T = transform_matrix([[0, 0, 0], [0, 1, 0], [0, 0, 1]])
        M = expand_transform(T, 12)
        assert M.shape == (12, 12)
        np.testing.assert_allclose(M[6:9, 6:9], T)
        assert not M[0:3, 3:6].any()

    def test_expand_size(self):
        with pytest.raises(ValueError):
            expand_transform(np.eye(3), 4)
