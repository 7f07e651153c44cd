"""Element kernel tests.

Shape functions, stiffness matrices (symmetry, definiteness, rigid body
modes) and nodal strain/stress recovery for every element type.
"""

import numpy as np
import pytest

from statfem.elements import (
    D_matrix_3d,
    D_matrix_plane_stress,
    FeType,
    FiniteElementParameters,
    create_element,
    create_shape,
)
from statfem.elements.shape import Shape1d2, Shape2d3, Shape2d4, Shape3d4, Shape3d8
from statfem.errors import ConfigError, NumericError

E, NU, T = 1000.0, 0.25, 0.1

BAR = np.array([[0.5], [2.5]])
TRI = np.array([[0.0, 0.0], [2.0, 0.5], [0.5, 1.5]])
QUAD = np.array([[0.0, 0.0], [2.0, 0.0], [2.2, 1.0], [0.1, 1.2]])
TET = np.array([[0.0, 0.0, 0.0], [1.0, 0.1, 0.0], [0.2, 1.0, 0.1], [0.1, 0.2, 1.3]])
HEX = np.array([[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
                [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]], dtype=float) * [2.0, 1.0, 1.5]
SHELL_TRI = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.5], [0.0, 1.0, 0.0]])
SHELL_QUAD = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 0.0, 1.0], [0.0, 0.0, 1.0]])

CONTINUUM = [
    (FeType.BAR2, BAR, 1),
    (FeType.TRI3, TRI, 3),
    (FeType.QUAD4, QUAD, 3),
    (FeType.TET4, TET, 6),
    (FeType.HEX8, HEX, 6),
]


def _params():
    return FiniteElementParameters(young_modulus=E, poisson_ratio=NU, thickness=T)


def _translation(n_nodes, dof, k):
    u = np.zeros(n_nodes * dof)
    u[k::dof] = 1.0
    return u


class TestShapeFunctions:

    @pytest.mark.parametrize("cls, x", [
        (Shape1d2, BAR), (Shape2d3, TRI), (Shape2d4, QUAD), (Shape3d4, TET), (Shape3d8, HEX),
    ])
    def test_partition_of_unity(self, cls, x):
        sf = cls(x)
        for i in range(sf.n_points):
            assert np.isclose(np.sum(sf.N(i)), 1.0)
            np.testing.assert_allclose(np.sum(sf.dN_dnat(i), axis=1), 0.0, atol=1e-14)

    @pytest.mark.parametrize("cls, x", [
        (Shape1d2, BAR), (Shape2d3, TRI), (Shape2d4, QUAD), (Shape3d4, TET), (Shape3d8, HEX),
    ])
    def test_nodal_derivatives_reproduce_linear_fields(self, cls, x):
        sf = cls(x)
        dim = x.shape[1]
        for i in range(sf.size):
            # d(x_j)/d(x_k) = delta_jk
            np.testing.assert_allclose(sf.dN_dphys(i) @ x, np.eye(dim), atol=1e-12)

    @pytest.mark.parametrize("cls, x", [(Shape3d4, TET), (Shape3d8, HEX), (Shape2d4, QUAD)])
    def test_small_element(self, cls, x):
        # edge lengths of a few 1e-4 still give well-conditioned coefficients
        x = x * 1e-4
        sf = cls(x)
        dim = x.shape[1]
        for i in range(sf.size):
            np.testing.assert_allclose(sf.dN_dphys(i) @ x, np.eye(dim), atol=1e-9)

    def test_quad_cross_term_depends_on_node(self):
        sf = Shape2d4(QUAD)
        assert not np.allclose(sf.dN_dphys(0), sf.dN_dphys(2))

    def test_scalar_accessors(self):
        sf = Shape2d4(QUAD)
        assert sf.shape(1, 2) == sf.N(1)[2]
        assert sf.shape_dxi(0, 3) == sf.dN_dnat(0)[0, 3]
        assert sf.shape_deta(0, 3) == sf.dN_dnat(0)[1, 3]
        assert sf.shape_dx(2, 1) == sf.dN_dphys(2)[0, 1]
        assert sf.shape_dy(2, 1) == sf.dN_dphys(2)[1, 1]
        assert len(sf.xi) == len(sf.eta) == sf.n_points == 4
        assert sf.psi is None

    def test_wrong_node_count(self):
        with pytest.raises(ValueError):
            Shape2d3(QUAD)

    def test_unknown_type(self):
        with pytest.raises(ConfigError):
            create_shape("fe2d6", TRI)


class TestElasticMatrices:

    def test_plane_stress(self):
        D = D_matrix_plane_stress(E, NU)
        f = E / (1.0 - NU ** 2)
        np.testing.assert_allclose(D, f * np.array([[1, NU, 0], [NU, 1, 0], [0, 0, (1 - NU) / 2]]))

    def test_3d(self):
        D = D_matrix_3d(E, NU)
        lam = E * NU / ((1 + NU) * (1 - 2 * NU))
        G = E / (2 * (1 + NU))
        assert np.isclose(D[0, 0], lam + 2 * G)
        assert np.isclose(D[0, 1], lam)
        assert np.isclose(D[5, 5], G)
        np.testing.assert_allclose(D, D.T)


class TestStiffness:

    @pytest.mark.parametrize("fe_type, x, n_rigid", CONTINUUM)
    def test_symmetric_positive_semidefinite(self, fe_type, x, n_rigid):
        K = create_element(fe_type, x, _params()).create()
        np.testing.assert_allclose(K, K.T, atol=1e-10 * np.abs(K).max())
        eig = np.linalg.eigvalsh(K)
        assert eig.min() > -1e-10 * eig.max()
        # one zero eigenvalue per rigid body mode
        assert np.sum(eig < 1e-8 * eig.max()) == n_rigid

    @pytest.mark.parametrize("fe_type, x, n_rigid", CONTINUUM)
    def test_translations_are_free(self, fe_type, x, n_rigid):
        K = create_element(fe_type, x, _params()).create()
        n, dim = x.shape
        for k in range(dim):
            np.testing.assert_allclose(K @ _translation(n, dim, k), 0.0,
                                       atol=1e-10 * np.abs(K).max())

    def test_bar_closed_form(self):
        K = create_element(FeType.BAR2, BAR, _params()).create()
        np.testing.assert_allclose(K, E * T / 2.0 * np.array([[1, -1], [-1, 1]]))

    def test_plane_rotation_is_free(self):
        for fe_type, x in ((FeType.TRI3, TRI), (FeType.QUAD4, QUAD)):
            K = create_element(fe_type, x, _params()).create()
            u = np.column_stack([-x[:, 1], x[:, 0]]).ravel()
            np.testing.assert_allclose(K @ u, 0.0, atol=1e-10 * np.abs(K).max())

    def test_thickness_scales_plane_stiffness(self):
        K1 = create_element(FeType.QUAD4, QUAD, _params()).create()
        K2 = create_element(FeType.QUAD4, QUAD, FiniteElementParameters(E, NU, 2 * T)).create()
        np.testing.assert_allclose(K2, 2.0 * K1)

    def test_solids_ignore_thickness(self):
        K1 = create_element(FeType.HEX8, HEX, _params()).create()
        K2 = create_element(FeType.HEX8, HEX, FiniteElementParameters(E, NU, 7.0)).create()
        np.testing.assert_allclose(K2, K1)

    def test_degenerate_element(self):
        with pytest.raises(NumericError, match="bad finite element"):
            create_element(FeType.TRI3, [[0, 0], [1, 1], [2, 2]], _params())


class TestShellStiffness:

    @pytest.mark.parametrize("x", [SHELL_TRI, SHELL_QUAD])
    def test_symmetric_positive_semidefinite(self, x):
        K = create_element(FeType.SHELL_QUAD4 if len(x) == 4 else FeType.SHELL_TRI3,
                           x, _params()).create()
        assert K.shape == (6 * len(x), 6 * len(x))
        np.testing.assert_allclose(K, K.T, atol=1e-10 * np.abs(K).max())
        eig = np.linalg.eigvalsh(K)
        assert eig.min() > -1e-10 * eig.max()

    @pytest.mark.parametrize("x", [SHELL_TRI, SHELL_QUAD])
    def test_translations_are_free(self, x):
        fe_type = FeType.SHELL_QUAD4 if len(x) == 4 else FeType.SHELL_TRI3
        K = create_element(fe_type, x, _params()).create()
        for k in range(3):
            np.testing.assert_allclose(K @ _translation(len(x), 6, k), 0.0,
                                       atol=1e-10 * np.abs(K).max())

    def test_drilling_stiffness(self):
        x = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [1.0, 1.0, 0.0], [0.0, 1.0, 0.0]])
        el = create_element(FeType.SHELL_QUAD4, x, _params(), drilling_factor=1e-3)
        K = el.create()
        # element in the xy-plane: theta_z is the global DOF 5 of every node
        drill = np.diag(K)[5::6]
        others = np.delete(np.diag(K), np.arange(5, 24, 6))
        np.testing.assert_allclose(drill, 1e-3 * others.max())


class TestRecovery:

    def test_bar(self):
        el = create_element(FeType.BAR2, BAR, _params())
        res = el.calculate([0.0, 0.02])
        np.testing.assert_allclose(res, [[0.01, 0.01], [10.0, 10.0]])

    @pytest.mark.parametrize("fe_type, x", [(FeType.TRI3, TRI), (FeType.QUAD4, QUAD)])
    def test_plane_uniform_strain(self, fe_type, x):
        eps = 1e-3
        u = np.column_stack([eps * x[:, 0], np.zeros(len(x))]).ravel()
        res = create_element(fe_type, x, _params()).calculate(u)
        assert res.shape == (6, len(x))
        D = D_matrix_plane_stress(E, NU)
        np.testing.assert_allclose(res[0], eps)
        np.testing.assert_allclose(res[1:3], 0.0, atol=1e-15)
        np.testing.assert_allclose(res[3], D[0, 0] * eps)
        np.testing.assert_allclose(res[4], D[1, 0] * eps)

    @pytest.mark.parametrize("fe_type, x", [(FeType.TET4, TET), (FeType.HEX8, HEX)])
    def test_solid_shear_rows(self, fe_type, x):
        gamma = 2e-3
        # u_x = gamma * y: engineering shear strain gamma_xy only
        u = np.column_stack([gamma * x[:, 1], np.zeros(len(x)), np.zeros(len(x))]).ravel()
        res = create_element(fe_type, x, _params()).calculate(u)
        assert res.shape == (12, len(x))
        G = E / (2 * (1 + NU))
        np.testing.assert_allclose(res[3], gamma)
        np.testing.assert_allclose(res[[0, 1, 2, 4, 5]], 0.0, atol=1e-14)
        np.testing.assert_allclose(res[9], G * gamma)
        np.testing.assert_allclose(res[[6, 7, 8, 10, 11]], 0.0, atol=1e-10)

    def test_solid_xz_and_yz_rows(self):
        gamma = 1e-3
        # u_z = gamma * x gives Exz, u_z = gamma * y gives Eyz
        u = np.zeros((8, 3))
        u[:, 2] = gamma * HEX[:, 0]
        res = create_element(FeType.HEX8, HEX, _params()).calculate(u.ravel())
        np.testing.assert_allclose(res[4], gamma)
        np.testing.assert_allclose(res[5], 0.0, atol=1e-14)
        u[:, 2] = gamma * HEX[:, 1]
        res = create_element(FeType.HEX8, HEX, _params()).calculate(u.ravel())
        np.testing.assert_allclose(res[5], gamma)
        np.testing.assert_allclose(res[4], 0.0, atol=1e-14)

    def test_shell_membrane_in_global_axes(self):
        eps = 1e-3
        # element in the xz-plane stretched along x
        u = np.zeros((4, 6))
        u[:, 0] = eps * SHELL_QUAD[:, 0]
        res = create_element(FeType.SHELL_QUAD4, SHELL_QUAD, _params()).calculate(u.ravel())
        assert res.shape == (12, 4)
        D = D_matrix_plane_stress(E, NU)
        np.testing.assert_allclose(res[0], eps)
        np.testing.assert_allclose(res[[1, 3, 4, 5]], 0.0, atol=1e-14)
        np.testing.assert_allclose(res[6], D[0, 0] * eps)
        # in-plane transverse direction of this element is global z
        np.testing.assert_allclose(res[8], D[1, 0] * eps)
        np.testing.assert_allclose(res[7], 0.0, atol=1e-10)
