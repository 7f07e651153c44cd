"""Linear system backend tests (dense Cholesky and sparse direct)."""

import numpy as np
import pytest

from statfem.errors import ConfigError, NumericError
from statfem.mesh import rectangle_mesh
from statfem.solvers import DenseSolver, SparseSolver, create_solver

BACKENDS = [DenseSolver, SparseSolver]


def _spd(n, seed=0):
    rng = np.random.default_rng(seed)
    a = rng.normal(size=(n, n))
    return a @ a.T + n * np.eye(n)


def _fill(solver, K, f):
    n = len(f)
    for i in range(n):
        for j in range(n):
            solver.add_matrix(i, j, K[i, j])
        solver.add_vector(i, f[i])


@pytest.mark.parametrize("backend", BACKENDS)
class TestSolve:

    def test_matches_numpy(self, backend):
        K, f = _spd(6), np.arange(1.0, 7.0)
        solver = backend(6)
        _fill(solver, K, f)
        np.testing.assert_allclose(solver.solve(), np.linalg.solve(K, f), rtol=1e-10)

    def test_local_scatter_sums_overlaps(self, backend):
        # three springs in a chain, node 0 fixed: u = [0, 1, 2, 3] for unit load at the end
        spring = np.array([[1.0, -1.0], [-1.0, 1.0]])
        solver = backend(4)
        for e in range(3):
            solver.add_local([e, e + 1], spring)
        solver.add_vector(3, 1.0)
        solver.set_boundary_condition(0, 0.0)
        np.testing.assert_allclose(solver.solve(), [0.0, 1.0, 2.0, 3.0], atol=1e-12)

    def test_prescribed_value_is_exact(self, backend):
        K, f = _spd(5, seed=1), np.ones(5)
        solver = backend(5)
        _fill(solver, K, f)
        solver.set_boundary_condition(2, 0.5)
        u = solver.solve()
        assert u[2] == pytest.approx(0.5, abs=1e-14)
        # remaining equations hold with u[2] moved to the right-hand side
        free = [0, 1, 3, 4]
        expected = np.linalg.solve(K[np.ix_(free, free)], f[free] - K[free, 2] * 0.5)
        np.testing.assert_allclose(u[free], expected, rtol=1e-10)

    def test_last_prescription_wins(self, backend):
        K, f = _spd(3, seed=2), np.zeros(3)
        solver = backend(3)
        _fill(solver, K, f)
        solver.set_boundary_condition(1, 0.2)
        solver.set_boundary_condition(1, -0.7)
        assert solver.solve()[1] == pytest.approx(-0.7)

    def test_upper_triangle_is_ignored(self, backend):
        solver = backend(2)
        solver.add_matrix(0, 0, 2.0)
        solver.add_matrix(1, 1, 2.0)
        solver.add_matrix(0, 1, 100.0)
        solver.add_matrix(1, 0, 1.0)
        solver.add_vector(0, 3.0)
        solver.add_vector(1, 3.0)
        np.testing.assert_allclose(solver.solve(), [1.0, 1.0])


class TestDense:

    def test_matrix_is_symmetric(self):
        solver = DenseSolver(3)
        solver.add_local([0, 2], np.array([[2.0, -1.0], [-1.0, 2.0]]))
        np.testing.assert_allclose(solver.matrix(), [[2, 0, -1], [0, 0, 0], [-1, 0, 2]])

    def test_boundary_condition_keeps_symmetry(self):
        solver = DenseSolver(3)
        _fill(solver, _spd(3), np.ones(3))
        solver.set_boundary_condition(1, 1.0)
        K = solver.matrix()
        np.testing.assert_allclose(K, K.T)
        assert not K[1, [0, 2]].any()

    def test_not_positive_definite(self):
        solver = DenseSolver(2)
        _fill(solver, np.array([[1.0, 2.0], [2.0, 1.0]]), np.ones(2))
        with pytest.raises(NumericError, match="not positive semi-definite"):
            solver.solve()

    def test_unconstrained_structure(self):
        solver = DenseSolver(2)
        solver.add_local([0, 1], np.array([[1.0, -1.0], [-1.0, 1.0]]))
        with pytest.raises(NumericError):
            solver.solve()

    def test_near_singular(self):
        solver = DenseSolver(2, eps=1e-10)
        _fill(solver, np.diag([1.0, 1e-24]), np.ones(2))
        with pytest.raises(NumericError, match="near singular"):
            solver.solve()


class TestSparse:

    def test_same_matrix_as_dense(self):
        rng = np.random.default_rng(3)
        dense, sparse = DenseSolver(6), SparseSolver(6)
        for dofs in ([0, 1, 2], [2, 3, 4], [4, 5, 0]):
            k = rng.normal(size=(3, 3))
            k = k + k.T
            dense.add_local(dofs, k)
            sparse.add_local(dofs, k)
        np.testing.assert_allclose(sparse.matrix().toarray(), dense.matrix())

    def test_non_positive_diagonal(self):
        solver = SparseSolver(2)
        _fill(solver, np.array([[1.0, 0.0], [0.0, -1.0]]), np.ones(2))
        with pytest.raises(NumericError, match="not positive semi-definite"):
            solver.solve()

    def test_singular(self):
        solver = SparseSolver(2)
        _fill(solver, np.array([[1.0, 1.0], [1.0, 1.0]]), np.ones(2))
        with pytest.raises(NumericError, match="near singular"):
            solver.solve()


class TestFactory:

    def test_sizes(self):
        mesh = rectangle_mesh(1.0, 1.0, 2, 2)
        mesh.create_mesh_map()
        dense = create_solver("dense", mesh)
        sparse = create_solver("sparse", mesh)
        assert isinstance(dense, DenseSolver) and dense.size == 18
        assert isinstance(sparse, SparseSolver) and sparse.size == 18
        assert sparse.nnz_hint == mesh.nnz * 4

    def test_unknown(self):
        with pytest.raises(ConfigError, match="unknown solver"):
            create_solver("cg", rectangle_mesh(1.0, 1.0, 1, 1))
