"""
Sparse backend for larger meshes.

Lower-triangle entries are collected as COO triplets, converted to CSC
(duplicates are summed, which is the assembly operation), mirrored to the
full symmetric matrix and solved with ``scipy.sparse.linalg.spsolve``.

Prescribed values are recorded by ``set_boundary_condition`` and eliminated
in one pass before solving, with the same result as the dense backend:
row and column i zeroed except the diagonal, the column times v lifted
to the right-hand side, f_i = v * K[i, i]. If a DOF is prescribed twice the
last value wins.
"""

import logging
import warnings

import numpy as np
from scipy.sparse import coo_matrix, diags, tril
from scipy.sparse.linalg import MatrixRankWarning, spsolve

from ..config import DEFAULT_EPS
from ..errors import NumericError
from .base import Solver

log = logging.getLogger(__name__)


class SparseSolver(Solver):
    """
    Parameters
    ----------
    size : int
    eps : float, optional
    nnz_hint : int, optional
        Expected number of stored lower-triangle entries, logged only.
    """

    name = "sparse"

    def __init__(self, size, eps=DEFAULT_EPS, nnz_hint=0):
        super().__init__(size, eps)
        self.nnz_hint = nnz_hint
        self._rows = []
        self._cols = []
        self._vals = []
        self.prescribed = {}

    def add_matrix(self, i, j, value):
        if i >= j:
            self._rows.append(np.array([i], dtype=np.int64))
            self._cols.append(np.array([j], dtype=np.int64))
            self._vals.append(np.array([value], dtype=np.float64))

    def add_local(self, dofs, K_local):
        dofs = np.asarray(dofs, dtype=np.int64)
        rows, cols = np.meshgrid(dofs, dofs, indexing="ij")
        lower = rows >= cols
        self._rows.append(rows[lower])
        self._cols.append(cols[lower])
        self._vals.append(np.asarray(K_local, dtype=np.float64)[lower])

    def matrix(self):
        """Full symmetric K in CSC format."""
        if self._rows:
            rows = np.concatenate(self._rows)
            cols = np.concatenate(self._cols)
            vals = np.concatenate(self._vals)
        else:
            rows = cols = np.empty(0, dtype=np.int64)
            vals = np.empty(0)
        lower = coo_matrix((vals, (rows, cols)), shape=(self.size, self.size)).tocsc()
        return (lower + tril(lower, k=-1).T).tocsc()

    def set_boundary_condition(self, i, value):
        self.prescribed[int(i)] = float(value)

    def _eliminate(self, K, f):
        dofs = np.fromiter(self.prescribed.keys(), dtype=np.int64)
        values = np.fromiter(self.prescribed.values(), dtype=np.float64)
        diagonal = K.diagonal()

        f = f - K[:, dofs] @ values
        keep = np.ones(self.size)
        keep[dofs] = 0.0
        K = diags(keep) @ K @ diags(keep) + diags(diagonal * (1.0 - keep))
        f[dofs] = values * diagonal[dofs]
        return K.tocsc(), f

    def solve(self):
        """
        Sparse direct solve of K u = f.

        Raises
        ------
        NumericError
            "a matrix is not positive semi-definite" if K has a
            non-positive diagonal entry, "matrix is near singular" if the
            factorization produces non-finite values.
        """
        K = self.matrix()
        f = self.f
        if self.prescribed:
            K, f = self._eliminate(K, f)
        log.debug("sparse solve, order %d, %d stored entries (estimate %d)",
                  self.size, K.nnz, self.nnz_hint)

        if np.any(K.diagonal() <= 0.0):
            raise NumericError("a matrix is not positive semi-definite")
        with warnings.catch_warnings():
            warnings.simplefilter("error", MatrixRankWarning)
            try:
                u = spsolve(K, f)
            except MatrixRankWarning:
                raise NumericError("matrix is near singular") from None
        if not np.all(np.isfinite(u)):
            raise NumericError("matrix is near singular")
        return np.asarray(u, dtype=np.float64)
