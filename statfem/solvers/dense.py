"""
Dense Cholesky backend.

K is kept as a full numpy array of which only the lower triangle is
written. Prescribed values are enforced by elimination:

    f_j  -= K[j, i] * v      for every j != i
    K[i, :] = K[:, i] = 0    except K[i, i]
    f_i   = v * K[i, i]

which keeps K symmetric and gives u_i = v exactly. The factorization is
``scipy.linalg.cho_factor`` on the lower triangle.
"""

import logging

import numpy as np
from scipy.linalg import LinAlgError, cho_factor, cho_solve

from ..config import DEFAULT_EPS
from ..errors import NumericError
from .base import Solver

log = logging.getLogger(__name__)


class DenseSolver(Solver):
    """Reference backend for small and medium problems."""

    name = "dense"

    def __init__(self, size, eps=DEFAULT_EPS):
        super().__init__(size, eps)
        self.K = np.zeros((self.size, self.size))

    def add_matrix(self, i, j, value):
        if i >= j:
            self.K[i, j] += value

    def add_local(self, dofs, K_local):
        dofs = np.asarray(dofs, dtype=np.int64)
        rows, cols = np.meshgrid(dofs, dofs, indexing="ij")
        lower = rows >= cols
        np.add.at(self.K, (rows[lower], cols[lower]), np.asarray(K_local)[lower])

    def matrix(self):
        """Full symmetric K as a new array."""
        return np.tril(self.K) + np.tril(self.K, -1).T

    def set_boundary_condition(self, i, value):
        K = self.K
        # column i of the full matrix: K[i, :i] above the diagonal, K[i:, i] below
        column = np.concatenate([K[i, :i], K[i:, i]])
        column[i] = 0.0
        self.f -= column * value
        K[i, :i] = 0.0
        K[i + 1:, i] = 0.0
        self.f[i] = value * K[i, i]

    def solve(self):
        """
        Cholesky solve of K u = f.

        Raises
        ------
        NumericError
            "a matrix is not positive semi-definite" if the factorization
            fails, "matrix is near singular" if the smallest diagonal entry
            of the factor is below eps times the largest.
        """
        log.debug("dense Cholesky, order %d", self.size)
        try:
            L, lower = cho_factor(self.K, lower=True)
        except (LinAlgError, ValueError):
            raise NumericError("a matrix is not positive semi-definite") from None
        d = np.abs(np.diag(L))
        if d.size and d.min() < self.eps * d.max():
            raise NumericError("matrix is near singular")
        return cho_solve((L, lower), self.f)
