"""
Common interface of the linear system backends.

A solver owns the global stiffness matrix K and load vector f of one
analysis. It is filled by the assembler (matrix entries, load entries,
prescribed values), factorized once by ``solve`` and then discarded.

Only the lower triangle (i >= j) of K is stored; the upper triangle is
implied by symmetry. Callers may pass both halves, entries with i < j are
ignored.
"""

from abc import ABC, abstractmethod

import numpy as np


class Solver(ABC):
    """
    Symmetric linear system K u = f.

    Parameters
    ----------
    size : int
        Order of the system (number of nodes times DOFs per node).
    eps : float
        Zero threshold used by the singularity check.
    """

    name = "base"

    def __init__(self, size, eps):
        self.size = int(size)
        self.eps = eps
        self.f = np.zeros(self.size)

    @abstractmethod
    def add_matrix(self, i, j, value):
        """K[i, j] += value, stored only if i >= j."""

    def add_local(self, dofs, K_local):
        """
        Scatter a local matrix.

        Parameters
        ----------
        dofs : ndarray of int, shape (n,)
            Global DOF of each local row/column.
        K_local : ndarray, shape (n, n)
        """
        for a, i in enumerate(dofs):
            for b, j in enumerate(dofs):
                self.add_matrix(i, j, K_local[a, b])

    def add_vector(self, i, value):
        self.f[i] += value

    @abstractmethod
    def set_boundary_condition(self, i, value):
        """Enforce u[i] = value, keeping K symmetric."""

    @abstractmethod
    def solve(self):
        """Factorize K and return u."""
