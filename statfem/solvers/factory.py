"""
Backend selection.
"""

from ..config import DEFAULT_EPS, SOLVERS
from ..errors import ConfigError
from .dense import DenseSolver
from .sparse import SparseSolver


def create_solver(name, mesh, eps=DEFAULT_EPS):
    """
    Build an empty backend sized for ``mesh``.

    Parameters
    ----------
    name : str
        'dense' or 'sparse'.
    mesh : Mesh
        Gives the order (n_nodes * dof); the mesh map, if built, gives the
        sparse nonzero estimate.
    eps : float, optional
    """
    size = mesh.n_nodes * mesh.dof
    if name == "dense":
        return DenseSolver(size, eps)
    if name == "sparse":
        # each node pair (i, j >= i) is a dof x dof block
        nnz_hint = mesh.nnz * mesh.dof * mesh.dof
        return SparseSolver(size, eps, nnz_hint=nnz_hint)
    raise ConfigError(f"unknown solver '{name}', expected one of {SOLVERS}")
