"""
Small dense linear algebra and geometric measures for single elements.

Contents:
    gauss_solve          Gauss elimination with partial pivoting
    shape_coefficients   inverse of the nodal interpolation matrix P
    volume_*             length, area and volume of element primitives
    transform_matrix     orthonormal local basis of a shell element
    expand_transform     block-diagonal expansion of that basis

Coordinates are passed as arrays with one row per node. The 1D and 2D
measures accept coordinates of any dimension, so they also measure edges
and faces of 3D meshes.
"""

import numpy as np

from ..config import SHAPE_EPS
from ..errors import NumericError


# ---------------------------------------------------------------------------
# Linear systems
# ---------------------------------------------------------------------------

def gauss_solve(a, b, eps=SHAPE_EPS):
    """
    Solve a @ x = b by Gauss elimination with partial pivoting.

    Only used for the tiny matrices built per element, where an explicit
    pivot threshold is wanted instead of LAPACK's silent handling of
    nearly singular systems.

    Parameters
    ----------
    a : ndarray, shape (n, n)
    b : ndarray, shape (n,) or (n, m)
    eps : float
        Pivots with absolute value below eps are treated as zero.

    Returns
    -------
    x : ndarray, same shape as b

    Raises
    ------
    NumericError
        If the matrix is singular to within eps.
    """
    a = np.array(a, dtype=np.float64)
    x = np.array(b, dtype=np.float64)
    n = a.shape[0]
    if a.shape != (n, n) or x.shape[0] != n:
        raise ValueError(f"incompatible shapes {a.shape} and {x.shape}")

    for k in range(n):
        p = k + int(np.argmax(np.abs(a[k:, k])))
        if abs(a[p, k]) < eps:
            raise NumericError("singular matrix in Gauss elimination")
        if p != k:
            a[[k, p]] = a[[p, k]]
            x[[k, p]] = x[[p, k]]
        factors = a[k + 1:, k] / a[k, k]
        a[k + 1:, k:] -= np.outer(factors, a[k, k:])
        x[k + 1:] -= np.multiply.outer(factors, x[k]) if x.ndim > 1 else factors * x[k]

    for k in range(n - 1, -1, -1):
        x[k] = (x[k] - a[k, k + 1:] @ x[k + 1:]) / a[k, k]
    return x


def shape_coefficients(p, eps=SHAPE_EPS):
    """
    Invert the interpolation matrix of a polynomial basis.

    ``p[i, j]`` is basis function j evaluated at node i. Column j of the
    returned matrix C holds the coefficients of shape function N_j in that
    basis, so that N_j(node_k) = delta_jk.

    The columns of P are scaled to unit maximum before elimination, so
    the pivot threshold does not depend on the size of the element. With
    P = P' D and D the diagonal of column maxima, C = D^-1 P'^-1.

    Raises
    ------
    NumericError
        "bad finite element" when the nodes do not define a valid element
        (coincident nodes, zero area or volume).
    """
    p = np.asarray(p, dtype=np.float64)
    scale = np.abs(p).max(axis=0)
    scale[scale == 0.0] = 1.0
    try:
        c = gauss_solve(p / scale, np.eye(p.shape[0]), eps)
    except NumericError:
        raise NumericError("bad finite element") from None
    return c / scale[:, None]


# ---------------------------------------------------------------------------
# Measures
# ---------------------------------------------------------------------------

def _dist(x, i, j):
    return float(np.linalg.norm(x[i] - x[j]))


def volume_1d2(x):
    """Length of a segment."""
    x = np.asarray(x, dtype=np.float64)
    return _dist(x, 0, 1)


def volume_2d3(x):
    """Area of a triangle by Heron's formula."""
    x = np.asarray(x, dtype=np.float64)
    a, b, c = _dist(x, 0, 1), _dist(x, 0, 2), _dist(x, 2, 1)
    p = 0.5 * (a + b + c)
    return float(np.sqrt(max(p * (p - a) * (p - b) * (p - c), 0.0)))


def volume_2d4(x):
    """
    Area of a quadrilateral from its sides and diagonals (Bretschneider).

    With sides a, b, c, d, diagonals e, f and semi-perimeter p:

        S = sqrt((p-a)(p-b)(p-c)(p-d) - (ac + bd + ef)(ac + bd - ef) / 4)
    """
    x = np.asarray(x, dtype=np.float64)
    a, b = _dist(x, 0, 1), _dist(x, 1, 2)
    c, d = _dist(x, 2, 3), _dist(x, 3, 0)
    e, f = _dist(x, 0, 2), _dist(x, 1, 3)
    p = 0.5 * (a + b + c + d)
    s = (p - a) * (p - b) * (p - c) * (p - d) \
        + 0.25 * (e * f + a * c + b * d) * (e * f - a * c - b * d)
    return float(np.sqrt(max(s, 0.0)))


def volume_3d4(x):
    """Volume of a tetrahedron, |det| / 6."""
    x = np.asarray(x, dtype=np.float64)
    return abs(float(np.linalg.det(x[1:4] - x[0]))) / 6.0


# Hexahedron split into six tetrahedra sharing the diagonal 1-7
_HEX_TETS = ((0, 1, 4, 7), (4, 1, 5, 7), (1, 2, 6, 7),
             (1, 5, 6, 7), (1, 2, 3, 7), (0, 3, 1, 7))


def volume_3d8(x):
    """Volume of a hexahedron as the sum of six tetrahedra."""
    x = np.asarray(x, dtype=np.float64)
    return sum(volume_3d4(x[list(tet)]) for tet in _HEX_TETS)


# ---------------------------------------------------------------------------
# Shell basis
# ---------------------------------------------------------------------------

def _unit(v):
    norm = np.linalg.norm(v)
    if norm == 0.0:
        raise NumericError("bad finite element")
    return v / norm


def transform_matrix(x):
    """
    Orthonormal local basis of a flat shell element.

    vx = normalize(x1 - x0), vz = normalize(vx cross normalize(x2 - x0)),
    vy = vz cross vx.

    Parameters
    ----------
    x : ndarray, shape (n_nodes, 3)
        Nodal coordinates; only the first three nodes are used.

    Returns
    -------
    t : ndarray, shape (3, 3)
        Rows vx, vy, vz. ``t @ v`` maps a global vector to local axes.
    """
    x = np.asarray(x, dtype=np.float64)
    vx = _unit(x[1] - x[0])
    tmp = _unit(x[2] - x[0])
    vz = _unit(np.cross(vx, tmp))
    vy = _unit(np.cross(vz, vx))
    return np.vstack([vx, vy, vz])


def expand_transform(t, size):
    """Block-diagonal matrix applying t to every consecutive triple of a vector of length size."""
    if size % 3:
        raise ValueError(f"size {size} is not a multiple of 3")
    return np.kron(np.eye(size // 3), t)
