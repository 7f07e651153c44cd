"""
Gauss quadrature rules for the reference elements.

Every rule returns ``(points, weights)`` where ``points`` has one row per
integration point and one column per natural coordinate (xi, eta, psi).

Reference domains:
    - Line:          xi in [-1, 1]
    - Triangle:      (0,0), (1,0), (0,1), area 1/2
    - Quadrilateral: [-1, 1] x [-1, 1]
    - Tetrahedron:   (0,0,0), (1,0,0), (0,1,0), (0,0,1), volume 1/6
    - Hexahedron:    [-1, 1]^3

Weights include the measure of the reference domain, so that

    integral of f over the reference element = sum_i w_i * f(p_i)

References:
    - Zienkiewicz, O.C., Taylor, R.L. "The Finite Element Method",
      Vol. 1, 5th ed., Tables 9.2 and 9.3.
"""

import numpy as np


GAUSS_2PT = 1.0 / np.sqrt(3.0)


def gauss_line_3pt():
    """
    3-point rule on [-1, 1]: Gauss-Legendre weights placed at +-sqrt(1/3)
    and 0. The weights sum to 2, so it is exact only up to degree 1, which
    covers the constant integrand of a two-node bar.

    Returns
    -------
    points : ndarray, shape (3, 1)
        xi = -sqrt(1/3), 0, +sqrt(1/3).
    weights : ndarray, shape (3,)
        5/9, 8/9, 5/9.
    """
    points = np.array([[-GAUSS_2PT], [0.0], [GAUSS_2PT]])
    weights = np.array([5.0 / 9.0, 8.0 / 9.0, 5.0 / 9.0])
    return points, weights


def gauss_triangle_midedge():
    """
    3-point rule at the edge midpoints of the reference triangle
    (exact for degree 2).

    Points (xi, eta): (0, 1/2), (1/2, 0), (1/2, 1/2); weight 1/6 each.

    Returns
    -------
    points : ndarray, shape (3, 2)
    weights : ndarray, shape (3,)
    """
    points = np.array([
        [0.0, 0.5],
        [0.5, 0.0],
        [0.5, 0.5],
    ])
    weights = np.full(3, 1.0 / 6.0)
    return points, weights


def gauss_quad_2x2():
    """
    2x2 tensor-product Gauss rule on [-1, 1]^2 (exact for bicubics).

    Point order: eta varies fastest.

    Returns
    -------
    points : ndarray, shape (4, 2)
    weights : ndarray, shape (4,)
        All equal to 1.
    """
    a = GAUSS_2PT
    points = np.array([
        [-a, -a],
        [-a, a],
        [a, -a],
        [a, a],
    ])
    weights = np.ones(4)
    return points, weights


def gauss_tet_5pt():
    """
    5-point rule for the reference tetrahedron (exact for degree 3).

    One point at the centroid with negative weight -2/15 (= -4/30) and four
    points at (1/2, 1/6, 1/6) and permutations with weight 3/40 (= 9/120).

    Returns
    -------
    points : ndarray, shape (5, 3)
    weights : ndarray, shape (5,)
        Sum equals 1/6, the reference volume.
    """
    s = 1.0 / 6.0
    points = np.array([
        [0.25, 0.25, 0.25],
        [0.5, s, s],
        [s, 0.5, s],
        [s, s, 0.5],
        [s, s, s],
    ])
    weights = np.array([-2.0 / 15.0, 0.075, 0.075, 0.075, 0.075])
    return points, weights


def gauss_hex_2x2x2():
    """
    2x2x2 tensor-product Gauss rule on [-1, 1]^3.

    Point order: psi varies fastest, then eta, then xi.

    Returns
    -------
    points : ndarray, shape (8, 3)
    weights : ndarray, shape (8,)
        All equal to 1.
    """
    a = GAUSS_2PT
    points = np.array([
        [xi, eta, psi]
        for xi in (-a, a)
        for eta in (-a, a)
        for psi in (-a, a)
    ])
    weights = np.ones(8)
    return points, weights
