"""
Shape functions of the linear isoparametric elements.

Each class bundles, for one element instance:
    - nodal coordinates x, shape (size, dim)
    - Gauss points (xi, eta, psi) and weights w
    - shape values N_j and natural derivatives dN_j/dxi, dN_j/deta,
      dN_j/dpsi at every integration point
    - physical derivatives dN_j/dx, dN_j/dy, dN_j/dz at every node

Physical derivatives at the nodes are used for stress recovery. They come
from the interpolation polynomial through the nodal values: with a monomial
basis phi (for example {1, x, y, xy} for Quad4) and P[i, j] = phi_j(x_i),
the coefficients C = P^-1 give N_j = sum_k C[k, j] phi_k, which is then
differentiated analytically. For simplices the derivatives are constant;
Quad4 and Hex8 include cross terms, so the derivative at node i depends
on that node's coordinates.

Node numbering of the reference elements:
    Bar2:  -1, +1
    Tri3:  (0,0), (1,0), (0,1)
    Quad4: (-1,-1), (1,-1), (1,1), (-1,1)
    Tet4:  (0,0,0), (1,0,0), (0,1,0), (0,0,1)
    Hex8:  Quad4 order at psi = -1, then at psi = +1
"""

import numpy as np

from . import quadrature
from .geometry import shape_coefficients


class ShapeFunction:
    """Common storage and accessors.

    Subclasses define ``rule`` (a quadrature function), ``natural_dim``,
    and the three hooks ``_basis``, ``_values`` and ``_natural_derivatives``,
    plus ``_physical_derivatives`` for the nodal derivatives.

    Parameters
    ----------
    x : array_like, shape (size, dim)
        Nodal coordinates.

    Raises
    ------
    NumericError
        If the nodes do not define a valid element.
    """

    size = 0
    natural_dim = 0
    rule = None

    def __init__(self, x):
        self.x = np.array(x, dtype=np.float64, ndmin=2)
        if self.x.shape[0] != self.size:
            raise ValueError(
                f"{type(self).__name__} needs {self.size} nodes, got {self.x.shape[0]}"
            )
        p = np.array([self._basis(node) for node in self.x])
        self.c = shape_coefficients(p)
        points, self.w = type(self).rule()
        self.points = points
        self._n = np.array([self._values(pt) for pt in points])
        self._dn = np.array([self._natural_derivatives(pt) for pt in points])
        self._dphys = np.array([self._physical_derivatives(i) for i in range(self.size)])

    # --- natural coordinates of the integration points ---

    @property
    def xi(self):
        return self.points[:, 0]

    @property
    def eta(self):
        return self.points[:, 1] if self.natural_dim > 1 else None

    @property
    def psi(self):
        return self.points[:, 2] if self.natural_dim > 2 else None

    @property
    def n_points(self):
        return len(self.w)

    # --- vectorised access ---

    def N(self, i):
        """Shape values at integration point i, shape (size,)."""
        return self._n[i]

    def dN_dnat(self, i):
        """Natural derivatives at integration point i, shape (natural_dim, size)."""
        return self._dn[i]

    def dN_dphys(self, i):
        """Physical derivatives at node i, shape (natural_dim, size)."""
        return self._dphys[i]

    # --- scalar access: i = integration point (or node), j = shape function ---

    def shape(self, i, j):
        return self._n[i, j]

    def shape_dxi(self, i, j):
        return self._dn[i, 0, j]

    def shape_deta(self, i, j):
        return self._dn[i, 1, j]

    def shape_dpsi(self, i, j):
        return self._dn[i, 2, j]

    def shape_dx(self, i, j):
        return self._dphys[i, 0, j]

    def shape_dy(self, i, j):
        return self._dphys[i, 1, j]

    def shape_dz(self, i, j):
        return self._dphys[i, 2, j]

    # --- hooks ---

    def _basis(self, node):
        raise NotImplementedError

    def _values(self, pt):
        raise NotImplementedError

    def _natural_derivatives(self, pt):
        raise NotImplementedError

    def _physical_derivatives(self, i):
        raise NotImplementedError


class Shape1d2(ShapeFunction):
    """Two-node bar."""

    size = 2
    natural_dim = 1
    rule = staticmethod(quadrature.gauss_line_3pt)

    def _basis(self, node):
        return [1.0, node[0]]

    def _values(self, pt):
        xi = pt[0]
        return [0.5 * (1.0 - xi), 0.5 * (1.0 + xi)]

    def _natural_derivatives(self, pt):
        return [[-0.5, 0.5]]

    def _physical_derivatives(self, i):
        return self.c[1:2]


class Shape2d3(ShapeFunction):
    """Three-node triangle."""

    size = 3
    natural_dim = 2
    rule = staticmethod(quadrature.gauss_triangle_midedge)

    def _basis(self, node):
        return [1.0, node[0], node[1]]

    def _values(self, pt):
        xi, eta = pt
        return [1.0 - xi - eta, xi, eta]

    def _natural_derivatives(self, pt):
        return [[-1.0, 1.0, 0.0],
                [-1.0, 0.0, 1.0]]

    def _physical_derivatives(self, i):
        return self.c[1:3]


class Shape2d4(ShapeFunction):
    """Four-node quadrilateral."""

    size = 4
    natural_dim = 2
    rule = staticmethod(quadrature.gauss_quad_2x2)

    _XI = np.array([-1.0, 1.0, 1.0, -1.0])
    _ETA = np.array([-1.0, -1.0, 1.0, 1.0])

    def _basis(self, node):
        return [1.0, node[0], node[1], node[0] * node[1]]

    def _values(self, pt):
        xi, eta = pt
        return 0.25 * (1.0 + self._XI * xi) * (1.0 + self._ETA * eta)

    def _natural_derivatives(self, pt):
        xi, eta = pt
        return [0.25 * self._XI * (1.0 + self._ETA * eta),
                0.25 * self._ETA * (1.0 + self._XI * xi)]

    def _physical_derivatives(self, i):
        x, y = self.x[i, 0], self.x[i, 1]
        c = self.c
        return [c[1] + c[3] * y,
                c[2] + c[3] * x]


class Shape3d4(ShapeFunction):
    """Four-node tetrahedron."""

    size = 4
    natural_dim = 3
    rule = staticmethod(quadrature.gauss_tet_5pt)

    def _basis(self, node):
        return [1.0, node[0], node[1], node[2]]

    def _values(self, pt):
        xi, eta, psi = pt
        return [1.0 - xi - eta - psi, xi, eta, psi]

    def _natural_derivatives(self, pt):
        return [[-1.0, 1.0, 0.0, 0.0],
                [-1.0, 0.0, 1.0, 0.0],
                [-1.0, 0.0, 0.0, 1.0]]

    def _physical_derivatives(self, i):
        return self.c[1:4]


class Shape3d8(ShapeFunction):
    """Eight-node hexahedron."""

    size = 8
    natural_dim = 3
    rule = staticmethod(quadrature.gauss_hex_2x2x2)

    _XI = np.array([-1.0, 1.0, 1.0, -1.0, -1.0, 1.0, 1.0, -1.0])
    _ETA = np.array([-1.0, -1.0, 1.0, 1.0, -1.0, -1.0, 1.0, 1.0])
    _PSI = np.array([-1.0, -1.0, -1.0, -1.0, 1.0, 1.0, 1.0, 1.0])

    def _basis(self, node):
        x, y, z = node
        return [1.0, x, y, z, x * y, x * z, y * z, x * y * z]

    def _values(self, pt):
        xi, eta, psi = pt
        return 0.125 * (1.0 + self._XI * xi) * (1.0 + self._ETA * eta) \
            * (1.0 + self._PSI * psi)

    def _natural_derivatives(self, pt):
        xi, eta, psi = pt
        fx = 1.0 + self._XI * xi
        fy = 1.0 + self._ETA * eta
        fz = 1.0 + self._PSI * psi
        return [0.125 * self._XI * fy * fz,
                0.125 * self._ETA * fx * fz,
                0.125 * self._PSI * fx * fy]

    def _physical_derivatives(self, i):
        x, y, z = self.x[i]
        c = self.c
        return [c[1] + c[4] * y + c[5] * z + c[7] * y * z,
                c[2] + c[4] * x + c[6] * z + c[7] * x * z,
                c[3] + c[5] * x + c[6] * y + c[7] * x * y]
