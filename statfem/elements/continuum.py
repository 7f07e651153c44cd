"""
Continuum element kernels: bar (1D), plane stress (2D) and solid (3D).

Stiffness by Gauss quadrature over the reference element:

    K = sum_i w_i * t^p * |J_i| * B_i^T * D * B_i

with p = 1 for bars (t = cross-section area) and plane elements
(t = thickness) and p = 0 for solids.

Strain/stress recovery evaluates B at every node with the physical shape
derivatives:

    eps_n = B_n * u_e,   sigma_n = D * eps_n

and returns one column per node with rows [strains..., stresses...].

DOF ordering inside an element is interleaved per node:
    2D: [u0, v0, u1, v1, ...]
    3D: [u0, v0, w0, u1, v1, w1, ...]

Voigt order of strains and stresses:
    2D: (xx, yy, xy)
    3D: (xx, yy, zz, xy, xz, yz)
Shear components are engineering strains (gamma = 2 * eps).
"""

from dataclasses import dataclass

import numpy as np

from ..errors import NumericError


@dataclass
class FiniteElementParameters:
    """Material data of one element, evaluated at its centroid.

    Attributes
    ----------
    young_modulus : float
        Young's modulus E.
    poisson_ratio : float
        Poisson's ratio nu.
    thickness : float
        Thickness (plane elements, shells) or cross-section area (bars).
        Ignored by solids.
    """
    young_modulus: float
    poisson_ratio: float = 0.0
    thickness: float = 1.0


# ---------------------------------------------------------------------------
# Elastic matrices
# ---------------------------------------------------------------------------

def D_matrix_1d(E):
    """Uniaxial elastic matrix [E]."""
    return np.array([[E]], dtype=np.float64)


def D_matrix_plane_stress(E, nu):
    """
    Plane stress constitutive matrix.

    D = E/(1-nu^2) * [[1,  nu, 0         ],
                      [nu, 1,  0         ],
                      [0,  0,  (1-nu)/2  ]]

    Parameters
    ----------
    E : float
        Young's modulus.
    nu : float
        Poisson's ratio.

    Returns
    -------
    D : ndarray, shape (3, 3)
    """
    factor = E / (1.0 - nu * nu)
    return factor * np.array([
        [1.0, nu, 0.0],
        [nu, 1.0, 0.0],
        [0.0, 0.0, 0.5 * (1.0 - nu)],
    ])


def D_matrix_3d(E, nu):
    """
    Isotropic 3D constitutive matrix in Voigt notation.

    With d = E(1-nu)/((1+nu)(1-2nu)):
        normal block:   d on the diagonal, d*nu/(1-nu) off the diagonal
        shear block:    d*(1-2nu)/(2(1-nu)) = G on the diagonal

    Returns
    -------
    D : ndarray, shape (6, 6)
    """
    d = E * (1.0 - nu) / ((1.0 + nu) * (1.0 - 2.0 * nu))
    off = d * nu / (1.0 - nu)
    shear = d * (1.0 - 2.0 * nu) / (2.0 * (1.0 - nu))
    D = np.zeros((6, 6))
    D[:3, :3] = off
    D[[0, 1, 2], [0, 1, 2]] = d
    D[[3, 4, 5], [3, 4, 5]] = shear
    return D


def D_matrix_shear(E, nu):
    """Transverse shear matrix of a shell, G * I2 with G = E / (2(1+nu))."""
    return E / (2.0 * (1.0 + nu)) * np.eye(2)


# ---------------------------------------------------------------------------
# Strain-displacement matrices
# ---------------------------------------------------------------------------

def B_matrix_2d(dN):
    """
    Plane strain-displacement matrix from physical derivatives.

    Parameters
    ----------
    dN : ndarray, shape (2, n)
        Rows dN/dx, dN/dy.

    Returns
    -------
    B : ndarray, shape (3, 2n)
    """
    n = dN.shape[1]
    B = np.zeros((3, 2 * n))
    B[0, 0::2] = dN[0]
    B[1, 1::2] = dN[1]
    B[2, 0::2] = dN[1]
    B[2, 1::2] = dN[0]
    return B


def B_matrix_3d(dN):
    """
    Solid strain-displacement matrix from physical derivatives.

    Parameters
    ----------
    dN : ndarray, shape (3, n)
        Rows dN/dx, dN/dy, dN/dz.

    Returns
    -------
    B : ndarray, shape (6, 3n)
        Rows (xx, yy, zz, xy, xz, yz).
    """
    n = dN.shape[1]
    B = np.zeros((6, 3 * n))
    B[0, 0::3] = dN[0]
    B[1, 1::3] = dN[1]
    B[2, 2::3] = dN[2]
    B[3, 0::3] = dN[1]
    B[3, 1::3] = dN[0]
    B[4, 0::3] = dN[2]
    B[4, 2::3] = dN[0]
    B[5, 1::3] = dN[2]
    B[5, 2::3] = dN[1]
    return B


def jacobian(dN_nat, x):
    """
    Jacobian of the natural-to-physical mapping and the physical derivatives.

    Parameters
    ----------
    dN_nat : ndarray, shape (d, n)
        Natural derivatives at one integration point.
    x : ndarray, shape (n, d)
        Nodal coordinates.

    Returns
    -------
    detJ : float
    dN_phys : ndarray, shape (d, n)

    Raises
    ------
    NumericError
        If the Jacobian is singular.
    """
    J = dN_nat @ x
    detJ = float(np.linalg.det(J))
    if detJ == 0.0:
        raise NumericError("bad finite element: singular Jacobian")
    return detJ, np.linalg.solve(J, dN_nat)


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

class FiniteElement:
    """Base kernel: ``create()`` gives local K, ``calculate(u)`` nodal strain/stress."""

    dof = 1

    def __init__(self, shape, params):
        self.shape = shape
        self.params = params

    @property
    def size(self):
        return self.shape.size

    def create(self):
        raise NotImplementedError

    def calculate(self, u):
        raise NotImplementedError


class FiniteElement1D(FiniteElement):
    """Two-node bar in tension/compression."""

    dof = 1

    def elastic_matrix(self):
        return D_matrix_1d(self.params.young_modulus)

    def create(self):
        sf = self.shape
        x = sf.x[:, 0]
        J = 0.5 * (x[1] - x[0])
        if J == 0.0:
            raise NumericError("bad finite element: zero length bar")
        D = self.elastic_matrix()
        K = np.zeros((self.size, self.size))
        for i in range(sf.n_points):
            B = sf.dN_dnat(i) / J
            K += sf.w[i] * self.params.thickness * abs(J) * (B.T @ D @ B)
        return K

    def calculate(self, u):
        u = np.asarray(u, dtype=np.float64)
        res = np.zeros((2, self.size))
        E = self.params.young_modulus
        for i in range(self.size):
            strain = self.shape.dN_dphys(i)[0] @ u
            res[0, i] = strain
            res[1, i] = E * strain
        return res


class FiniteElement2D(FiniteElement):
    """Plane stress triangle or quadrilateral."""

    dof = 2

    def elastic_matrix(self):
        return D_matrix_plane_stress(self.params.young_modulus,
                                     self.params.poisson_ratio)

    def create(self):
        sf = self.shape
        D = self.elastic_matrix()
        n = self.size * self.dof
        K = np.zeros((n, n))
        for i in range(sf.n_points):
            detJ, dN = jacobian(sf.dN_dnat(i), sf.x[:, :2])
            B = B_matrix_2d(dN)
            K += sf.w[i] * self.params.thickness * abs(detJ) * (B.T @ D @ B)
        return K

    def calculate(self, u):
        u = np.asarray(u, dtype=np.float64)
        D = self.elastic_matrix()
        res = np.zeros((6, self.size))
        for i in range(self.size):
            strain = B_matrix_2d(self.shape.dN_dphys(i)) @ u
            res[:3, i] = strain
            res[3:, i] = D @ strain
        return res


class FiniteElement3D(FiniteElement):
    """Linear tetrahedron or trilinear hexahedron."""

    dof = 3

    def elastic_matrix(self):
        return D_matrix_3d(self.params.young_modulus, self.params.poisson_ratio)

    def create(self):
        sf = self.shape
        D = self.elastic_matrix()
        n = self.size * self.dof
        K = np.zeros((n, n))
        for i in range(sf.n_points):
            detJ, dN = jacobian(sf.dN_dnat(i), sf.x)
            B = B_matrix_3d(dN)
            K += sf.w[i] * abs(detJ) * (B.T @ D @ B)
        return K

    def calculate(self, u):
        u = np.asarray(u, dtype=np.float64)
        D = self.elastic_matrix()
        res = np.zeros((12, self.size))
        for i in range(self.size):
            strain = B_matrix_3d(self.shape.dN_dphys(i)) @ u
            res[:6, i] = strain
            res[6:, i] = D @ strain
        return res
