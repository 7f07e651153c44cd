"""
Flat shell kernels (ShellTri3, ShellQuad4) with six DOFs per node.

Each element is treated in its own plane. A local orthonormal basis T
(rows vx, vy, vz) is built from the first three nodes, the nodal
coordinates are rotated into (vx, vy) and a 2D shape function is built on
them. Local DOFs per node are

    [u, v, w, theta_x, theta_y, theta_z]

where theta_z (drilling) has no physical stiffness.

Local stiffness combines membrane, bending (Mindlin plate) and transverse
shear contributions:

    K = sum_i w_i |J_i| ( t   * Bm^T D  Bm
                        + t^3/12 * Bp^T D  Bp
                        + 5t/6   * Bc^T Ds Bc )

with D the plane stress matrix and Ds = G * I2. The drilling diagonal is
then set to a small fraction of the largest diagonal entry so that the
assembled system is not singular, and K is rotated to global axes:

    K_global = M^T K M,   M = blockdiag(T, T, ..., T)

Strains and stresses are recovered at the nodes in local axes as symmetric
3x3 tensors (membrane + bending in the in-plane block, transverse shear in
the out-of-plane entries), rotated to global axes with T^T S T and reported
as (xx, yy, zz, xy, xz, yz).
"""

import numpy as np

from ..config import DRILLING_FACTOR
from .continuum import (
    FiniteElement,
    D_matrix_plane_stress,
    D_matrix_shear,
    jacobian,
)
from .geometry import expand_transform


DOF = 6

# Voigt index pairs of a symmetric tensor
_VOIGT = ((0, 0), (1, 1), (2, 2), (0, 1), (0, 2), (1, 2))


def shell_B_matrices(dN, N):
    """
    Membrane, bending and shear strain-displacement matrices.

    Parameters
    ----------
    dN : ndarray, shape (2, n)
        Physical derivatives in local in-plane axes.
    N : ndarray, shape (n,)
        Shape values at the same point.

    Returns
    -------
    Bm : ndarray, shape (3, 6n)
        Membrane strains from (u, v).
    Bp : ndarray, shape (3, 6n)
        Curvatures from (theta_x, theta_y).
    Bc : ndarray, shape (2, 6n)
        Transverse shear strains from w and (theta_x, theta_y).
    """
    n = dN.shape[1]
    Bm = np.zeros((3, DOF * n))
    Bp = np.zeros((3, DOF * n))
    Bc = np.zeros((2, DOF * n))

    Bm[0, 0::DOF] = dN[0]
    Bm[1, 1::DOF] = dN[1]
    Bm[2, 0::DOF] = dN[1]
    Bm[2, 1::DOF] = dN[0]

    Bp[0, 3::DOF] = dN[0]
    Bp[1, 4::DOF] = dN[1]
    Bp[2, 3::DOF] = dN[1]
    Bp[2, 4::DOF] = dN[0]

    Bc[0, 2::DOF] = dN[0]
    Bc[0, 3::DOF] = N
    Bc[1, 2::DOF] = dN[1]
    Bc[1, 4::DOF] = N
    return Bm, Bp, Bc


def _tensor(inplane, shear):
    """Symmetric 3x3 tensor from in-plane Voigt (xx, yy, xy) and shear (xz, yz)."""
    return np.array([
        [inplane[0], inplane[2], shear[0]],
        [inplane[2], inplane[1], shear[1]],
        [shear[0], shear[1], 0.0],
    ])


class ShellElement(FiniteElement):
    """
    Flat shell element.

    Parameters
    ----------
    shape : Shape2d3 or Shape2d4
        Shape function built on the local in-plane coordinates.
    transform : ndarray, shape (3, 3)
        Local basis, rows vx, vy, vz.
    params : FiniteElementParameters
    drilling_factor : float, optional
        Drilling stiffness as a fraction of the largest diagonal entry.
    """

    dof = DOF

    def __init__(self, shape, transform, params, drilling_factor=DRILLING_FACTOR):
        super().__init__(shape, params)
        self.transform = np.asarray(transform, dtype=np.float64)
        self.drilling_factor = drilling_factor

    def elastic_matrix(self):
        return D_matrix_plane_stress(self.params.young_modulus,
                                     self.params.poisson_ratio)

    def shear_matrix(self):
        return D_matrix_shear(self.params.young_modulus, self.params.poisson_ratio)

    def _expanded_transform(self):
        return expand_transform(self.transform, self.size * DOF)

    def create(self):
        sf = self.shape
        t = self.params.thickness
        D = self.elastic_matrix()
        Ds = self.shear_matrix()
        n = self.size * DOF
        K = np.zeros((n, n))
        for i in range(sf.n_points):
            detJ, dN = jacobian(sf.dN_dnat(i), sf.x[:, :2])
            Bm, Bp, Bc = shell_B_matrices(dN, sf.N(i))
            K += sf.w[i] * abs(detJ) * (
                t * (Bm.T @ D @ Bm)
                + t ** 3 / 12.0 * (Bp.T @ D @ Bp)
                + 5.0 * t / 6.0 * (Bc.T @ Ds @ Bc)
            )

        drilling = self.drilling_factor * np.max(np.diag(K))
        idx = np.arange(DOF - 1, n, DOF)
        K[idx, idx] = drilling

        M = self._expanded_transform()
        return M.T @ K @ M

    def calculate(self, u):
        u = np.asarray(u, dtype=np.float64)
        T = self.transform
        lu = self._expanded_transform() @ u
        D = self.elastic_matrix()
        Ds = self.shear_matrix()
        half_t = 0.5 * self.params.thickness

        res = np.zeros((12, self.size))
        for i in range(self.size):
            # shape values at node i are the Kronecker delta
            Bm, Bp, Bc = shell_B_matrices(self.shape.dN_dphys(i),
                                          np.eye(self.size)[i])
            strain_m, strain_p, strain_c = Bm @ lu, Bp @ lu, Bc @ lu
            stress_m = D @ strain_m
            stress_p = half_t * (D @ strain_p)
            stress_c = Ds @ strain_c

            strain = T.T @ _tensor(strain_m + strain_p, strain_c) @ T
            stress = T.T @ _tensor(stress_m + stress_p, stress_c) @ T
            for k, (a, b) in enumerate(_VOIGT):
                res[k, i] = strain[a, b]
                res[k + 6, i] = stress[a, b]
        return res
