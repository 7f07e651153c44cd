from .types import FeType, FeInfo, FE_INFO, SHELL_TYPES, SOLID_TYPES, PLANE_TYPES
from .continuum import (
    FiniteElementParameters,
    FiniteElement,
    FiniteElement1D,
    FiniteElement2D,
    FiniteElement3D,
    D_matrix_1d,
    D_matrix_plane_stress,
    D_matrix_3d,
    D_matrix_shear,
    B_matrix_2d,
    B_matrix_3d,
)
from .shell import ShellElement
from .shape import Shape1d2, Shape2d3, Shape2d4, Shape3d4, Shape3d8
from .factory import create_shape, create_element
