"""
Element construction by type tag.
"""

import numpy as np

from ..config import DRILLING_FACTOR
from ..errors import ConfigError
from .continuum import FiniteElement1D, FiniteElement2D, FiniteElement3D
from .geometry import transform_matrix
from .shape import Shape1d2, Shape2d3, Shape2d4, Shape3d4, Shape3d8
from .shell import ShellElement
from .types import FeType


SHAPES = {
    FeType.BAR2: Shape1d2,
    FeType.TRI3: Shape2d3,
    FeType.QUAD4: Shape2d4,
    FeType.TET4: Shape3d4,
    FeType.HEX8: Shape3d8,
    FeType.SHELL_TRI3: Shape2d3,
    FeType.SHELL_QUAD4: Shape2d4,
}

KERNELS = {
    FeType.BAR2: FiniteElement1D,
    FeType.TRI3: FiniteElement2D,
    FeType.QUAD4: FiniteElement2D,
    FeType.TET4: FiniteElement3D,
    FeType.HEX8: FiniteElement3D,
}


def create_shape(fe_type, x):
    """Shape function of a continuum element from its nodal coordinates."""
    try:
        return SHAPES[fe_type](x)
    except KeyError:
        raise ConfigError(f"bad finite element type: {fe_type}") from None


def create_element(fe_type, x, params, drilling_factor=DRILLING_FACTOR):
    """
    Build the kernel of one element.

    Parameters
    ----------
    fe_type : FeType
    x : ndarray, shape (fe_size, dim)
        Global nodal coordinates.
    params : FiniteElementParameters
    drilling_factor : float, optional
        Only used by shells.

    Returns
    -------
    element : FiniteElement
        Object with ``create()`` and ``calculate(u)``.

    Raises
    ------
    NumericError
        If the nodes do not define a valid element.
    """
    x = np.asarray(x, dtype=np.float64)
    if fe_type in (FeType.SHELL_TRI3, FeType.SHELL_QUAD4):
        T = transform_matrix(x)
        local = (T @ x.T).T[:, :2]
        return ShellElement(SHAPES[fe_type](local), T, params, drilling_factor)
    try:
        kernel = KERNELS[fe_type]
    except KeyError:
        raise ConfigError(f"bad finite element type: {fe_type}") from None
    return kernel(SHAPES[fe_type](x), params)
