"""Shared fixtures for the statfem test suite."""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from statfem.elements.types import FeType
from statfem.mesh.nodes import Mesh


@pytest.fixture
def unit_square():
    """One Quad4 element on [0, 1]^2 with its four boundary edges."""
    nodes = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
    elements = np.array([[0, 1, 2, 3]])
    boundary = np.array([[1, 0], [2, 1], [3, 2], [0, 3]])
    mesh = Mesh(FeType.QUAD4, nodes, elements, boundary)
    mesh.create_mesh_map()
    return mesh


@pytest.fixture
def unit_tet():
    """One Tet4 element with its four outward-oriented faces."""
    nodes = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
        [0.0, 0.0, 1.0],
    ])
    elements = np.array([[0, 1, 2, 3]])
    boundary = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]])
    mesh = Mesh(FeType.TET4, nodes, elements, boundary)
    mesh.create_mesh_map()
    return mesh
