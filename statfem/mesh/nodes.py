"""
Mesh data structure and geometric queries.

Mesh conventions:
    - Node numbering: 0-indexed
    - One element type per mesh (see statfem.elements.types)
    - Coordinates have as many columns as the type's dimension (1, 2 or 3)
    - Boundary elements are edges in 2D, faces in 3D and single nodes in 1D;
      for shells the boundary element list is the element list itself
    - Boundary faces are expected to be ordered so that the right-hand rule
      gives the outward normal
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from ..elements.geometry import (
    volume_1d2,
    volume_2d3,
    volume_2d4,
    volume_3d4,
    volume_3d8,
)
from ..elements.types import FE_INFO, SHELL_TYPES, FeType
from ..errors import MeshFormatError, NumericError

log = logging.getLogger(__name__)


_ELEMENT_VOLUME = {
    FeType.BAR2: volume_1d2,
    FeType.TRI3: volume_2d3,
    FeType.QUAD4: volume_2d4,
    FeType.TET4: volume_3d4,
    FeType.HEX8: volume_3d8,
    FeType.SHELL_TRI3: volume_2d3,
    FeType.SHELL_QUAD4: volume_2d4,
}

_BOUNDARY_VOLUME = {
    FeType.TRI3: volume_1d2,
    FeType.QUAD4: volume_1d2,
    FeType.TET4: volume_2d3,
    FeType.HEX8: volume_2d4,
    FeType.SHELL_TRI3: volume_2d3,
    FeType.SHELL_QUAD4: volume_2d4,
}


def _index_array(data, width, what):
    arr = np.asarray(data, dtype=np.int64)
    if arr.size == 0:
        return np.empty((0, width), dtype=np.int64)
    if arr.ndim != 2 or arr.shape[1] != width:
        raise MeshFormatError(
            f"{what} must have shape (N, {width}), got {arr.shape}"
        )
    return arr


@dataclass
class Mesh:
    """
    Finite element mesh.

    Attributes
    ----------
    fe_type : FeType
        Element type of every element in the mesh.
    nodes : ndarray, shape (N_nodes, dim)
        Nodal coordinates.
    elements : ndarray, shape (N_elem, fe_size)
        Element connectivity (0-indexed node indices).
    boundary_elements : ndarray, shape (N_be, be_size)
        Boundary connectivity. Aliases ``elements`` for shell types.
    mesh_map : list of ndarray
        For node i, the sorted node indices j >= i that share an element
        with i. Built by ``create_mesh_map``.
    """
    fe_type: FeType
    nodes: np.ndarray
    elements: np.ndarray
    boundary_elements: np.ndarray = None
    mesh_map: List[np.ndarray] = field(default_factory=list)

    def __post_init__(self):
        """Validate mesh data after initialization."""
        if not isinstance(self.fe_type, FeType):
            self.fe_type = FeType.from_tag(self.fe_type)
        info = FE_INFO[self.fe_type]

        self.nodes = np.asarray(self.nodes, dtype=np.float64)
        if self.nodes.ndim == 1 and info.dim == 1:
            self.nodes = self.nodes.reshape(-1, 1)
        if self.nodes.ndim != 2 or self.nodes.shape[1] != info.dim:
            raise MeshFormatError(
                f"nodes must have shape (N, {info.dim}) for {self.fe_name}, "
                f"got {self.nodes.shape}"
            )

        self.elements = _index_array(self.elements, info.fe_size, "elements")
        if self.fe_type in SHELL_TYPES:
            self.boundary_elements = self.elements
        elif self.boundary_elements is None:
            self.boundary_elements = np.empty((0, info.be_size), dtype=np.int64)
        else:
            self.boundary_elements = _index_array(
                self.boundary_elements, info.be_size, "boundary elements")

        for what, conn in (("Element", self.elements),
                           ("Boundary element", self.boundary_elements)):
            if conn.size == 0:
                continue
            if conn.min() < 0:
                raise MeshFormatError(
                    f"{what} connectivity contains negative node indices")
            if conn.max() >= self.n_nodes:
                raise MeshFormatError(
                    f"{what} connectivity references node {conn.max()}, but "
                    f"mesh only has {self.n_nodes} nodes (0-indexed)"
                )

    # --- sizes ---

    @property
    def info(self):
        return FE_INFO[self.fe_type]

    @property
    def fe_name(self):
        """Native tag of the element type (``fe2d3`` ...)."""
        return self.fe_type.value

    @property
    def n_nodes(self):
        return self.nodes.shape[0]

    @property
    def n_elements(self):
        return self.elements.shape[0]

    @property
    def n_boundary(self):
        return self.boundary_elements.shape[0]

    @property
    def fe_size(self):
        return self.info.fe_size

    @property
    def be_size(self):
        return self.info.be_size

    @property
    def dim(self):
        return self.info.dim

    @property
    def dof(self):
        """Degrees of freedom per node."""
        return self.info.dof

    @property
    def is_1d(self):
        return self.fe_type == FeType.BAR2

    @property
    def is_2d(self):
        return self.fe_type in (FeType.TRI3, FeType.QUAD4)

    @property
    def is_3d(self):
        """True for solids only; shells are reported by ``is_shell``."""
        return self.fe_type in (FeType.TET4, FeType.HEX8)

    @property
    def is_shell(self):
        return self.fe_type in SHELL_TYPES

    @property
    def nnz(self):
        """Number of node pairs (i, j >= i) in the mesh map."""
        return sum(len(row) for row in self.mesh_map)

    # --- coordinates ---

    def element_coords(self, e):
        """
        Coordinates of the nodes of element e.

        Returns
        -------
        coords : ndarray, shape (fe_size, dim)
        """
        return self.nodes[self.elements[e]]

    def boundary_coords(self, b):
        """Coordinates of the nodes of boundary element b, shape (be_size, dim)."""
        return self.nodes[self.boundary_elements[b]]

    def element_center(self, e):
        """Centroid of element e as the average of its nodes."""
        return self.element_coords(e).mean(axis=0)

    def boundary_center(self, b):
        return self.boundary_coords(b).mean(axis=0)

    # --- measures ---

    def element_volume(self, e):
        """Length, area or volume of element e (area for shells)."""
        return _ELEMENT_VOLUME[self.fe_type](self.element_coords(e))

    def boundary_volume(self, b):
        """
        Measure of boundary element b.

        1 for the point boundaries of bars, edge length in 2D, face area
        in 3D and for shells.
        """
        if self.fe_type == FeType.BAR2:
            return 1.0
        return _BOUNDARY_VOLUME[self.fe_type](self.boundary_coords(b))

    def boundary_normal(self, b):
        """
        Unit normal of boundary element b as a 3-vector.

            1D: (1, 0, 0)
            2D: edge (x0 -> x1) rotated by -90 degrees, (y0 - y1, x1 - x0, 0)
            3D: (x1 - x0) cross (x2 - x0)

        Raises
        ------
        NumericError
            If the boundary element is degenerate.
        """
        if self.is_1d:
            return np.array([1.0, 0.0, 0.0])
        x = self.boundary_coords(b)
        if self.is_2d:
            normal = np.array([x[0, 1] - x[1, 1], x[1, 0] - x[0, 0], 0.0])
        else:
            normal = np.cross(x[1] - x[0], x[2] - x[0])
        length = np.linalg.norm(normal)
        if length == 0.0:
            raise NumericError(f"degenerate boundary element {b}")
        return normal / length

    def degenerate_elements(self):
        """Indices of elements whose measure is not strictly positive."""
        volumes = np.array([self.element_volume(e) for e in range(self.n_elements)])
        return np.flatnonzero(~(volumes > 0.0))

    # --- adjacency ---

    def create_mesh_map(self):
        """
        Build the node adjacency map.

        For every node i the sorted array of nodes j >= i sharing at least
        one element with i (i itself included when it belongs to an
        element). Only the upper triangle is stored.

        Returns
        -------
        mesh_map : list of ndarray
        """
        n = self.n_nodes
        if self.n_elements == 0:
            self.mesh_map = [np.empty(0, dtype=np.int64) for _ in range(n)]
            return self.mesh_map

        rows = np.repeat(self.elements, self.fe_size, axis=1).ravel()
        cols = np.tile(self.elements, (1, self.fe_size)).ravel()
        keep = cols >= rows
        keys = np.unique(rows[keep] * n + cols[keep])
        rows, cols = keys // n, keys % n
        split = np.searchsorted(rows, np.arange(1, n))
        self.mesh_map = np.split(cols, split)
        log.debug("Mesh map: %d nodes, %d node pairs", n, len(keys))
        return self.mesh_map
