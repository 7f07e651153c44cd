"""
Structured mesh generators.

Builders for the simple domains used by the benchmark problems:

    line_mesh            [x0, x0 + length] split into Bar2 elements
    rectangle_mesh       lx x ly rectangle, Quad4 or Tri3
    box_mesh             lx x ly x lz box, Hex8 or Tet4
    cylinder_shell_mesh  open tube along z, ShellQuad4 or ShellTri3

Node numbering is lexicographic with x varying fastest. Boundary elements
cover the whole outer surface and are ordered so that ``boundary_normal``
points out of the domain:

    2D edges are listed clockwise (the normal is the edge rotated by -90 deg)
    3D faces are listed counter-clockwise seen from outside

Grid coordinates come from ``np.linspace`` so that the end coordinates are
exact and predicates such as ``x == 10`` select the expected nodes.
"""

import logging

import numpy as np

from ..elements.types import FeType
from ..errors import ConfigError
from .nodes import Mesh

log = logging.getLogger(__name__)


# Hex8 local faces, counter-clockwise seen from outside
_HEX_FACES = (
    (0, 3, 2, 1),  # z-
    (4, 5, 6, 7),  # z+
    (0, 1, 5, 4),  # y-
    (3, 7, 6, 2),  # y+
    (0, 4, 7, 3),  # x-
    (1, 2, 6, 5),  # x+
)

# Six tetrahedra sharing the body diagonal 0-6. Face diagonals alternate
# between neighbouring cells so the split is conforming.
_HEX_TO_TETS = (
    (0, 1, 2, 6), (0, 2, 3, 6), (0, 3, 7, 6),
    (0, 7, 4, 6), (0, 4, 5, 6), (0, 5, 1, 6),
)

# Triangles of each hex face, matching the diagonals of _HEX_TO_TETS
_HEX_FACE_TRIANGLES = (
    ((0, 3, 2), (0, 2, 1)),
    ((4, 5, 6), (4, 6, 7)),
    ((0, 1, 5), (0, 5, 4)),
    ((3, 7, 6), (3, 6, 2)),
    ((0, 4, 7), (0, 7, 3)),
    ((1, 2, 6), (1, 6, 5)),
)


def _check_divisions(**counts):
    for name, n in counts.items():
        if int(n) < 1:
            raise ConfigError(f"{name} must be a positive integer, got {n}")


def _as_type(fe_type, allowed):
    if not isinstance(fe_type, FeType):
        fe_type = FeType.from_tag(fe_type)
    if fe_type not in allowed:
        names = ", ".join(t.value for t in allowed)
        raise ConfigError(f"element type {fe_type.value} not supported here (use {names})")
    return fe_type


def line_mesh(length=1.0, n=10, x0=0.0):
    """
    Bar2 mesh of a segment.

    Boundary elements are the two end points.
    """
    _check_divisions(n=n)
    nodes = np.linspace(x0, x0 + length, n + 1).reshape(-1, 1)
    idx = np.arange(n)
    elements = np.column_stack([idx, idx + 1])
    boundary = np.array([[0], [n]])
    return Mesh(FeType.BAR2, nodes, elements, boundary)


def rectangle_mesh(lx, ly, nx, ny, fe_type=FeType.QUAD4, origin=(0.0, 0.0)):
    """
    Structured mesh of a rectangle.

    Parameters
    ----------
    lx, ly : float
        Side lengths.
    nx, ny : int
        Number of divisions along x and y.
    fe_type : FeType or str, optional
        QUAD4 (default) or TRI3. Each cell is split into two triangles
        along its 0-2 diagonal for TRI3.
    origin : tuple of float, optional
        Lower-left corner.

    Returns
    -------
    mesh : Mesh
    """
    fe_type = _as_type(fe_type, (FeType.QUAD4, FeType.TRI3))
    _check_divisions(nx=nx, ny=ny)

    xs = np.linspace(origin[0], origin[0] + lx, nx + 1)
    ys = np.linspace(origin[1], origin[1] + ly, ny + 1)
    X, Y = np.meshgrid(xs, ys)
    nodes = np.column_stack([X.ravel(), Y.ravel()])

    def node(i, j):
        return j * (nx + 1) + i

    cells = np.array([
        [node(i, j), node(i + 1, j), node(i + 1, j + 1), node(i, j + 1)]
        for j in range(ny) for i in range(nx)
    ])
    if fe_type == FeType.TRI3:
        elements = np.vstack([cells[:, [0, 1, 2]], cells[:, [0, 2, 3]]])
    else:
        elements = cells

    edges = []
    edges += [(node(i + 1, 0), node(i, 0)) for i in range(nx)]
    edges += [(node(nx, j + 1), node(nx, j)) for j in range(ny)]
    edges += [(node(i, ny), node(i + 1, ny)) for i in range(nx)]
    edges += [(node(0, j), node(0, j + 1)) for j in range(ny)]

    log.debug("rectangle_mesh: %s, %d nodes, %d elements",
              fe_type.value, len(nodes), len(elements))
    return Mesh(fe_type, nodes, elements, np.array(edges))


def box_mesh(lx, ly, lz, nx, ny, nz, fe_type=FeType.HEX8, origin=(0.0, 0.0, 0.0)):
    """
    Structured mesh of a box.

    Parameters
    ----------
    lx, ly, lz : float
        Side lengths.
    nx, ny, nz : int
        Number of divisions along each axis.
    fe_type : FeType or str, optional
        HEX8 (default) or TET4 (six tetrahedra per cell).
    origin : tuple of float, optional
        Minimum corner.

    Returns
    -------
    mesh : Mesh
        Boundary faces are quads for HEX8 and triangles for TET4.
    """
    fe_type = _as_type(fe_type, (FeType.HEX8, FeType.TET4))
    _check_divisions(nx=nx, ny=ny, nz=nz)

    xs = np.linspace(origin[0], origin[0] + lx, nx + 1)
    ys = np.linspace(origin[1], origin[1] + ly, ny + 1)
    zs = np.linspace(origin[2], origin[2] + lz, nz + 1)
    Z, Y, X = np.meshgrid(zs, ys, xs, indexing="ij")
    nodes = np.column_stack([X.ravel(), Y.ravel(), Z.ravel()])

    def node(i, j, k):
        return (k * (ny + 1) + j) * (nx + 1) + i

    cells = []
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                cells.append([
                    node(i, j, k), node(i + 1, j, k),
                    node(i + 1, j + 1, k), node(i, j + 1, k),
                    node(i, j, k + 1), node(i + 1, j, k + 1),
                    node(i + 1, j + 1, k + 1), node(i, j + 1, k + 1),
                ])
    cells = np.array(cells)

    # (face index, cells on that side of the box)
    sides = (
        (0, [c for c in range(len(cells)) if c // (nx * ny) == 0]),
        (1, [c for c in range(len(cells)) if c // (nx * ny) == nz - 1]),
        (2, [c for c in range(len(cells)) if (c // nx) % ny == 0]),
        (3, [c for c in range(len(cells)) if (c // nx) % ny == ny - 1]),
        (4, [c for c in range(len(cells)) if c % nx == 0]),
        (5, [c for c in range(len(cells)) if c % nx == nx - 1]),
    )

    if fe_type == FeType.HEX8:
        elements = cells
        faces = [cells[c][list(_HEX_FACES[f])] for f, side in sides for c in side]
    else:
        elements = np.vstack([cells[:, list(tet)] for tet in _HEX_TO_TETS])
        faces = [cells[c][list(tri)]
                 for f, side in sides for c in side
                 for tri in _HEX_FACE_TRIANGLES[f]]

    log.debug("box_mesh: %s, %d nodes, %d elements",
              fe_type.value, len(nodes), len(elements))
    return Mesh(fe_type, nodes, elements, np.array(faces))


def cylinder_shell_mesh(radius, length, n_circ, n_axial, fe_type=FeType.SHELL_QUAD4):
    """
    Faceted mesh of an open circular tube with its axis along z.

    Nodes lie on the circle of the given radius at z = 0 ... length. The
    element normals point away from the axis, so an inward pressure is a
    negative pressure value.

    Parameters
    ----------
    radius, length : float
    n_circ : int
        Number of facets around the circumference (at least 3).
    n_axial : int
        Number of divisions along the axis.
    fe_type : FeType or str, optional
        SHELL_QUAD4 (default) or SHELL_TRI3.
    """
    fe_type = _as_type(fe_type, (FeType.SHELL_QUAD4, FeType.SHELL_TRI3))
    _check_divisions(n_axial=n_axial)
    if n_circ < 3:
        raise ConfigError(f"n_circ must be at least 3, got {n_circ}")

    theta = 2.0 * np.pi * np.arange(n_circ) / n_circ
    zs = np.linspace(0.0, length, n_axial + 1)
    Zg, Tg = np.meshgrid(zs, theta, indexing="ij")
    nodes = np.column_stack([radius * np.cos(Tg.ravel()),
                             radius * np.sin(Tg.ravel()),
                             Zg.ravel()])

    def node(i, k):
        return k * n_circ + i % n_circ

    cells = np.array([
        [node(i, k), node(i + 1, k), node(i + 1, k + 1), node(i, k + 1)]
        for k in range(n_axial) for i in range(n_circ)
    ])
    if fe_type == FeType.SHELL_TRI3:
        elements = np.vstack([cells[:, [0, 1, 2]], cells[:, [0, 2, 3]]])
    else:
        elements = cells

    log.debug("cylinder_shell_mesh: %s, %d nodes, %d elements",
              fe_type.value, len(nodes), len(elements))
    return Mesh(fe_type, nodes, elements)
