"""
Plots of planar meshes and nodal fields.

Quad4 elements are split into two triangles along the 0-2 diagonal so
that every planar mesh can be drawn with matplotlib's triangulation tools.

Output is meant for files (Agg backend); figures are returned so the
caller can save or further decorate them.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for file output
import matplotlib.pyplot as plt
import matplotlib.tri as mtri

from ..elements.types import FeType
from ..errors import ConfigError


def _triangulation(mesh, displacement=None, scale=1.0):
    if mesh.fe_type not in (FeType.TRI3, FeType.QUAD4):
        raise ConfigError(f"only planar meshes can be plotted, got {mesh.fe_name}")
    nodes = mesh.nodes.copy()
    if displacement is not None:
        nodes += scale * np.asarray(displacement)[:, :2]
    elements = mesh.elements
    if mesh.fe_type == FeType.QUAD4:
        elements = np.vstack([elements[:, [0, 1, 2]], elements[:, [0, 2, 3]]])
    return mtri.Triangulation(nodes[:, 0], nodes[:, 1], elements)


def _axes(ax):
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(10, 8))
    else:
        fig = ax.figure
    return fig, ax


def plot_mesh(mesh, ax=None, title=None, show_boundary=True):
    """Draw element edges, and boundary edges in red.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """
    fig, ax = _axes(ax)
    ax.triplot(_triangulation(mesh), 'k-', linewidth=0.3)
    if show_boundary:
        for edge in mesh.boundary_elements:
            xy = mesh.nodes[edge]
            ax.plot(xy[:, 0], xy[:, 1], 'r-', linewidth=1.0)
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_aspect('equal')
    if title is not None:
        ax.set_title(title)
    return fig, ax


def plot_field(mesh, field, ax=None, title=None, cmap='RdYlBu_r',
               label=None, n_levels=20, displacement=None, scale=1.0):
    """Filled contour plot of a nodal field.

    Parameters
    ----------
    mesh : Mesh
        Tri3 or Quad4 mesh.
    field : ndarray, shape (N_nodes,)
        Nodal values, e.g. one row of the result table.
    ax : matplotlib.axes.Axes or None
    title, label : str or None
        Plot title and colorbar label.
    cmap : str
    n_levels : int
    displacement : ndarray, shape (N_nodes, 2) or None
        If given, the field is drawn on the deformed mesh.
    scale : float
        Displacement magnification.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """
    fig, ax = _axes(ax)
    field = np.asarray(field, dtype=np.float64)
    triangulation = _triangulation(mesh, displacement, scale)

    levels = np.linspace(field.min(), field.max(), n_levels + 1)
    if np.all(levels == levels[0]):
        levels = np.array([levels[0] - 1, levels[0] + 1])

    tcf = ax.tricontourf(triangulation, field, levels=levels, cmap=cmap,
                         extend='both')
    cb = fig.colorbar(tcf, ax=ax, shrink=0.8)
    if label is not None:
        cb.set_label(label)
    ax.triplot(triangulation, 'k-', linewidth=0.1, alpha=0.15)

    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_aspect('equal')
    if title is not None:
        ax.set_title(title)
    return fig, ax
