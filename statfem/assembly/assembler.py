"""
Assembly stages of the static analysis.

Each stage pairs a producer (pure computation on one work item, run in
worker threads) with a consumer (scatter into the solver or the result
table, run in one thread) and hands them to ``run_stage``:

    Stage                              items               message
    ---------------------------------  ------------------  --------------------------
    Global stiffness matrix            elements            (dofs, K_local)
    Point loads                        nodes               [(dof, value), ...]
    Volume loads                       elements            [(dof, value), ...]
    Surface and pressure loads         boundary elements   [(dof, value), ...]
    Boundary conditions                nodes               [(dof, value), ...]
    Strain and stress recovery         elements            (nodes, table)

Global DOF of local index i of element e:

    elements[e][i // dof] * dof + i % dof

Loads and prescribed values only touch the first ``dim`` components of a
node (translations), so shell rotations are never loaded or fixed here.
"""

import logging

import numpy as np

from ..elements.continuum import FiniteElementParameters
from ..elements.factory import create_element
from ..elements.types import SOLID_TYPES
from ..errors import ConfigError
from ..parameters import ParamType
from ..postprocessing.field_output import nodal_average
from .parallel import run_stage

log = logging.getLogger(__name__)


def element_dofs(conn, dof):
    """Global DOF numbers of an element, interleaved per node."""
    conn = np.asarray(conn, dtype=np.int64)
    return (conn[:, None] * dof + np.arange(dof)).ravel()


# ---------------------------------------------------------------------------
# Material data
# ---------------------------------------------------------------------------

def check_material(mesh, params):
    """
    Raise ConfigError if a material parameter the element type needs is missing.

    Young's modulus is always needed, Poisson's ratio for every type but
    bars, thickness (cross-section area for bars) for every type but solids.
    """
    if not params.has_parameter(ParamType.YOUNG_MODULUS):
        raise ConfigError("Young's modulus is not specified")
    if not mesh.is_1d and not params.has_parameter(ParamType.POISSON_RATIO):
        raise ConfigError("Poisson's ratio is not specified")
    if mesh.fe_type not in SOLID_TYPES and not params.has_parameter(ParamType.THICKNESS):
        raise ConfigError(f"thickness is not specified for {mesh.fe_name} elements")


def element_parameters(mesh, params, e):
    """Material data of element e, looked up at its centroid."""
    cx = mesh.element_center(e)
    fe_params = FiniteElementParameters(
        young_modulus=params.get_param_value(cx, ParamType.YOUNG_MODULUS),
        poisson_ratio=params.get_param_value(cx, ParamType.POISSON_RATIO),
    )
    if mesh.fe_type not in SOLID_TYPES:
        fe_params.thickness = params.get_param_value(cx, ParamType.THICKNESS)
    return fe_params


def build_element(mesh, params, e):
    return create_element(mesh.fe_type, mesh.element_coords(e),
                          element_parameters(mesh, params, e))


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def assemble_stiffness(mesh, params, solver, verbose=True):
    """Build every element matrix and scatter it into the solver."""
    check_material(mesh, params)
    dof = mesh.dof

    def produce(e):
        K_local = build_element(mesh, params, e).create()
        return element_dofs(mesh.elements[e], dof), K_local

    def consume(e, message):
        dofs, K_local = message
        solver.add_local(dofs, K_local)

    run_stage("Building a global stiffness matrix", mesh.n_elements,
              params.num_threads, produce, consume, verbose)


def _directional(node, param, vector, dof, dim):
    """(dof, value) pairs for the directions selected by ``param``."""
    return [(node * dof + k, vector[k]) for k in param.directions(dim)]


def _add_to_vector(solver):
    def consume(index, message):
        for i, value in message:
            solver.add_vector(i, value)
    return consume


def apply_point_loads(mesh, params, solver, verbose=True):
    """Concentrated loads at every node where a PointLoad predicate holds."""
    loads = params.of_type(ParamType.POINT_LOAD)
    if not loads:
        return
    dof, dim, variables = mesh.dof, mesh.dim, params.variables

    def produce(n):
        x = mesh.nodes[n]
        out = []
        for param in loads:
            if param.holds_at(x, variables):
                value = param.value_at(x, variables)
                out += _directional(n, param, (value, value, value), dof, dim)
        return out

    run_stage("Calculation of point loads", mesh.n_nodes,
              params.num_threads, produce, _add_to_vector(solver), verbose)


def apply_volume_loads(mesh, params, solver, verbose=True):
    """
    Body loads: value * element volume, shared equally by the element nodes.

    Predicate and value are evaluated at the element centroid.
    """
    loads = params.of_type(ParamType.VOLUME_LOAD)
    if not loads:
        return
    dof, dim, variables = mesh.dof, mesh.dim, params.variables
    share = 1.0 / mesh.fe_size

    def produce(e):
        cx = mesh.element_center(e)
        out = []
        for param in loads:
            if not param.holds_at(cx, variables):
                continue
            load = param.value_at(cx, variables) * mesh.element_volume(e) * share
            for n in mesh.elements[e]:
                out += _directional(n, param, (load, load, load), dof, dim)
        return out

    run_stage("Calculation of volume loads", mesh.n_elements,
              params.num_threads, produce, _add_to_vector(solver), verbose)


def apply_surface_loads(mesh, params, solver, verbose=True):
    """
    Surface and pressure loads on boundary elements.

    A record applies to a boundary element only if its predicate holds at
    every node of the element; the value is evaluated at the first node.
    The load value * boundary measure is shared equally by the nodes and
    multiplied by (1, 1, 1) for surface loads or by the unit outward normal
    for pressure loads.
    """
    loads = params.of_type(ParamType.SURFACE_LOAD, ParamType.PRESSURE_LOAD)
    if not loads:
        return
    dof, dim, variables = mesh.dof, mesh.dim, params.variables
    share = 1.0 / mesh.be_size
    ones = np.ones(3)

    def produce(b):
        x = mesh.boundary_coords(b)
        out = []
        for param in loads:
            if not all(param.holds_at(p, variables) for p in x):
                continue
            value = param.value_at(x[0], variables)
            if param.type == ParamType.PRESSURE_LOAD:
                direction = mesh.boundary_normal(b)
            else:
                direction = ones
            vector = direction * (value * mesh.boundary_volume(b) * share)
            for n in mesh.boundary_elements[b]:
                out += _directional(n, param, vector, dof, dim)
        return out

    run_stage("Calculation of pressure/surface loads", mesh.n_boundary,
              params.num_threads, produce, _add_to_vector(solver), verbose)


def apply_boundary_conditions(mesh, params, solver, verbose=True):
    """
    Prescribed displacements at every node where a BoundaryCondition holds.

    Applied after all loads. If several records select the same DOF they
    are applied in order, so the last one wins.

    Returns
    -------
    n_fixed : int
        Number of (node, direction) constraints applied.
    """
    conditions = params.of_type(ParamType.BOUNDARY_CONDITION)
    if not conditions:
        return 0
    dof, dim, variables = mesh.dof, mesh.dim, params.variables
    fixed = [0]

    def produce(n):
        x = mesh.nodes[n]
        out = []
        for param in conditions:
            if param.holds_at(x, variables):
                value = param.value_at(x, variables)
                out += _directional(n, param, (value, value, value), dof, dim)
        return out

    def consume(n, message):
        for i, value in message:
            solver.set_boundary_condition(i, value)
        fixed[0] += len(message)

    run_stage("Using of boundary conditions", mesh.n_nodes,
              params.num_threads, produce, consume, verbose)
    if fixed[0] == 0:
        log.warning("boundary conditions matched no node")
    return fixed[0]


def recover_results(mesh, params, u, n_rows, verbose=True):
    """
    Nodal result table from the displacement vector.

    The first ``dof`` rows are the nodal DOFs of u. The remaining rows are
    the element strains and stresses at the nodes, summed over the
    incident elements and divided by their number. Values with magnitude
    below ``params.eps`` are set to 0.

    Parameters
    ----------
    mesh : Mesh
    params : FEMParameters
    u : ndarray, shape (n_nodes * dof,)
    n_rows : int
        Total number of result rows.

    Returns
    -------
    result : ndarray, shape (n_rows, n_nodes)
    """
    dof = mesh.dof
    result = np.zeros((n_rows, mesh.n_nodes))
    result[:dof] = np.asarray(u).reshape(mesh.n_nodes, dof).T
    counts = np.zeros(mesh.n_nodes, dtype=np.int64)
    sums = result[dof:]

    def produce(e):
        conn = mesh.elements[e]
        table = build_element(mesh, params, e).calculate(u[element_dofs(conn, dof)])
        return conn, table

    def consume(e, message):
        conn, table = message
        sums[:, conn] += table
        counts[conn] += 1

    run_stage("Calculation of standard FE results", mesh.n_elements,
              params.num_threads, produce, consume, verbose)

    result[dof:] = nodal_average(sums, counts, params.eps)
    return result
