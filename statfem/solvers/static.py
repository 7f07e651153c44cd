"""
Static Linear Elastic Analysis
================================

Solves K u = f for a mesh of one element type with material data, loads
and prescribed displacements given as expressions of the coordinates.

Pipeline of ``StaticFEM.calculate``:
    1. Global stiffness matrix   (material looked up at element centroids)
    2. Point loads               (nodes)
    3. Volume loads              (elements, value * volume / fe_size per node)
    4. Surface/pressure loads    (boundary elements, value * area / be_size per node)
    5. Boundary conditions       (nodes, after all loads)
    6. Solve                     (dense Cholesky or sparse direct)
    7. Results                   (nodal DOFs, averaged strains and stresses)
    8. Summary                   (min/max of every field, elapsed time)

Stages 1-5 and 7 run on ``num_threads`` producer threads with a single
consumer that owns the solver. Stages without a matching parameter are
skipped.

Usage:
    from statfem import StaticFEM, Direction

    fem = StaticFEM()
    fem.set_mesh("beam.mesh")
    fem.add_young_modulus("203200")
    fem.add_poisson_ratio("0.27")
    fem.add_thickness("1")
    fem.add_boundary_condition("0", "x == 0", Direction.X | Direction.Y)
    fem.add_surface_load("-1", "y == 0.25", Direction.Y)
    fem.calculate()
    fem.save_result("beam.res")
"""

import logging
import time

import numpy as np

from ..assembly.assembler import (
    apply_boundary_conditions,
    apply_point_loads,
    apply_surface_loads,
    apply_volume_loads,
    assemble_stiffness,
    recover_results,
)
from ..config import DEFAULT_SOLVER, SOLVERS
from ..errors import ConfigError
from ..mesh.nodes import Mesh
from ..mesh.readers import load_mesh
from ..parameters import FEMParameters
from ..postprocessing.field_output import format_summary, result_names
from ..postprocessing.result_file import save_result
from .factory import create_solver

log = logging.getLogger(__name__)


class StaticFEM:
    """
    Static analysis driver.

    Parameters
    ----------
    verbose : bool, optional
        Print the run banner, progress bars and the result summary.

    Attributes
    ----------
    mesh : Mesh or None
    params : FEMParameters
    solver_name : str
    result : ndarray, shape (n_fields, n_nodes) or None
        Filled by ``calculate``.
    elapsed : float or None
        Wall time of the last ``calculate`` in seconds.
    """

    def __init__(self, verbose=True):
        self.mesh = None
        self.params = FEMParameters()
        self.solver_name = DEFAULT_SOLVER
        self.result = None
        self.elapsed = None
        self.verbose = verbose

    # --- problem definition ---

    def set_mesh(self, mesh):
        """Load a mesh file or take an existing Mesh."""
        if isinstance(mesh, Mesh):
            if not mesh.mesh_map:
                mesh.create_mesh_map()
            self.mesh = mesh
        else:
            self.mesh = load_mesh(mesh)
            if self.verbose:
                print(f"Mesh: {mesh}")
                print(f"  Type:     {self.mesh.info.label}")
                print(f"  Nodes:    {self.mesh.n_nodes}")
                print(f"  Elements: {self.mesh.n_elements}")
        self.result = None

    def add_young_modulus(self, value, predicate=""):
        self.params.add_young_modulus(value, predicate)

    def add_poisson_ratio(self, value, predicate=""):
        self.params.add_poisson_ratio(value, predicate)

    def add_thickness(self, value, predicate=""):
        self.params.add_thickness(value, predicate)

    def add_boundary_condition(self, value, predicate, direction):
        self.params.add_boundary_condition(value, predicate, direction)

    def add_point_load(self, value, predicate, direction):
        self.params.add_point_load(value, predicate, direction)

    def add_volume_load(self, value, predicate, direction):
        self.params.add_volume_load(value, predicate, direction)

    def add_surface_load(self, value, predicate, direction):
        self.params.add_surface_load(value, predicate, direction)

    def add_pressure_load(self, value, predicate=""):
        self.params.add_pressure_load(value, predicate)

    def add_variable(self, name, value):
        self.params.add_variable(name, value)

    def set_eps(self, eps):
        self.params.set_eps(eps)

    def set_num_threads(self, n):
        self.params.set_num_threads(n)

    def set_solver(self, name):
        if name not in SOLVERS:
            raise ConfigError(f"unknown solver '{name}', expected one of {SOLVERS}")
        self.solver_name = name

    # --- analysis ---

    def calculate(self):
        """
        Run the analysis.

        Returns
        -------
        result : ndarray, shape (n_fields, n_nodes)

        Raises
        ------
        ConfigError
            No mesh, missing material data.
        ParseError, EvaluationError
            From parameter expressions.
        NumericError
            From element construction or the solver.
        """
        if self.mesh is None:
            raise ConfigError("mesh is not specified")
        mesh, params, verbose = self.mesh, self.params, self.verbose

        if verbose:
            print("=" * 70)
            print(f"Static analysis: {mesh.info.label}, {mesh.n_nodes} nodes, "
                  f"{mesh.n_elements} elements")
            print("=" * 70)
            print(f"Using threads: {params.num_threads}")
            print(f"Solver: {self.solver_name}")
        start = time.perf_counter()

        params.compile(mesh.dim)
        solver = create_solver(self.solver_name, mesh, params.eps)
        assemble_stiffness(mesh, params, solver, verbose)
        apply_point_loads(mesh, params, solver, verbose)
        apply_volume_loads(mesh, params, solver, verbose)
        apply_surface_loads(mesh, params, solver, verbose)
        apply_boundary_conditions(mesh, params, solver, verbose)

        if verbose:
            print("Solution of the system of equations...")
        t_solve = time.perf_counter()
        u = solver.solve()
        log.debug("solve: order %d, %.3f s", solver.size, time.perf_counter() - t_solve)
        del solver

        names = result_names(mesh.fe_type)
        self.result = recover_results(mesh, params, u, len(names), verbose)
        self.elapsed = time.perf_counter() - start

        if verbose:
            self.print_summary()
            print(f"Lead time: {self.elapsed:0.2f} sec\n")
        return self.result

    # --- results ---

    def result_names(self):
        if self.mesh is None:
            raise ConfigError("mesh is not specified")
        return result_names(self.mesh.fe_type)

    def _require_result(self):
        if self.result is None:
            raise ConfigError("no results: run calculate() first")
        return self.result

    def get_result(self, name):
        """One field (row of the result table) by name, e.g. ``"Sxx"``."""
        result = self._require_result()
        names = self.result_names()
        if name not in names:
            raise KeyError(f"unknown result '{name}', available: {names}")
        return result[names.index(name)]

    def displacement(self):
        """Nodal translations, shape (n_nodes, dim)."""
        result = self._require_result()
        return np.asarray(result[:self.mesh.dim]).T

    def print_summary(self):
        print(format_summary(self.result_names(), self._require_result()))

    def save_result(self, path):
        save_result(path, self.mesh, self.result_names(), self._require_result())
