"""
Configuration for the static FEM engine
=========================================

Two layers:
  Defaults:      numeric constants used when a problem does not override them
  Problem file:  JSON description of one analysis (mesh, parameters, options)

Problem file layout::

    {
      "mesh": "beam.mesh",
      "output": "beam.res",
      "threads": 2,
      "eps": 1e-10,
      "solver": "dense",
      "variables": {"L": 10.0},
      "parameters": [
        {"type": "YoungModulus", "value": "203200"},
        {"type": "BoundaryCondition", "value": "0",
         "predicate": "x == 0", "direction": "X|Y"},
        "SurfaceLoad: -1; y == 0.25; Y"
      ]
    }

A parameter is either an object or a compact line
``"<Type>: value; predicate; directions"``. Relative ``mesh`` and ``output``
paths are taken relative to the problem file.

Usage:
    from statfem.config import load_problem
    problem = load_problem("beam.json")
    fem = problem.build()
    fem.calculate()
"""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import ConfigError, FEMIOError


# =============================================================================
# DEFAULTS
# =============================================================================

# --- NUMERICS ---
DEFAULT_EPS = 1.0e-10             # zero threshold for results and factor pivots
SHAPE_EPS = 1.0e-10               # pivot threshold when inverting shape matrices
MSH_PLANAR_EPS = 1.0e-10          # |z| below this keeps a Gmsh mesh two-dimensional

# --- SHELLS ---
DRILLING_FACTOR = 1.0e-3          # drilling stiffness = factor * max diagonal

# --- EXECUTION ---
DEFAULT_THREADS = 1
DEFAULT_SOLVER = "dense"
SOLVERS = ("dense", "sparse")

# --- RESULT FILE ---
RESULT_SIGNATURE = "FEM Solver Results File"


# =============================================================================
# PROBLEM FILE
# =============================================================================

@dataclass
class ParameterSpec:
    """One parameter record as written in a problem file."""
    type: str
    value: str
    predicate: str = ""
    direction: object = 0


@dataclass
class ProblemConfig:
    """Parsed problem file.

    Attributes
    ----------
    mesh : str
        Path of the mesh file (.mesh, .vol or .msh).
    output : str or None
        Path of the result file, None to skip writing.
    threads : int
        Number of producer threads per assembly stage.
    eps : float
        Zero threshold.
    solver : str
        'dense' or 'sparse'.
    variables : dict
        User variables available to every expression.
    parameters : list of ParameterSpec
        Parameter records in priority order.
    """
    mesh: str
    output: Optional[str] = None
    threads: int = DEFAULT_THREADS
    eps: float = DEFAULT_EPS
    solver: str = DEFAULT_SOLVER
    variables: Dict[str, float] = field(default_factory=dict)
    parameters: List[ParameterSpec] = field(default_factory=list)

    def __post_init__(self):
        if self.solver not in SOLVERS:
            raise ConfigError(
                f"unknown solver '{self.solver}', expected one of {SOLVERS}"
            )

    def build(self, verbose=True):
        """Create a StaticFEM configured from this problem.

        The mesh is loaded immediately so that format errors surface here.
        """
        from .parameters import ParamType, parse_direction
        from .solvers.static import StaticFEM

        fem = StaticFEM(verbose=verbose)
        fem.set_mesh(self.mesh)
        fem.set_eps(self.eps)
        fem.set_num_threads(self.threads)
        fem.set_solver(self.solver)
        for name, value in self.variables.items():
            fem.add_variable(name, value)
        for spec in self.parameters:
            try:
                ptype = ParamType.from_name(spec.type)
            except KeyError:
                raise ConfigError(f"unknown parameter type '{spec.type}'") from None
            fem.params.add(ptype, spec.value, spec.predicate,
                           parse_direction(spec.direction))
        return fem


def parse_condition_line(line):
    """Parse ``"<Type>: value; predicate; directions"`` into a ParameterSpec.

    Examples
    --------
    >>> parse_condition_line("BoundaryCondition: 0; x == 0; X|Y")
    ParameterSpec(type='BoundaryCondition', value='0', predicate='x == 0', direction='X|Y')
    """
    head, sep, rest = line.partition(":")
    if not sep or not head.strip():
        raise ConfigError(f"invalid condition line: '{line}'")
    fields = [part.strip() for part in rest.split(";")]
    if len(fields) > 3 or not fields[0]:
        raise ConfigError(f"invalid condition line: '{line}'")
    fields += [""] * (3 - len(fields))
    return ParameterSpec(type=head.strip(), value=fields[0],
                         predicate=fields[1], direction=fields[2] or 0)


def parse_variables(raw):
    """Accept a mapping or a list of ``"name=value"`` lines."""
    if isinstance(raw, dict):
        items = raw.items()
    elif isinstance(raw, (list, tuple)):
        items = []
        for line in raw:
            name, sep, value = str(line).partition("=")
            if not sep or not name.strip():
                raise ConfigError(f"invalid variable definition: '{line}'")
            items.append((name.strip(), value.strip()))
    else:
        raise ConfigError("variables must be an object or a list of 'name=value'")

    variables = {}
    for name, value in items:
        try:
            variables[str(name)] = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"variable '{name}' is not a number: {value!r}") from None
    return variables


def problem_from_dict(data, base_dir="."):
    """Build a ProblemConfig from decoded JSON."""
    if not isinstance(data, dict):
        raise ConfigError("problem file must contain a JSON object")
    if "mesh" not in data:
        raise ConfigError("problem file does not name a mesh")

    parameters = []
    for entry in data.get("parameters", []):
        if isinstance(entry, str):
            parameters.append(parse_condition_line(entry))
        elif isinstance(entry, dict):
            if "type" not in entry or "value" not in entry:
                raise ConfigError(f"parameter needs 'type' and 'value': {entry}")
            parameters.append(ParameterSpec(
                type=str(entry["type"]),
                value=str(entry["value"]),
                predicate=str(entry.get("predicate", "")),
                direction=entry.get("direction", 0),
            ))
        else:
            raise ConfigError(f"invalid parameter entry: {entry!r}")

    def _resolve(path):
        if path is None or os.path.isabs(path):
            return path
        return os.path.join(base_dir, path)

    try:
        threads = int(data.get("threads", DEFAULT_THREADS))
        eps = float(data.get("eps", DEFAULT_EPS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid numeric option: {exc}") from None

    return ProblemConfig(
        mesh=_resolve(data["mesh"]),
        output=_resolve(data.get("output")),
        threads=threads,
        eps=eps,
        solver=str(data.get("solver", DEFAULT_SOLVER)),
        variables=parse_variables(data.get("variables", {})),
        parameters=parameters,
    )


def load_problem(path):
    """Read a JSON problem file.

    Parameters
    ----------
    path : str
        Problem file path.

    Returns
    -------
    problem : ProblemConfig

    Raises
    ------
    FEMIOError
        If the file cannot be read.
    ConfigError
        If the JSON is invalid or a field is malformed.
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as exc:
        raise FEMIOError(f"error opening problem file '{path}': {exc.strerror}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid problem file '{path}': {exc}") from exc
    return problem_from_dict(data, base_dir=os.path.dirname(os.path.abspath(path)))
