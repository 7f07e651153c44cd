"""
Problem parameters: material data, loads and boundary conditions.

Every parameter is a record (type, value expression, predicate expression,
direction mask). Records are kept in insertion order, which is also their
priority: a material lookup returns the value of the FIRST record of the
requested type whose predicate holds at the query point.

    fem.params.add_young_modulus("2 * 203200", "x > 5")
    fem.params.add_young_modulus("203200")
    fem.params.get_param_value([7.0, 0.0], ParamType.YOUNG_MODULUS)  # -> 406400.0
    fem.params.get_param_value([1.0, 0.0], ParamType.YOUNG_MODULUS)  # -> 203200.0

Swapping the two records would make the second unreachable.

Directions are a bitmask over X=1, Y=2, Z=4; in text they are written as
``"X|Y"``.
"""

import logging
from enum import Enum, IntFlag

from .config import DEFAULT_EPS, DEFAULT_THREADS
from .errors import ConfigError
from .expression import COORDINATE_NAMES, Expression, coordinate_env

log = logging.getLogger(__name__)


class ParamType(Enum):
    YOUNG_MODULUS = "YoungModulus"
    POISSON_RATIO = "PoissonRatio"
    THICKNESS = "Thickness"
    BOUNDARY_CONDITION = "BoundaryCondition"
    POINT_LOAD = "PointLoad"
    VOLUME_LOAD = "VolumeLoad"
    SURFACE_LOAD = "SurfaceLoad"
    PRESSURE_LOAD = "PressureLoad"

    @classmethod
    def from_name(cls, name):
        """Accept ``"YoungModulus"`` or ``"YOUNG_MODULUS"`` (KeyError otherwise)."""
        for member in cls:
            if name == member.value or name == member.name:
                return member
        raise KeyError(name)


class Direction(IntFlag):
    X = 1
    Y = 2
    Z = 4


ALL_DIRECTIONS = Direction.X | Direction.Y | Direction.Z


def parse_direction(value):
    """
    Direction mask from an int (0..7) or a string such as ``"X|Z"``.

    An empty string or 0 means no direction (material parameters).

    Raises
    ------
    ConfigError
        For anything else.
    """
    if isinstance(value, Direction):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        if 0 <= value <= int(ALL_DIRECTIONS):
            return Direction(value)
        raise ConfigError(f"invalid direction: {value}")
    if isinstance(value, str):
        mask = Direction(0)
        text = value.strip()
        if not text:
            return mask
        for part in text.split("|"):
            name = part.strip().upper()
            if name not in Direction.__members__:
                raise ConfigError(f"invalid direction: '{value}'")
            mask |= Direction[name]
        return mask
    raise ConfigError(f"invalid direction: {value!r}")


class Parameter:
    """
    One parameter record.

    Expressions are compiled lazily, once per coordinate dimension and set
    of variable names, and cached; compiled expressions are immutable so the
    record can be shared by producer threads.

    Parameters
    ----------
    type : ParamType
    value : str
        Value expression.
    predicate : str, optional
        Selector expression; empty means the record applies everywhere.
    direction : Direction, optional
    """

    def __init__(self, type, value, predicate="", direction=Direction(0)):
        self.type = type
        self.value = str(value).strip()
        self.predicate = str(predicate or "").strip()
        self.direction = parse_direction(direction)
        self._compiled = {}

    def __repr__(self):
        return (f"Parameter({self.type.value}, {self.value!r}, "
                f"{self.predicate!r}, {self.direction!r})")

    def _expressions(self, dim, variables):
        key = (dim, frozenset(variables))
        cached = self._compiled.get(key)
        if cached is None:
            names = set(COORDINATE_NAMES[:dim]) | set(variables)
            value = Expression(self.value, names)
            predicate = Expression(self.predicate, names) if self.predicate else None
            cached = (value, predicate)
            self._compiled[key] = cached
        return cached

    def compile(self, dim, variables=None):
        """Compile both expressions now so syntax errors surface early."""
        self._expressions(dim, variables or {})

    def value_at(self, x, variables=None):
        variables = variables or {}
        value, _ = self._expressions(len(x), variables)
        return value.evaluate(coordinate_env(x, variables))

    def holds_at(self, x, variables=None):
        """True if the predicate is empty or evaluates to 1 at x."""
        if not self.predicate:
            return True
        variables = variables or {}
        _, predicate = self._expressions(len(x), variables)
        return predicate.is_true(coordinate_env(x, variables))

    def directions(self, dim):
        """Indices 0..dim-1 selected by the direction mask."""
        return [k for k in range(dim) if self.direction & (1 << k)]


class FEMParameters:
    """
    Ordered parameter list plus solver options and user variables.

    Attributes
    ----------
    params : list of Parameter
    eps : float
        Zero threshold for results.
    num_threads : int
        Producer threads per assembly stage.
    variables : dict
        Name -> value, visible to every expression.
    """

    def __init__(self):
        self.params = []
        self.eps = DEFAULT_EPS
        self.num_threads = DEFAULT_THREADS
        self.variables = {}

    def add(self, type, value, predicate="", direction=Direction(0)):
        param = Parameter(type, value, predicate, direction)
        self.params.append(param)
        log.debug("parameter added: %r", param)
        return param

    def add_young_modulus(self, value, predicate=""):
        return self.add(ParamType.YOUNG_MODULUS, value, predicate)

    def add_poisson_ratio(self, value, predicate=""):
        return self.add(ParamType.POISSON_RATIO, value, predicate)

    def add_thickness(self, value, predicate=""):
        return self.add(ParamType.THICKNESS, value, predicate)

    def add_boundary_condition(self, value, predicate, direction):
        return self.add(ParamType.BOUNDARY_CONDITION, value, predicate, direction)

    def add_point_load(self, value, predicate, direction):
        return self.add(ParamType.POINT_LOAD, value, predicate, direction)

    def add_volume_load(self, value, predicate, direction):
        return self.add(ParamType.VOLUME_LOAD, value, predicate, direction)

    def add_surface_load(self, value, predicate, direction):
        return self.add(ParamType.SURFACE_LOAD, value, predicate, direction)

    def add_pressure_load(self, value, predicate=""):
        """Pressure acts along the boundary normal, so all directions are set."""
        return self.add(ParamType.PRESSURE_LOAD, value, predicate, ALL_DIRECTIONS)

    def add_variable(self, name, value):
        if not str(name).isidentifier():
            raise ConfigError(f"invalid variable name: '{name}'")
        self.variables[str(name)] = float(value)

    def set_eps(self, eps):
        eps = float(eps)
        if not eps > 0.0:
            raise ConfigError(f"eps must be positive, got {eps}")
        self.eps = eps

    def set_num_threads(self, n):
        if isinstance(n, bool) or int(n) != n or n < 1:
            raise ConfigError(f"number of threads must be a positive integer, got {n}")
        self.num_threads = int(n)

    def of_type(self, *types):
        """Records of the given type(s), in priority order."""
        return [p for p in self.params if p.type in types]

    def has_parameter(self, type):
        return any(p.type == type for p in self.params)

    def get_param_value(self, x, type):
        """
        Value of the first record of ``type`` whose predicate holds at x.

        Returns 0.0 if no record matches.
        """
        for param in self.params:
            if param.type == type and param.holds_at(x, self.variables):
                return param.value_at(x, self.variables)
        return 0.0

    def compile(self, dim):
        """Compile every expression for a mesh of dimension ``dim``."""
        for param in self.params:
            param.compile(dim, self.variables)
