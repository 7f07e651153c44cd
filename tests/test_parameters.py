"""Parameter records: directions, priority order, variables and options."""

import numpy as np
import pytest

from statfem.assembly import apply_boundary_conditions
from statfem.errors import ConfigError, EvaluationError, ParseError
from statfem.mesh import rectangle_mesh
from statfem.parameters import (
    ALL_DIRECTIONS,
    Direction,
    FEMParameters,
    Parameter,
    ParamType,
    parse_direction,
)
from statfem.solvers import DenseSolver


class TestParamType:

    @pytest.mark.parametrize("name", ["YoungModulus", "YOUNG_MODULUS"])
    def test_from_name(self, name):
        assert ParamType.from_name(name) is ParamType.YOUNG_MODULUS

    def test_unknown(self):
        with pytest.raises(KeyError):
            ParamType.from_name("Density")


class TestDirection:

    @pytest.mark.parametrize("value, expected", [
        ("X|Y", Direction.X | Direction.Y),
        (" x | z ", Direction.X | Direction.Z),
        ("Z", Direction.Z),
        ("", Direction(0)),
        (3, Direction.X | Direction.Y),
        (7, ALL_DIRECTIONS),
        (0, Direction(0)),
        (Direction.Y, Direction.Y),
    ])
    def test_parse(self, value, expected):
        assert parse_direction(value) == expected

    @pytest.mark.parametrize("value", ["W", "X|", "X,Y", 8, -1, True, 2.0, None])
    def test_invalid(self, value):
        with pytest.raises(ConfigError, match="invalid direction"):
            parse_direction(value)

    def test_directions_are_clipped_to_dimension(self):
        param = Parameter(ParamType.POINT_LOAD, "1", "", "X|Z")
        assert param.directions(2) == [0]
        assert param.directions(3) == [0, 2]


class TestParameter:

    def test_empty_predicate_holds_everywhere(self):
        param = Parameter(ParamType.YOUNG_MODULUS, "1")
        assert param.holds_at([123.0, -4.0])

    def test_value_and_predicate(self):
        param = Parameter(ParamType.VOLUME_LOAD, "2 * x + y", "x >= 1 and y < 0")
        assert param.value_at([1.5, -1.0]) == 2.0
        assert param.holds_at([1.5, -1.0])
        assert not param.holds_at([0.5, -1.0])

    def test_compile_reports_unknown_names(self):
        param = Parameter(ParamType.YOUNG_MODULUS, "1 + z")
        with pytest.raises(ParseError, match="undefined variable: z"):
            param.compile(2)
        param.compile(3)

    def test_compiled_once_per_dimension(self):
        param = Parameter(ParamType.YOUNG_MODULUS, "x", "x > 0")
        param.compile(2)
        cached = dict(param._compiled)
        param.value_at([1.0, 2.0])
        assert param._compiled == cached

    def test_evaluation_error_propagates(self):
        param = Parameter(ParamType.POINT_LOAD, "1 / x", "", Direction.X)
        with pytest.raises(EvaluationError):
            param.value_at([0.0])


class TestFEMParameters:

    def test_first_match_wins(self):
        params = FEMParameters()
        params.add_young_modulus("2 * 203200", "x > 5")
        params.add_young_modulus("203200")
        assert params.get_param_value([7.0, 0.0], ParamType.YOUNG_MODULUS) == 406400.0
        assert params.get_param_value([1.0, 0.0], ParamType.YOUNG_MODULUS) == 203200.0

    def test_unmatched_is_zero(self):
        params = FEMParameters()
        params.add_thickness("0.5", "x < 0")
        assert params.get_param_value([1.0], ParamType.THICKNESS) == 0.0
        assert params.get_param_value([1.0], ParamType.POISSON_RATIO) == 0.0

    def test_variables(self):
        params = FEMParameters()
        params.add_variable("L", 10)
        params.add_variable("E0", "2e5")
        params.add_young_modulus("E0 * (1 + x / L)")
        params.compile(1)
        assert params.get_param_value([5.0], ParamType.YOUNG_MODULUS) == pytest.approx(3e5)

    def test_invalid_variable_name(self):
        with pytest.raises(ConfigError, match="invalid variable name"):
            FEMParameters().add_variable("1L", 1.0)

    def test_of_type_keeps_order(self):
        params = FEMParameters()
        a = params.add_surface_load("1", "x == 0", Direction.X)
        params.add_young_modulus("1")
        b = params.add_pressure_load("2")
        c = params.add_surface_load("3", "", Direction.Y)
        assert params.of_type(ParamType.SURFACE_LOAD, ParamType.PRESSURE_LOAD) == [a, b, c]
        assert b.direction == ALL_DIRECTIONS
        assert params.has_parameter(ParamType.YOUNG_MODULUS)
        assert not params.has_parameter(ParamType.THICKNESS)

    def test_options(self):
        params = FEMParameters()
        params.set_eps(1e-8)
        params.set_num_threads(4)
        assert (params.eps, params.num_threads) == (1e-8, 4)

    @pytest.mark.parametrize("eps", [0.0, -1e-10])
    def test_invalid_eps(self, eps):
        with pytest.raises(ConfigError, match="eps"):
            FEMParameters().set_eps(eps)

    @pytest.mark.parametrize("n", [0, -2, 1.5, True])
    def test_invalid_threads(self, n):
        with pytest.raises(ConfigError, match="threads"):
            FEMParameters().set_num_threads(n)


class TestPredicateSelection:
    """Exact float comparison decides which vertices a record selects."""

    @pytest.fixture
    def mesh(self):
        # bottom edge nodes 0..4 at x = -1, -0.5, 0, 0.5, 1
        return rectangle_mesh(2.0, 1.0, 4, 2, origin=(-1.0, 0.0))

    @staticmethod
    def _selected(mesh, param):
        return [n for n, x in enumerate(mesh.nodes) if param.holds_at(x)]

    def test_selects_expected_vertices(self, mesh):
        param = Parameter(ParamType.BOUNDARY_CONDITION, "0", "y == 0 and x >= 0", "X|Y")
        assert self._selected(mesh, param) == [2, 3, 4]

    def test_tiny_offset_drops_vertex(self, mesh):
        mesh.nodes[3, 1] += 1e-15
        param = Parameter(ParamType.BOUNDARY_CONDITION, "0", "y == 0 and x >= 0", "X|Y")
        assert self._selected(mesh, param) == [2, 4]

    def test_fixed_dof_count(self, mesh):
        params = FEMParameters()
        params.add_boundary_condition("0", "y == 0 and x >= 0", Direction.X | Direction.Y)
        solver = DenseSolver(mesh.n_nodes * mesh.dof)
        assert apply_boundary_conditions(mesh, params, solver, verbose=False) == 6

        mesh.nodes[3, 1] += 1e-15
        solver = DenseSolver(mesh.n_nodes * mesh.dof)
        assert apply_boundary_conditions(mesh, params, solver, verbose=False) == 4
        np.testing.assert_array_equal(solver.f, 0.0)
