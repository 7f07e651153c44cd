"""Arithmetic and boolean expressions over coordinates and user variables."""

from .nodes import Node, Number, Variable, Function, Unary, Binary, FUNCTIONS
from .parser import (
    COORDINATE_NAMES,
    Expression,
    Token,
    compile_expression,
    coordinate_env,
    evaluate,
    tokenize,
)
