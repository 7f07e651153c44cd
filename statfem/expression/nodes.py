"""
Operator tree for compiled expressions.

A compiled expression is an immutable tree of nodes. Evaluation walks the
tree against a variable environment (a mapping name -> float). Nothing is
cached on the nodes, so one tree can be evaluated concurrently from several
threads with different environments.

Booleans are represented as 1.0 (true) and 0.0 (false). Logical operators
treat exactly 1.0 as true.
"""

import math
import operator

from ..errors import EvaluationError


TRUE = 1.0
FALSE = 0.0


def _as_bool(value):
    return TRUE if value else FALSE


def _divide(lhs, rhs):
    if rhs == 0.0:
        raise EvaluationError("divide by zero")
    return lhs / rhs


def _power(lhs, rhs):
    try:
        return math.pow(lhs, rhs)
    except (ValueError, OverflowError, ZeroDivisionError) as exc:
        raise EvaluationError(f"invalid power {lhs!r} ** {rhs!r}: {exc}") from None


def _sqrt(value):
    if value < 0.0:
        raise EvaluationError("square root of a negative number")
    return math.sqrt(value)


def _checked(func, name):
    def wrapper(value):
        try:
            return func(value)
        except (ValueError, OverflowError) as exc:
            raise EvaluationError(f"{name}({value!r}): {exc}") from None
    return wrapper


BINARY_OPERATORS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
    "**": _power,
    "==": lambda a, b: _as_bool(a == b),
    "!=": lambda a, b: _as_bool(a != b),
    "<": lambda a, b: _as_bool(a < b),
    "<=": lambda a, b: _as_bool(a <= b),
    ">": lambda a, b: _as_bool(a > b),
    ">=": lambda a, b: _as_bool(a >= b),
    "and": lambda a, b: _as_bool(a == TRUE and b == TRUE),
    "or": lambda a, b: _as_bool(a == TRUE or b == TRUE),
}

FUNCTIONS = {
    "sqrt": _sqrt,
    "sin": _checked(math.sin, "sin"),
    "cos": _checked(math.cos, "cos"),
    "tan": _checked(math.tan, "tan"),
    "exp": _checked(math.exp, "exp"),
    "asin": _checked(math.asin, "asin"),
    "acos": _checked(math.acos, "acos"),
    "atan": math.atan,
    "abs": abs,
}


class Node:
    """Base class of all tree nodes."""

    __slots__ = ()

    def evaluate(self, env):
        raise NotImplementedError


class Number(Node):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = float(value)

    def evaluate(self, env):
        return self.value

    def __repr__(self):
        return f"Number({self.value!r})"


class Variable(Node):
    __slots__ = ("name",)

    def __init__(self, name):
        self.name = name

    def evaluate(self, env):
        try:
            return float(env[self.name])
        except KeyError:
            raise EvaluationError(f"undefined variable: {self.name}") from None

    def __repr__(self):
        return f"Variable({self.name!r})"


class Function(Node):
    __slots__ = ("name", "argument")

    def __init__(self, name, argument):
        self.name = name
        self.argument = argument

    def evaluate(self, env):
        return FUNCTIONS[self.name](self.argument.evaluate(env))

    def __repr__(self):
        return f"Function({self.name!r}, {self.argument!r})"


class Unary(Node):
    """Unary plus, unary minus and logical not."""

    __slots__ = ("op", "operand")

    def __init__(self, op, operand):
        self.op = op
        self.operand = operand

    def evaluate(self, env):
        value = self.operand.evaluate(env)
        if self.op == "-":
            return -value
        if self.op == "not":
            return FALSE if value == TRUE else TRUE
        return value

    def __repr__(self):
        return f"Unary({self.op!r}, {self.operand!r})"


class Binary(Node):
    __slots__ = ("op", "left", "right")

    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, env):
        # both sides are always evaluated, there is no short circuit
        lhs = self.left.evaluate(env)
        rhs = self.right.evaluate(env)
        return BINARY_OPERATORS[self.op](lhs, rhs)

    def __repr__(self):
        return f"Binary({self.op!r}, {self.left!r}, {self.right!r})"
