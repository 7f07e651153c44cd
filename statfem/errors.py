"""
Exception hierarchy for the static FEM engine.

Every error raised by the package derives from FEMError. Errors caused by
bad user input additionally derive from ValueError, arithmetic failures
from ArithmeticError and file problems from OSError, so callers may catch
either the package class or the built-in category.

    FEMError
     +-- MeshFormatError   unknown format, malformed section
     +-- ParseError        syntax error, unbalanced brackets, undefined variable
     +-- EvaluationError   division by zero, sqrt of a negative number
     +-- ConfigError       missing material data, invalid direction, ...
     +-- NumericError      matrix not positive definite, near singular, bad element
     +-- FEMIOError        cannot open or create a file
"""


class FEMError(Exception):
    """Base class for all errors raised by statfem."""


class MeshFormatError(FEMError, ValueError):
    """Mesh file has an unknown format or a malformed section."""


class ParseError(FEMError, ValueError):
    """Expression text could not be compiled."""


class EvaluationError(FEMError, ArithmeticError):
    """Compiled expression failed while being evaluated."""


class ConfigError(FEMError, ValueError):
    """Problem definition is incomplete or inconsistent."""


class NumericError(FEMError, ArithmeticError):
    """Linear algebra failure (factorization, singular element)."""


class FEMIOError(FEMError, OSError):
    """Mesh, problem or result file could not be read or written."""
