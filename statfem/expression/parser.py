"""
Recursive-descent compiler for the parameter expression language.

Expressions describe spatially varying quantities (material data, loads,
prescribed displacements) and region selectors (predicates) as functions
of the coordinates x, y, z and user variables.

Grammar, lowest precedence first:

    or_expr   := and_expr { 'or' and_expr }
    and_expr  := not_expr { 'and' not_expr }
    not_expr  := [ 'not' ] cmp_expr
    cmp_expr  := add_expr { ('=='|'!='|'<'|'<='|'>'|'>=') add_expr }
    add_expr  := mul_expr { ('+'|'-') mul_expr }
    mul_expr  := pow_expr { ('*'|'/') pow_expr }
    pow_expr  := unary { '**' unary }
    unary     := [ '+' | '-' ] bracket
    bracket   := '(' or_expr ')' | primary
    primary   := NUMBER | VARIABLE | FUNCTION '(' add_expr ')'

Note that ``**`` groups to the left and binds the sign of its left operand
(``-2**2 == 4``), and that comparisons of floats are exact: ``y == 0`` only
selects points whose y coordinate is exactly zero.

Usage:
    expr = compile_expression("E0 * (1 + x / L)", names=("x", "y", "E0", "L"))
    expr.evaluate({"x": 0.5, "y": 0.0, "E0": 2.0e5, "L": 10.0})
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping

from ..errors import ParseError
from .nodes import FUNCTIONS, Binary, Function, Node, Number, Unary, Variable


# Token kinds
DELIMITER = "delimiter"
NUMBER = "number"
NAME = "name"
FUNCTION = "function"
END = "end"

_DIGITS = "0123456789"
_DELIMITER_CHARS = "+-*/()=^<>!"
_DOUBLE_DELIMITERS = {"==", "!=", "<=", ">=", "**"}
_SINGLE_DELIMITERS = {"+", "-", "*", "/", "(", ")", "<", ">"}
_KEYWORDS = {"and", "or", "not"}
_COMPARISONS = {"==", "!=", "<", "<=", ">", ">="}

COORDINATE_NAMES = ("x", "y", "z")


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    position: int


def tokenize(text: str) -> List[Token]:
    """Split expression text into tokens.

    Raises
    ------
    ParseError
        On characters that do not start a token, a lone ``=``, ``!`` or
        ``^``, or an exponent marker without digits.
    """
    tokens = []
    pos = 0
    n = len(text)
    while True:
        while pos < n and text[pos] in " \t":
            pos += 1
        if pos >= n:
            tokens.append(Token(END, "", pos))
            return tokens

        start = pos
        ch = text[pos]
        if ch in _DELIMITER_CHARS:
            pair = text[pos:pos + 2]
            if pair in _DOUBLE_DELIMITERS:
                pos += 2
                tokens.append(Token(DELIMITER, pair, start))
            elif ch in _SINGLE_DELIMITERS:
                pos += 1
                tokens.append(Token(DELIMITER, ch, start))
            else:
                raise ParseError(f"syntax error at position {start}: '{ch}'")
        elif ch in _DIGITS:
            while pos < n and text[pos] in _DIGITS:
                pos += 1
            if pos < n and text[pos] == ".":
                pos += 1
                while pos < n and text[pos] in _DIGITS:
                    pos += 1
            if pos < n and text[pos] in "eE":
                pos += 1
                if pos < n and text[pos] in "+-":
                    pos += 1
                digits = pos
                while pos < n and text[pos] in _DIGITS:
                    pos += 1
                if pos == digits:
                    raise ParseError(
                        f"syntax error at position {start}: bad exponent in "
                        f"'{text[start:pos]}'"
                    )
            tokens.append(Token(NUMBER, text[start:pos], start))
        elif ch.isalpha() or ch == "_":
            while pos < n and (text[pos].isalnum() or text[pos] == "_"):
                pos += 1
            word = text[start:pos]
            if word in _KEYWORDS:
                tokens.append(Token(DELIMITER, word, start))
            elif word.lower() in FUNCTIONS:
                tokens.append(Token(FUNCTION, word.lower(), start))
            else:
                tokens.append(Token(NAME, word, start))
        else:
            raise ParseError(f"syntax error at position {start}: '{ch}'")


class _Parser:
    """Single-use parser over a token list."""

    def __init__(self, tokens, names):
        self.tokens = tokens
        self.names = names
        self.index = 0

    @property
    def token(self):
        return self.tokens[self.index]

    def _is(self, *texts):
        tok = self.token
        return tok.kind == DELIMITER and tok.text in texts

    def _advance(self):
        tok = self.tokens[self.index]
        if tok.kind != END:
            self.index += 1
        return tok

    def parse(self) -> Node:
        if self.token.kind == END:
            raise ParseError("syntax error: empty expression")
        node = self.or_expr()
        if self._is(")"):
            raise ParseError("unbalanced brackets")
        if self.token.kind != END:
            raise ParseError(
                f"syntax error at position {self.token.position}: "
                f"unexpected '{self.token.text}'"
            )
        return node

    def or_expr(self):
        node = self.and_expr()
        while self._is("or"):
            self._advance()
            node = Binary("or", node, self.and_expr())
        return node

    def and_expr(self):
        node = self.not_expr()
        while self._is("and"):
            self._advance()
            node = Binary("and", node, self.not_expr())
        return node

    def not_expr(self):
        if self._is("not"):
            self._advance()
            return Unary("not", self.cmp_expr())
        return self.cmp_expr()

    def cmp_expr(self):
        node = self.add_expr()
        while self.token.kind == DELIMITER and self.token.text in _COMPARISONS:
            op = self._advance().text
            node = Binary(op, node, self.add_expr())
        return node

    def add_expr(self):
        node = self.mul_expr()
        while self._is("+", "-"):
            op = self._advance().text
            node = Binary(op, node, self.mul_expr())
        return node

    def mul_expr(self):
        node = self.pow_expr()
        while self._is("*", "/"):
            op = self._advance().text
            node = Binary(op, node, self.pow_expr())
        return node

    def pow_expr(self):
        node = self.unary()
        while self._is("**"):
            self._advance()
            node = Binary("**", node, self.unary())
        return node

    def unary(self):
        if self._is("+", "-"):
            op = self._advance().text
            return Unary(op, self.bracket())
        return self.bracket()

    def bracket(self):
        if self._is("("):
            self._advance()
            node = self.or_expr()
            if not self._is(")"):
                raise ParseError("unbalanced brackets")
            self._advance()
            return node
        return self.primary()

    def primary(self):
        tok = self.token
        if tok.kind == NUMBER:
            self._advance()
            return Number(float(tok.text))
        if tok.kind == NAME:
            if tok.text not in self.names:
                raise ParseError(f"undefined variable: {tok.text}")
            self._advance()
            return Variable(tok.text)
        if tok.kind == FUNCTION:
            return self.function()
        if tok.kind == END:
            raise ParseError("syntax error: unexpected end of expression")
        raise ParseError(
            f"syntax error at position {tok.position}: unexpected '{tok.text}'"
        )

    def function(self):
        name = self._advance().text
        if not self._is("("):
            raise ParseError(f"syntax error: '(' expected after '{name}'")
        self._advance()
        argument = self.add_expr()
        if not self._is(")"):
            raise ParseError(f"syntax error: ')' expected to close '{name}('")
        self._advance()
        return Function(name, argument)


class Expression:
    """A compiled expression.

    Parameters
    ----------
    text : str
        Source text. Must not be empty; an empty predicate means "always
        true" and has to be handled by the caller.
    names : iterable of str
        Variable names the expression may reference.

    Raises
    ------
    ParseError
        If the text is not a valid expression or references an unknown name.
    """

    __slots__ = ("text", "names", "root")

    def __init__(self, text: str, names: Iterable[str] = COORDINATE_NAMES):
        self.text = text
        self.names = frozenset(names)
        self.root = _Parser(tokenize(text), self.names).parse()

    def evaluate(self, env: Mapping[str, float]) -> float:
        """Evaluate against ``env``; raises EvaluationError on arithmetic faults."""
        return self.root.evaluate(env)

    def is_true(self, env: Mapping[str, float]) -> bool:
        return self.evaluate(env) == 1.0

    def __repr__(self):
        return f"Expression({self.text!r})"


def compile_expression(text, names=COORDINATE_NAMES):
    return Expression(text, names)


def coordinate_env(x, variables=None):
    """Build an evaluation environment from a point and user variables.

    The first ``len(x)`` of x, y, z are bound to the point coordinates;
    user variables are added on top (a user variable named like a
    coordinate is shadowed by the coordinate).
    """
    env = dict(variables) if variables else {}
    for name, value in zip(COORDINATE_NAMES, x):
        env[name] = float(value)
    return env


def evaluate(text, env):
    """Compile ``text`` against the names in ``env`` and evaluate it once."""
    return Expression(text, env.keys()).evaluate(env)
