"""Expression tree and dependency extraction.

Expressions are only ever inspected here, never evaluated. The
``DirectDependencies`` analyzer reports which variables an expression reads,
which is all the dependency graph needs to know about it.
"""

from __future__ import annotations

import ast
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ._errors import ExpressionError

if TYPE_CHECKING:
    from collections.abc import Callable, Set as AbstractSet

    from ._variables import Variable

logger = logging.getLogger(__name__)


class Expression:
    pass


@dataclass(frozen=True, slots=True)
class Literal(Expression):
    value: float


@dataclass(frozen=True, slots=True)
class Reference(Expression):
    variable_id: int
    name: str


@dataclass(frozen=True, slots=True)
class UnaryOp(Expression):
    op: str
    operand: Expression


@dataclass(frozen=True, slots=True)
class BinaryOp(Expression):
    op: str
    left: Expression
    right: Expression


@dataclass(frozen=True, slots=True)
class Call(Expression):
    function: str
    args: tuple[Expression, ...]


class ExpressionAnalyzer(Protocol):
    """Extracts the ids of variables an expression reads directly."""

    def direct_dependencies(self, expression: Any) -> AbstractSet[int]: ...


class DirectDependencies:
    """Default analyzer for ``Expression`` trees.

    ``None`` (an externally supplied variable) has no dependencies. Anything
    that is not an ``Expression`` is treated as an opaque value without
    references.
    """

    def direct_dependencies(self, expression: Any) -> frozenset[int]:
        found: set[int] = set()
        stack: list[Any] = [expression]
        while stack:
            match stack.pop():
                case Reference(variable_id=variable_id):
                    found.add(variable_id)
                case UnaryOp(operand=operand):
                    stack.append(operand)
                case BinaryOp(left=left, right=right):
                    stack.extend((left, right))
                case Call(args=args):
                    stack.extend(args)
                case _:
                    pass
        return frozenset(found)


def references(expression: Expression) -> frozenset[int]:
    """Shorthand for ``DirectDependencies().direct_dependencies``."""
    return DirectDependencies().direct_dependencies(expression)


_BINARY_OPS: dict[type[ast.operator], str] = {
    ast.Add: "+",
    ast.Sub: "-",
    ast.Mult: "*",
    ast.Div: "/",
    ast.Pow: "**",
    ast.Mod: "%",
}

_UNARY_OPS: dict[type[ast.unaryop], str] = {
    ast.UAdd: "+",
    ast.USub: "-",
}


MAX_EXPRESSION_DEPTH = 200
"""Deepest operator nesting ``parse_expression`` accepts."""


def parse_expression(text: str, resolve: Callable[[str], Variable | None]) -> Expression:
    """Parse an arithmetic expression string into an ``Expression`` tree.

    The string is parsed with Python's ``ast`` module in ``eval`` mode and
    converted node by node; it is never compiled or executed.

    Args:
        text: The expression, e.g. ``"2 * pi * r"``.
        resolve: Maps a name to the variable it refers to, or ``None``
            when the name is unknown.

    Returns:
        The expression tree.

    Raises:
        ExpressionError: On syntax errors, unsupported constructs, unknown
            names, or nesting deeper than ``MAX_EXPRESSION_DEPTH``.

    Example:
        >>> parse_expression("x + 1", {"x": x}.get)
        BinaryOp(op='+', left=Reference(variable_id=3, name='x'), right=Literal(value=1))

    """
    try:
        tree = ast.parse(text.strip(), mode="eval")
    except SyntaxError as e:
        msg = f"Invalid expression '{text}': {e.msg}"
        raise ExpressionError(msg) from e
    except (RecursionError, MemoryError) as e:
        msg = f"Expression is nested too deeply to parse ({len(text)} characters)"
        raise ExpressionError(msg) from e

    # Post-order walk: a node is pushed once to expand its operands and once
    # more (``expanded``) to build it from the converted operands on ``values``.
    values: list[Expression] = []
    stack: list[tuple[ast.expr, int, bool]] = [(tree.body, 1, False)]
    while stack:
        node, depth, expanded = stack.pop()
        if depth > MAX_EXPRESSION_DEPTH:
            msg = f"Expression is nested too deeply (more than {MAX_EXPRESSION_DEPTH} levels)"
            raise ExpressionError(msg)

        if expanded:
            match node:
                case ast.UnaryOp(op=op):
                    values.append(UnaryOp(_UNARY_OPS[type(op)], values.pop()))
                case ast.BinOp(op=op):
                    right = values.pop()
                    left = values.pop()
                    values.append(BinaryOp(_BINARY_OPS[type(op)], left, right))
                case ast.Call(func=ast.Name(id=function), args=args):
                    start = len(values) - len(args)
                    operands = tuple(values[start:])
                    del values[start:]
                    values.append(Call(function, operands))
            continue

        match node:
            case ast.Constant(value=bool()):
                msg = f"Boolean literals are not supported in expression '{text}'"
                raise ExpressionError(msg)
            case ast.Constant(value=int() | float() as value):
                values.append(Literal(value))
            case ast.Name(id=name):
                variable = resolve(name)
                if variable is None:
                    msg = f"Unknown variable '{name}' in expression '{text}'"
                    raise ExpressionError(msg)
                values.append(Reference(variable_id=variable.id, name=variable.name))
            case ast.UnaryOp(op=op, operand=operand) if type(op) in _UNARY_OPS:
                stack.extend(((node, depth, True), (operand, depth + 1, False)))
            case ast.BinOp(left=left, op=op, right=right) if type(op) in _BINARY_OPS:
                stack.extend(((node, depth, True), (right, depth + 1, False), (left, depth + 1, False)))
            case ast.Call(func=ast.Name(), args=args, keywords=[]):
                stack.append((node, depth, True))
                stack.extend((arg, depth + 1, False) for arg in reversed(args))
            case _:
                msg = f"Unsupported syntax ({type(node).__name__}) in expression '{text}'"
                raise ExpressionError(msg)

    (expression,) = values
    logger.debug("Parsed expression %r", text)
    return expression
