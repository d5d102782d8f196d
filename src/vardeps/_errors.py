"""Exception types raised by vardeps."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ._variables import Variable


class VardepsError(Exception):
    """Base class for all vardeps errors."""


class DuplicateVariableError(VardepsError, KeyError):
    """Raised when two variables in a scope tree share the same id."""

    def __init__(self, variable_id: int) -> None:
        self.variable_id = variable_id
        super().__init__(f"Variable id {variable_id} is already present in the dependency graph")

    def __str__(self) -> str:
        # KeyError would otherwise quote the message
        return str(self.args[0])


class CycleDetectedError(VardepsError, ValueError):
    """Raised when the relevant subgraph of a query contains a cycle."""

    def __init__(self, variables: Iterable[Variable]) -> None:
        self.variables = tuple(variables)
        names = ", ".join(v.name for v in self.variables)
        super().__init__(f"Cycle detected among variables: {names}")


class ExpressionError(VardepsError, ValueError):
    """Raised when an expression string cannot be parsed."""


class ModelFileError(VardepsError):
    """Raised when a model file is malformed."""
