"""Dependency graphs and evaluation orders for expression-defined variables."""

__all__ = [
    "BinaryOp",
    "Call",
    "CycleDetectedError",
    "DependencyGraph",
    "DependencyResolver",
    "DirectDependencies",
    "DuplicateVariableError",
    "Expression",
    "ExpressionAnalyzer",
    "ExpressionError",
    "GraphNode",
    "Literal",
    "ModelFileError",
    "Reference",
    "ResolutionContext",
    "ScopeNode",
    "UnaryOp",
    "UpdateSession",
    "VardepsError",
    "Variable",
    "VariableScope",
    "build_scope_tree",
    "load_scope_tree",
    "parse_expression",
]

from ._errors import (
    CycleDetectedError,
    DuplicateVariableError,
    ExpressionError,
    ModelFileError,
    VardepsError,
)
from ._expression import (
    BinaryOp,
    Call,
    DirectDependencies,
    Expression,
    ExpressionAnalyzer,
    Literal,
    Reference,
    UnaryOp,
    parse_expression,
)
from ._graph import DependencyGraph, GraphNode
from ._io import build_scope_tree, load_scope_tree
from ._resolver import DependencyResolver, ResolutionContext
from ._session import UpdateSession
from ._variables import ScopeNode, Variable, VariableScope
