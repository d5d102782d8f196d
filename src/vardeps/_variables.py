"""Variables and the scope tree that owns them."""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ._errors import DuplicateVariableError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence

_id_counter = itertools.count(1)


def _next_id() -> int:
    return next(_id_counter)


@dataclass(frozen=True, slots=True, eq=False)
class Variable:
    """A named value defined by an expression.

    Variables compare and hash by ``id`` only, so a set of variables is
    deduplicated by identifier.

    Attributes:
        name: Display name, usually the dotted scope path of the variable.
        expression: The defining expression. Opaque to the dependency graph,
            which only hands it to an ExpressionAnalyzer. ``None`` for
            externally supplied variables.
        constant: Constant variables never become graph nodes.
        id: Unique identifier. Assigned from a process-wide counter when omitted.

    """

    name: str
    expression: Any = None
    constant: bool = False
    id: int = field(default_factory=_next_id)

    @property
    def is_constant(self) -> bool:
        return self.constant

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variable):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Variable({self.name!r}, id={self.id})"


@runtime_checkable
class ScopeNode(Protocol):
    """Read-only view of one node in a scope tree."""

    def local_variables(self) -> Mapping[int, Variable]: ...

    def child_scopes(self) -> Sequence[ScopeNode]: ...


@dataclass(slots=True, eq=False)
class VariableScope:
    """A scope holding variables and nested child scopes."""

    name: str
    parent: VariableScope | None = field(default=None, repr=False)
    _variables: dict[int, Variable] = field(default_factory=dict, repr=False)
    _by_name: dict[str, Variable] = field(default_factory=dict, repr=False)
    _children: list[VariableScope] = field(default_factory=list, repr=False)

    def add_variable(self, variable: Variable, local_name: str | None = None) -> Variable:
        """Register a variable in this scope.

        Args:
            variable: The variable to add.
            local_name: Name used for lookups from expressions. Defaults to
                the last dotted component of ``variable.name``.

        Returns:
            The added variable.

        Raises:
            DuplicateVariableError: If a variable with the same id is already in this scope.
            KeyError: If the local name is already taken in this scope.

        """
        if variable.id in self._variables:
            raise DuplicateVariableError(variable.id)
        key = local_name if local_name is not None else variable.name.rpartition(".")[2]
        if key in self._by_name:
            msg = f"Variable '{key}' already exists in scope '{self.path or self.name}'."
            raise KeyError(msg)
        self._variables[variable.id] = variable
        self._by_name[key] = variable
        return variable

    def add_child(self, name: str) -> VariableScope:
        """Create and attach a child scope."""
        if any(child.name == name for child in self._children):
            msg = f"Scope '{name}' already exists in scope '{self.path or self.name}'."
            raise KeyError(msg)
        child = VariableScope(name=name, parent=self)
        self._children.append(child)
        return child

    def child(self, name: str) -> VariableScope:
        for child in self._children:
            if child.name == name:
                return child
        msg = f"No scope '{name}' in scope '{self.path or self.name}'."
        raise KeyError(msg)

    def local_variables(self) -> Mapping[int, Variable]:
        return self._variables

    def child_scopes(self) -> Sequence[VariableScope]:
        return tuple(self._children)

    def get(self, name: str) -> Variable:
        """Get a variable declared directly in this scope.

        Raises:
            KeyError: If the name is not declared here.

        """
        return self._by_name[name]

    def lookup(self, name: str) -> Variable | None:
        """Resolve a name lexically: this scope first, then its ancestors."""
        scope: VariableScope | None = self
        while scope is not None:
            if name in scope._by_name:
                return scope._by_name[name]
            scope = scope.parent
        return None

    @property
    def path(self) -> str:
        """Dotted path of this scope from the root. Empty for the root."""
        parts: list[str] = []
        scope: VariableScope | None = self
        while scope is not None and scope.parent is not None:
            parts.append(scope.name)
            scope = scope.parent
        return ".".join(reversed(parts))

    def qualify(self, local_name: str) -> str:
        """Return the dotted path a variable declared here would have."""
        return f"{self.path}.{local_name}" if self.path else local_name

    def walk(self) -> Iterator[VariableScope]:
        """Yield this scope and all descendants, parents before children."""
        queue: deque[VariableScope] = deque([self])
        while queue:
            scope = queue.popleft()
            yield scope
            queue.extend(scope._children)

    def find(self, dotted_path: str) -> Variable:
        """Find a variable by its dotted path relative to this scope.

        Example:
            >>> root.find("species.density")
            Variable('species.density', id=7)

        Raises:
            KeyError: If any component of the path does not exist.

        """
        *scope_names, var_name = dotted_path.split(".")
        scope = self
        for scope_name in scope_names:
            scope = scope.child(scope_name)
        try:
            return scope.get(var_name)
        except KeyError:
            msg = f"No variable '{dotted_path}' in scope '{self.path or self.name}'."
            raise KeyError(msg) from None
