"""Dependency graph over the non-constant variables of a scope tree."""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vardeps._errors import DuplicateVariableError
from vardeps._expression import DirectDependencies

if TYPE_CHECKING:
    from collections.abc import Iterator

    from vardeps._expression import ExpressionAnalyzer
    from vardeps._variables import ScopeNode, Variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphNode:
    """A variable together with its direct edges.

    Attributes:
        variable: The variable this node stands for.
        depends_on: Ids of the variables its expression reads directly. May
            include ids without a node (constants), which count as satisfied.
        modifies: Ids of the nodes whose ``depends_on`` contains this node's id.

    """

    variable: Variable
    depends_on: frozenset[int]
    modifies: frozenset[int] = frozenset()

    @property
    def id(self) -> int:
        return self.variable.id


@dataclass(frozen=True, slots=True)
class DependencyGraph:
    """An immutable graph of the non-constant variables of a scope tree.

    Nodes are stored in an arena (``nodes``) in scope-tree visit order; the
    ``_index`` mapping translates a variable id into its arena position.
    Build a new graph whenever variables or scopes change.

    An edge from A to B means "A's value is computed from B's value":
    - ``node(a).depends_on`` contains ``b``
    - ``node(b).modifies`` contains ``a``

    Attributes:
        nodes: Graph nodes in arena order.
        scope_root: The scope tree the graph was built from, if any.

    """

    nodes: tuple[GraphNode, ...] = ()
    scope_root: ScopeNode | None = field(default=None, compare=False)
    _index: dict[int, int] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def build(
        cls,
        scope_root: ScopeNode,
        analyzer: ExpressionAnalyzer | None = None,
    ) -> DependencyGraph:
        """Build the graph for every non-constant variable in a scope tree.

        Scopes are visited parents first, children in their declared order.

        Args:
            scope_root: Root of the scope tree.
            analyzer: Extracts direct dependencies from expressions.
                Defaults to ``DirectDependencies``.

        Returns:
            A new DependencyGraph.

        Raises:
            DuplicateVariableError: If two variables share an id.

        """
        if analyzer is None:
            analyzer = DirectDependencies()

        variables: list[Variable] = []
        depends_on: dict[int, frozenset[int]] = {}

        work: deque[ScopeNode] = deque([scope_root])
        while work:
            scope = work.popleft()
            for variable in scope.local_variables().values():
                if variable.is_constant:
                    continue
                if variable.id in depends_on:
                    raise DuplicateVariableError(variable.id)
                depends_on[variable.id] = frozenset(analyzer.direct_dependencies(variable.expression))
                variables.append(variable)
            work.extend(scope.child_scopes())

        graph = cls.from_dependencies(variables, depends_on, scope_root=scope_root)
        logger.debug("Built dependency graph with %d nodes", len(graph))
        return graph

    @classmethod
    def from_dependencies(
        cls,
        variables: list[Variable],
        depends_on: dict[int, frozenset[int]],
        *,
        scope_root: ScopeNode | None = None,
    ) -> DependencyGraph:
        """Build a graph from variables and their direct dependencies.

        ``modifies`` is computed here as the exact inverse of ``depends_on``.
        Ids in ``depends_on`` that name no variable in ``variables`` get no
        node and no ``modifies`` entry.

        Args:
            variables: Non-constant variables in arena order.
            depends_on: Direct dependencies per variable id.
            scope_root: Optional scope tree to record on the graph.

        Raises:
            DuplicateVariableError: If two variables share an id.

        Example:
            >>> a, b = Variable("a"), Variable("b")
            >>> graph = DependencyGraph.from_dependencies([a, b], {a.id: frozenset(), b.id: frozenset({a.id})})
            >>> graph.successors(a.id) == frozenset({b.id})
            True

        """
        index: dict[int, int] = {}
        for position, variable in enumerate(variables):
            if variable.id in index:
                raise DuplicateVariableError(variable.id)
            index[variable.id] = position

        modifies: defaultdict[int, set[int]] = defaultdict(set)
        for variable in variables:
            for dep_id in depends_on.get(variable.id, frozenset()):
                if dep_id in index:
                    modifies[dep_id].add(variable.id)
                else:
                    logger.debug("Reference %d from %s has no node, treating as satisfied", dep_id, variable.name)

        nodes = tuple(
            GraphNode(
                variable=variable,
                depends_on=frozenset(depends_on.get(variable.id, frozenset())),
                modifies=frozenset(modifies.get(variable.id, ())),
            )
            for variable in variables
        )
        return cls(nodes=nodes, scope_root=scope_root, _index=index)

    def node(self, variable_id: int) -> GraphNode:
        """Get the node for a variable id.

        Raises:
            KeyError: If the id has no node (unknown or constant variable).

        """
        return self.nodes[self._index[variable_id]]

    def index_of(self, variable_id: int) -> int | None:
        """Arena position of a variable id, or ``None`` if it has no node."""
        return self._index.get(variable_id)

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._index)

    def predecessors(self, variable_id: int) -> frozenset[int]:
        """Direct dependencies of a variable (empty for ids without a node)."""
        position = self._index.get(variable_id)
        return frozenset() if position is None else self.nodes[position].depends_on

    def successors(self, variable_id: int) -> frozenset[int]:
        """Nodes that directly depend on a variable."""
        position = self._index.get(variable_id)
        return frozenset() if position is None else self.nodes[position].modifies

    def reset_counters(self) -> list[int]:
        """Return a fresh counter table indexed by arena position.

        Each entry starts at the size of the node's ``depends_on`` set. The
        table belongs to the caller; the graph keeps no working state.
        """
        return [len(node.depends_on) for node in self.nodes]

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self.nodes)

    def __contains__(self, item: object) -> bool:
        """Check if a variable (or variable id) has a node in the graph."""
        variable_id = item if isinstance(item, int) else getattr(item, "id", None)
        return variable_id in self._index

    def __iter__(self) -> Iterator[GraphNode]:
        return iter(self.nodes)
