"""Resolution of minimal evaluation orders over a dependency graph."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._errors import CycleDetectedError
from ._graph import CycleError, breadth_first, topological_sort

if TYPE_CHECKING:
    from collections.abc import Iterable, Set as AbstractSet

    from ._graph import DependencyGraph
    from ._variables import Variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Transient state of a single resolve call.

    Attributes:
        nodes: Arena positions of the relevant nodes, in ascending order.
        indegree: Per relevant node, the number of its ``depends_on`` edges
            that point to another relevant node.

    """

    nodes: tuple[int, ...] = ()
    indegree: dict[int, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)


class DependencyResolver:
    """Computes which variables to re-evaluate, and in which order.

    The resolver only reads the graph, so any number of resolvers or
    sessions may share one graph.
    """

    __slots__ = ("_graph",)

    def __init__(self, graph: DependencyGraph) -> None:
        self._graph = graph

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def _positions(self, variables: Iterable[Variable]) -> list[int]:
        positions: list[int] = []
        for variable in variables:
            position = self._graph.index_of(variable.id)
            if position is None:
                logger.debug("Ignoring %s: no node in the dependency graph", variable.name)
                continue
            positions.append(position)
        return sorted(positions)

    def predecessors(self, dependents: AbstractSet[Variable]) -> frozenset[int]:
        """Arena positions of every node required to compute ``dependents``.

        The dependents themselves are included.
        """
        graph = self._graph

        def depends_on(position: int) -> list[int]:
            return [p for dep in graph.nodes[position].depends_on if (p := graph.index_of(dep)) is not None]

        return frozenset(breadth_first(self._positions(dependents), depends_on))

    def followers(self, independents: AbstractSet[Variable], required: AbstractSet[int]) -> frozenset[int]:
        """Restrict ``required`` to the nodes reachable from ``independents``.

        Independents outside ``required`` are dropped.
        """
        graph = self._graph

        def modifies(position: int) -> list[int]:
            return [p for dep in graph.nodes[position].modifies if (p := graph.index_of(dep)) is not None]

        return frozenset(breadth_first(self._positions(independents), modifies, within=required))

    def context(self, independents: AbstractSet[Variable], dependents: AbstractSet[Variable]) -> ResolutionContext:
        """Build the relevant subgraph and its in-degree table for a query."""
        required = self.predecessors(dependents)
        relevant = self.followers(independents, required)
        logger.debug(
            "Resolving %d independents against %d dependents: %d required, %d relevant",
            len(independents),
            len(dependents),
            len(required),
            len(relevant),
        )

        counters = self._graph.reset_counters()
        for position in relevant:
            for dep in self._graph.nodes[position].depends_on:
                dep_position = self._graph.index_of(dep)
                if dep_position is None or dep_position not in relevant:
                    counters[position] -= 1
        return ResolutionContext(
            nodes=tuple(sorted(relevant)),
            indegree={position: counters[position] for position in sorted(relevant)},
        )

    def order(self, context: ResolutionContext) -> list[Variable]:
        """Topologically order the nodes of a resolution context.

        Ties are broken by arena position. The pass starts from the
        context's in-degree counters, which are left untouched.

        Raises:
            CycleDetectedError: If the context contains a circular dependency.

        """
        graph = self._graph
        relevant = frozenset(context.nodes)
        successors = {
            position: [p for dep in graph.nodes[position].modifies if (p := graph.index_of(dep)) in relevant]
            for position in context.nodes
        }
        try:
            ordered = topological_sort(dict.fromkeys(context.nodes, ()), successors, indegree=context.indegree)
        except CycleError as e:
            raise CycleDetectedError(graph.nodes[position].variable for position in e.remaining) from e
        return [graph.nodes[position].variable for position in ordered]

    def resolve(self, independents: AbstractSet[Variable], dependents: AbstractSet[Variable]) -> list[Variable]:
        """Return the minimal update list for a pair of variable sets.

        The list holds every variable that is both transitively required by
        ``dependents`` and transitively affected by ``independents``, each
        listed after all the variables it reads.

        Args:
            independents: Externally supplied variables that changed.
            dependents: Variables whose values are needed.

        Returns:
            Variables in evaluation order.

        Raises:
            CycleDetectedError: If the relevant variables depend on each
                other circularly.

        """
        return self.order(self.context(independents, dependents))
