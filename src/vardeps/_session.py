"""Cached update lists for repeated resolution queries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._resolver import DependencyResolver

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._graph import DependencyGraph
    from ._variables import Variable

logger = logging.getLogger(__name__)


class UpdateSession:
    """Tracks independent and dependent variables and caches their update list.

    The ordered update list is recomputed lazily, the first time it is
    requested after either set changed.

    Example:
        >>> session = UpdateSession(graph)
        >>> session.add_independent(t)
        >>> session.add_dependent(energy)
        >>> for variable in session.get_ordered_update_list():
        ...     evaluate(variable)

    """

    __slots__ = ("_dependents", "_independents", "_resolver", "_update_list", "_valid")

    def __init__(self, graph: DependencyGraph) -> None:
        self._resolver = DependencyResolver(graph)
        self._independents: set[Variable] = set()
        self._dependents: set[Variable] = set()
        self._update_list: list[Variable] = []
        self._valid = False

    @property
    def graph(self) -> DependencyGraph:
        return self._resolver.graph

    @property
    def is_valid(self) -> bool:
        """Whether the cached update list matches the current sets."""
        return self._valid

    @property
    def independents(self) -> frozenset[Variable]:
        return frozenset(self._independents)

    @property
    def dependents(self) -> frozenset[Variable]:
        return frozenset(self._dependents)

    def _invalidate(self) -> None:
        self._valid = False

    def add_independent(self, variable: Variable) -> None:
        self._independents.add(variable)
        self._invalidate()

    def add_dependent(self, variable: Variable) -> None:
        self._dependents.add(variable)
        self._invalidate()

    def add_independents(self, variables: Iterable[Variable]) -> None:
        self._independents.update(variables)
        self._invalidate()

    def add_dependents(self, variables: Iterable[Variable]) -> None:
        self._dependents.update(variables)
        self._invalidate()

    def remove_independent(self, variable: Variable) -> None:
        """Remove an independent variable.

        Raises:
            KeyError: If the variable is not an independent of this session.

        """
        self._independents.remove(variable)
        self._invalidate()

    def remove_dependent(self, variable: Variable) -> None:
        """Remove a dependent variable.

        Raises:
            KeyError: If the variable is not a dependent of this session.

        """
        self._dependents.remove(variable)
        self._invalidate()

    def clear(self) -> None:
        self._independents.clear()
        self._dependents.clear()
        self._invalidate()

    def rebind(self, graph: DependencyGraph) -> None:
        """Switch to a newly built graph, keeping both variable sets."""
        self._resolver = DependencyResolver(graph)
        self._invalidate()

    def get_ordered_update_list(self) -> list[Variable]:
        """Return the variables to re-evaluate, in evaluation order.

        Returns a copy of the cached list, so callers may modify it freely.

        Raises:
            CycleDetectedError: If the relevant variables depend on each other
                circularly. The session stays invalid in that case.

        """
        if self._valid:
            logger.debug("Using cached update list (%d variables)", len(self._update_list))
            return list(self._update_list)

        logger.debug("Update list invalid, resolving")
        self._update_list = self._resolver.resolve(self._independents, self._dependents)
        self._valid = True
        return list(self._update_list)

    def update(self, callback: Callable[[Variable], object]) -> None:
        """Call ``callback`` for every variable of the update list, in order."""
        for variable in self.get_ordered_update_list():
            callback(variable)
