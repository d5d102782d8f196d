"""Graph algorithms for dependency graph operations."""

import heapq
from collections import deque
from collections.abc import Callable, Collection, Container, Hashable, Iterable, Mapping
from typing import TypeVar

T = TypeVar("T", bound=Hashable)


class CycleError(ValueError):
    """Raised by ``topological_sort`` when no node is free of predecessors."""

    def __init__(self, remaining: Iterable[object]) -> None:
        self.remaining = tuple(remaining)
        super().__init__(f"Cycle detected in graph ({len(self.remaining)} nodes unresolved)")


def breadth_first(
    starts: Iterable[T],
    neighbors: Callable[[T], Iterable[T]],
    *,
    within: Container[T] | None = None,
) -> dict[T, None]:
    """Collect every node reachable from ``starts``, including the starts.

    Args:
        starts: Nodes to start from. Starts outside ``within`` are skipped.
        neighbors: Returns the direct neighbours of a node.
        within: If given, only nodes contained in it are visited.

    Returns:
        Insertion-ordered mapping of visited nodes (in visit order).

    Example:
        >>> edges = {"c": ["b"], "b": ["a"], "a": []}
        >>> list(breadth_first(["c"], edges.__getitem__))
        ['c', 'b', 'a']

    """
    visited: dict[T, None] = {}
    queue: deque[T] = deque()
    for start in starts:
        if start in visited or (within is not None and start not in within):
            continue
        visited[start] = None
        queue.append(start)

    while queue:
        node = queue.popleft()
        for neighbor in neighbors(node):
            if neighbor in visited or (within is not None and neighbor not in within):
                continue
            visited[neighbor] = None
            queue.append(neighbor)
    return visited


def topological_sort(
    predecessors: Mapping[T, Collection[T]],
    successors: Mapping[T, Collection[T]],
    *,
    indegree: Mapping[T, int] | None = None,
) -> list[T]:
    """Sort a graph topologically (dependencies before dependents).

    The node set is the key set of ``predecessors``; edges to nodes outside
    it are ignored. Among several ready nodes the one that comes first in
    ``predecessors`` iteration order is taken, so the result is
    reproducible for a given input.

    Args:
        predecessors: Mapping from node to the nodes it depends on.
        successors: Mapping from node to the nodes that depend on it.
        indegree: Initial count of unresolved predecessors per node. Counted
            from ``predecessors`` when omitted. The mapping is copied, never
            modified.

    Returns:
        List of nodes in topological order.

    Raises:
        CycleError: If the graph contains a cycle.

    Example:
        >>> topological_sort({"a": [], "b": ["a"]}, {"a": ["b"], "b": []})
        ['a', 'b']

    """
    rank = {node: position for position, node in enumerate(predecessors)}
    if indegree is None:
        indegree = {node: sum(1 for dep in deps if dep in rank) for node, deps in predecessors.items()}
    remaining = {node: indegree[node] for node in predecessors}

    ready = [rank[node] for node, degree in remaining.items() if degree == 0]
    heapq.heapify(ready)
    nodes = list(predecessors)
    order: list[T] = []

    while ready:
        node = nodes[heapq.heappop(ready)]
        order.append(node)
        for successor in successors.get(node, ()):
            if successor not in rank:
                continue
            remaining[successor] -= 1
            if remaining[successor] == 0:
                heapq.heappush(ready, rank[successor])

    if len(order) != len(nodes):
        raise CycleError(node for node in nodes if remaining[node] > 0)

    return order
