"""Graph module providing the variable dependency graph.

This module contains:
- DependencyGraph: An immutable graph of variable nodes built from a scope tree
- GraphNode: One variable with its direct forward and reverse edges
- breadth_first / topological_sort: The traversal algorithms used for resolution
"""

from ._algorithms import CycleError, breadth_first, topological_sort
from ._dependency_graph import DependencyGraph, GraphNode

__all__ = ["CycleError", "DependencyGraph", "GraphNode", "breadth_first", "topological_sort"]
