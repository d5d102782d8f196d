"""Rich rendering utilities for graph commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from vardeps._graph import DependencyGraph
    from vardeps._variables import Variable


def _names(graph: DependencyGraph, ids: Iterable[int]) -> str:
    names = sorted(graph.node(i).variable.name for i in ids)
    return escape(", ".join(names)) if names else "[dim]-[/dim]"


def render_order_table(update_list: list[Variable], graph: DependencyGraph, console: Console) -> None:
    """Render an ordered update list as a Rich table.

    Args:
        update_list: Variables in evaluation order.
        graph: The graph the list was resolved from.
        console: Rich Console to output to.

    """
    if not update_list:
        console.print("[dim]Nothing to update[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Variable", style="bold")
    table.add_column("Reads")

    relevant = {variable.id for variable in update_list}
    for position, variable in enumerate(update_list, start=1):
        reads = graph.node(variable.id).depends_on & relevant
        table.add_row(str(position), escape(variable.name), _names(graph, reads))

    console.print(table)


def render_graph_table(graph: DependencyGraph, console: Console) -> None:
    """Render every node of a graph with its direct edges.

    Args:
        graph: The graph to render.
        console: Rich Console to output to.

    """
    if not len(graph):
        console.print("[dim]The model has no non-constant variables[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Variable", style="bold")
    table.add_column("Depends on")
    table.add_column("Modifies")

    for node in graph:
        table.add_row(
            escape(node.variable.name),
            _names(graph, (i for i in node.depends_on if i in graph)),
            _names(graph, node.modifies),
        )

    console.print(table)
    console.print(f"\n[dim]Total: {len(graph)} nodes[/dim]")
