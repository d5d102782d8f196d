import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from vardeps._errors import CycleDetectedError, ModelFileError
from vardeps._graph import DependencyGraph
from vardeps._io import load_scope_tree
from vardeps._session import UpdateSession
from vardeps._variables import Variable, VariableScope

from .config import ConfigError, VardepsConfig, get_config
from .graph_render import render_graph_table, render_order_table

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Vardeps CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
        force=True,
    )


def _load_config() -> VardepsConfig:
    try:
        return get_config()
    except ConfigError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def _load_graph(model: Path | None, config: VardepsConfig) -> tuple[VariableScope, DependencyGraph]:
    """Load the model file given on the command line or in the configuration."""
    if model is None:
        model = config.model
    if model is None:
        err_console.print("[red]Error: No model file given and no \\[tool.vardeps].model configured[/red]")
        raise typer.Exit(code=1)

    err_console.print(f"[cyan]Loading model from:[/cyan] {model}")
    try:
        root = load_scope_tree(model)
    except ModelFileError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    return root, DependencyGraph.build(root)


def _find_variables(root: VariableScope, names: list[str]) -> list[Variable]:
    variables: list[Variable] = []
    for name in names:
        try:
            variables.append(root.find(name))
        except KeyError as e:
            err_console.print(f"[red]Error: Unknown variable '{escape(name)}'[/red]")
            raise typer.Exit(code=1) from e
    return variables


@app.command()
def order(
    model: Annotated[
        Path | None,
        typer.Argument(help="Path to the model TOML file (defaults to the configured model)"),
    ] = None,
    *,
    independent: Annotated[
        list[str] | None,
        typer.Option("-i", "--independent", help="Externally supplied variable (repeatable)"),
    ] = None,
    dependent: Annotated[
        list[str] | None,
        typer.Option("-d", "--dependent", help="Required variable (repeatable)"),
    ] = None,
) -> None:
    """Print the order in which variables must be re-evaluated."""
    config = _load_config()
    root, graph = _load_graph(model, config)

    session = UpdateSession(graph)
    session.add_independents(_find_variables(root, independent or list(config.independent)))
    session.add_dependents(_find_variables(root, dependent or list(config.dependent)))

    try:
        update_list = session.get_ordered_update_list()
    except CycleDetectedError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    logger.debug("Resolved %d variables", len(update_list))
    render_order_table(update_list, graph, out_console)


@app.command()
def graph(
    model: Annotated[
        Path | None,
        typer.Argument(help="Path to the model TOML file (defaults to the configured model)"),
    ] = None,
) -> None:
    """Print every variable of the dependency graph with its direct edges."""
    config = _load_config()
    _root, dependency_graph = _load_graph(model, config)
    render_graph_table(dependency_graph, out_console)


def main() -> None:
    app()
