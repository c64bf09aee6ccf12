import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from snipflow.config import SnippetsConfig, load_config
from snipflow.infrastructure import MruList
from snipflow.logger import get_logger, setup_logger
from snipflow.sources import PlainTextSource, ProviderManager

console = Console()

cli = typer.Typer(
    name="snipflow",
    help="Snippet expansion with auto-trigger, expand-or-jump and visual capture",
    epilog="""
    Examples:
    $ snipflow edit notes.py --snippets ./snippets
    $ snipflow list python --snippets ./snippets
    """,
    add_completion=False,
)


def _build_config(snippet_dirs: list[Path], debug: bool) -> SnippetsConfig:
    config = load_config()
    config.snippet_dirs = [*config.snippet_dirs, *(str(d) for d in snippet_dirs)]
    if debug:
        config.log_level = "DEBUG"
    setup_logger(log_level=config.log_level)
    return config


async def _collect(config: SnippetsConfig, filetype: str) -> list[tuple[str, str, str, bool]]:
    manager = ProviderManager()
    manager.register(PlainTextSource(directories=config.snippet_dirs, extends=config.extends), "snippets")
    failed = await manager.init()
    if failed:
        console.print(f"[red]Failed to load: {', '.join(failed)}[/]")

    recent = await MruList("snippets-mru", base_dir=config.mru_dir, max_items=config.mru_max_items).load()
    rank = {prefix: index for index, prefix in enumerate(recent)}
    snippets = sorted(manager.get_snippets(filetype), key=lambda s: rank.get(s.prefix, len(rank)))
    return [(s.prefix, s.label, s.filetype, s.auto_trigger) for s in snippets]


@cli.command("list")
def list_snippets(
    filetype: str = typer.Argument(..., help="Filetype to list snippets for"),
    snippets: list[Path] = typer.Option([], "--snippets", "-s", help="Directory with <filetype>.json snippet files"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """List the snippets available for a filetype, most recently used first."""
    config = _build_config(snippets, debug)
    rows = asyncio.run(_collect(config, filetype))

    table = Table(title=f"Snippets for {filetype}")
    table.add_column("Prefix", style="bold cyan")
    table.add_column("Description")
    table.add_column("Filetype", style="dim")
    table.add_column("Auto", justify="center")
    for prefix, label, ft, auto in rows:
        table.add_row(prefix, label, ft, "✓" if auto else "")
    console.print(table)


@cli.command("edit")
def edit(
    path: Optional[Path] = typer.Argument(None, help="File to edit"),
    snippets: list[Path] = typer.Option([], "--snippets", "-s", help="Directory with <filetype>.json snippet files"),
    filetype: Optional[str] = typer.Option(None, "--filetype", "-f", help="Override the detected filetype"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Open the snippet-aware editor."""
    from snipflow.presentation.tui import SnipflowApp

    config = _build_config(snippets, debug)
    logger = get_logger("main")
    logger.info(f"Starting editor for {path or '<scratch>'}")
    SnipflowApp(path=path, config=config, filetype=filetype).run()


def run() -> None:
    cli()


if __name__ == "__main__":
    run()
