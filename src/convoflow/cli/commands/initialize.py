"""
Init Command - Bootstrap a project configuration.

Writes `.convoflow/config.yaml` with the default settings.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

from ...config import default_config_path, write_default_config
from ..utils import echo_success

console = Console()


@click.command()
@click.option("--force", is_flag=True, help="Overwrite an existing config.yaml")
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    default=".",
    help="Project directory",
)
def init(force: bool, root: str):
    """
    Create .convoflow/config.yaml with default settings.
    """
    config_path = default_config_path(Path(root))
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        console.print("Use --force to overwrite it.")
        return

    write_default_config(config_path)
    echo_success(f"Wrote {config_path}")
    console.print(
        Panel.fit(
            "Export a flow snapshot to .convoflow/flow.json, then run [bold]convoflow order[/bold].",
            title="convoflow init",
        )
    )
