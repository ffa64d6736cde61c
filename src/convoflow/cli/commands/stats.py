"""
Stats Command - Summarise a flow graph.
"""

import json
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..utils import load_flow

console = Console()


@click.command()
@click.argument("flow_file", required=False)
@click.option("--json", "json_mode", is_flag=True, help="Print stats as JSON")
def stats(flow_file: Optional[str], json_mode: bool):
    """
    Show node, edge and content statistics for FLOW_FILE.
    """
    store = load_flow(flow_file)
    if store is None:
        sys.exit(1)

    data = store.get_stats()
    if json_mode:
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title="Flow statistics", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    for key, value in data.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in sorted(value.items())) or "-"
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)

    if data["missing_content"]:
        console.print(f"[yellow]⚠️  {data['missing_content']} node(s) reference missing content[/yellow]")
