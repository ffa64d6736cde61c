"""
Order Command - Show the derived playback order of a flow.

Loads a flow snapshot, linearizes it and prints one row per playable unit,
or the `syncMessageOrder` payload as JSON.
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
@click.option("--json", "json_mode", is_flag=True, help="Print {order, orphanIds} as JSON")
def order(flow_file: Optional[str], json_mode: bool):
    """
    Print the playback order of FLOW_FILE.

    \b
    Examples:
        convoflow order flow.json
        convoflow order . --json
    """
    store = load_flow(flow_file)
    if store is None:
        sys.exit(1)

    linear = store.linear_order()
    if json_mode:
        click.echo(json.dumps(linear.sync_payload(), indent=2))
        return

    orphans = set(linear.orphan_ids)
    excluded = set(linear.excluded_ids)

    table = Table(title=f"Playback order ({store.node_count} nodes, {store.edge_count} edges)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Legacy ID", style="cyan")
    table.add_column("Name")
    table.add_column("Tool")
    table.add_column("Status")

    for position, legacy_id in enumerate(linear.playback_ids, start=1):
        node = store.find_by_legacy_id(legacy_id)
        record = store.content_for(node) if node else None
        if legacy_id in excluded:
            status = "[yellow]alternate branch[/yellow]"
        elif legacy_id in orphans:
            status = "[red]orphan[/red]"
        else:
            status = "[green]ok[/green]"
        table.add_row(
            str(position),
            legacy_id,
            record.name if record else "[dim]missing content[/dim]",
            record.tool_type.value if record else "-",
            status,
        )

    console.print(table)
