"""
Search Command - Find nodes whose content matches a query.
"""

import json
import sys
from typing import Optional

import click
from rich.console import Console

from ...core.search import SearchIndexer
from ..utils import echo_info, echo_warning, load_flow

console = Console()


@click.command()
@click.argument("query")
@click.option("-i", "--input", "flow_file", default=None, help="Flow snapshot file or directory")
@click.option("--json", "json_mode", is_flag=True, help="Print matching legacy ids as JSON")
def search(query: str, flow_file: Optional[str], json_mode: bool):
    """
    Search node content for QUERY (case-insensitive).
    """
    store = load_flow(flow_file)
    if store is None:
        sys.exit(1)

    matches = SearchIndexer(store).search(query)
    # Report in node list order, not set order.
    hits = [n for n in store.iter_nodes() if n.id in matches]

    if json_mode:
        click.echo(json.dumps({"query": query, "matches": [n.legacy_id for n in hits]}))
        return

    if not hits:
        echo_warning(f"No nodes match '{query}'")
        return

    console.print(f"[bold]{len(hits)} match(es) for '{query}'[/bold]")
    for node in hits:
        record = store.get_content(node.content_id)
        console.print(f"  [cyan]{node.legacy_id}[/cyan]  {record.name if record else ''}")
        if record is not None:
            echo_info(record.display_text().splitlines()[0])
