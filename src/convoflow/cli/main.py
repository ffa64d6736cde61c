"""
convoflow CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

import logging

import click

from .commands import init, order, search, stats


@click.group()
@click.version_option(package_name="convoflow")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """convoflow: graph engine for branching conversation flows.

    Inspects flow snapshots exported by the editor: playback order,
    orphaned content and content search.

    \b
    Quick Start:
      convoflow init
      convoflow order .convoflow/flow.json
      convoflow search "strengths" -i flow.json
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


main.add_command(order)
main.add_command(search)
main.add_command(stats)
main.add_command(init)

if __name__ == "__main__":
    main()
