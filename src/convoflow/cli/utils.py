"""
CLI Utilities - Shared helper functions for command line operations.

Formatted printing and flow file loading used across the commands.
"""

from pathlib import Path
from typing import Optional

import click

from ..config import CONFIG_DIR_NAME, load_config
from ..core.result import Err
from ..core.storage import load_snapshot_text
from ..core.store import GraphStore


def echo_success(message: str) -> None:
    """
    Print a success message with a green checkmark.

    Args:
        message (str): The message to display.
    """
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    """
    Print an error message with a red cross.

    Args:
        message (str): The error message to display.
    """
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def resolve_flow_path(flow_file: Optional[str]) -> Path:
    """
    Resolve the flow file argument to a concrete path.

    No argument means the flow file named in config.yaml. A directory is
    searched for `.convoflow/<flow_file>` and then `<flow_file>`.
    """
    config = load_config()
    if not flow_file:
        return Path(CONFIG_DIR_NAME) / config.flow_file

    path = Path(flow_file)
    if path.is_dir():
        for candidate in (path / CONFIG_DIR_NAME / config.flow_file, path / config.flow_file):
            if candidate.exists():
                return candidate
    return path


def load_flow(flow_file: Optional[str]) -> Optional[GraphStore]:
    """
    Load a GraphStore from a snapshot file or directory.

    Args:
        flow_file (Optional[str]): Path to a snapshot JSON file or a directory.

    Returns:
        Optional[GraphStore]: The loaded store, or None if loading failed.
    """
    path = resolve_flow_path(flow_file)
    if not path.exists():
        echo_error(f"Flow file not found: {path}")
        click.echo("Export a flow snapshot from the editor first.", err=True)
        return None

    result = load_snapshot_text(path.read_text(encoding="utf-8"), load_config().node_spacing)
    if isinstance(result, Err):
        echo_error(f"Failed to load flow: {result.error}")
        return None
    return result.unwrap()
