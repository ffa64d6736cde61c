"""
Global configuration and defaults.

Project settings live in `.convoflow/config.yaml`. Every key is optional; a
missing or unreadable file falls back to the defaults below.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

# Format version written into exported snapshots
SNAPSHOT_VERSION = "1.0.0"

# Per-project directory holding config and the default flow file
CONFIG_DIR_NAME = ".convoflow"
CONFIG_FILE_NAME = "config.yaml"
DEFAULT_FLOW_FILE = "flow.json"

# Horizontal gap between auto-placed nodes on the canvas
DEFAULT_NODE_SPACING = 480.0

# Shorter (stripped) search queries match nothing
MIN_QUERY_LENGTH = 1


class EditorConfig(BaseModel):
    """Settings read from config.yaml."""
    project_name: str = "my-flow"
    flow_file: str = DEFAULT_FLOW_FILE
    node_spacing: float = DEFAULT_NODE_SPACING

    model_config = ConfigDict(extra="ignore")


DEFAULT_CONFIG: Dict[str, Any] = {
    "version": SNAPSHOT_VERSION,
    **EditorConfig().model_dump(),
}


def default_config_path(root: Optional[Path] = None) -> Path:
    return (root or Path(".")) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> EditorConfig:
    """Read config.yaml, falling back to defaults on any problem."""
    config_path = path or default_config_path()
    if not config_path.exists():
        return EditorConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read {config_path}: {e}; using defaults")
        return EditorConfig()

    if not isinstance(data, dict):
        logger.warning(f"{config_path} is not a mapping; using defaults")
        return EditorConfig()

    try:
        return EditorConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Invalid settings in {config_path}: {e}; using defaults")
        return EditorConfig()


def write_default_config(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
    return path
