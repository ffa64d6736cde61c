"""
Flow snapshot export/import.

A snapshot is the JSON document handed to the persistence collaborator:

    {
        "version": "1.0.0",
        "nodes": [{"id", "position", "contentId", "legacyId", "showDropdown"}],
        "edges": [{"id", "sourceId", "targetId"}],
        "components": {"<content id>": {...}},
        "orphanIds": [...],
        "lastSaved": "<iso timestamp>"
    }

Node and edge order in the document is the graph's node list and edge order,
so an import reproduces the same LinearOrder.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List

from pydantic import Field, ValidationError

from ..config import DEFAULT_NODE_SPACING, SNAPSHOT_VERSION
from .result import Err, Ok, Result, map_ok
from .store import GraphStore
from .types import CamelModel, ContentRecord, Edge, Node, utc_now

logger = logging.getLogger(__name__)


class SnapshotError(Exception):
    """
    Raised by the file-level API when a snapshot cannot be read.

    Attributes:
        path: The file that failed to load.
        message: Human-readable reason.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Snapshot '{path}': {message}")


class FlowSnapshot(CamelModel):
    version: str = SNAPSHOT_VERSION
    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    components: Dict[str, ContentRecord] = Field(default_factory=dict)
    orphan_ids: List[str] = Field(default_factory=list)
    last_saved: datetime = Field(default_factory=utc_now)


def export_snapshot(store: GraphStore) -> FlowSnapshot:
    return FlowSnapshot(
        nodes=[n.model_copy(deep=True) for n in store.iter_nodes()],
        edges=list(store.iter_edges()),
        components={r.id: r.model_copy(deep=True) for r in store.iter_contents()},
        orphan_ids=list(store.linear_order().orphan_ids),
    )


def snapshot_to_json(snapshot: FlowSnapshot) -> str:
    return json.dumps(snapshot.to_payload(), indent=2)


def parse_snapshot(text: str) -> Result[FlowSnapshot, str]:
    """Decode and validate a snapshot document without raising."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        return Err("Snapshot must be a JSON object")

    try:
        snapshot = FlowSnapshot.model_validate(data)
    except ValidationError as e:
        return Err(f"Invalid snapshot: {e.error_count()} validation error(s)\n{e}")

    if snapshot.version != SNAPSHOT_VERSION:
        logger.warning(
            f"Snapshot version {snapshot.version} differs from {SNAPSHOT_VERSION}; "
            "loading without migration"
        )
    return Ok(snapshot)


def build_store(snapshot: FlowSnapshot, node_spacing: float = DEFAULT_NODE_SPACING) -> GraphStore:
    """
    Rebuild a GraphStore, preserving node and edge order.

    Nodes reusing an earlier node's legacy id are dropped, as are edges left
    with a missing endpoint.
    """
    store = GraphStore(node_spacing=node_spacing)
    for record in snapshot.components.values():
        store.put_content(record)
    duplicates = 0
    for node in snapshot.nodes:
        if store.find_by_legacy_id(node.legacy_id) is not None:
            duplicates += 1
            continue
        store.put_node(node)
    if duplicates:
        logger.warning(f"Dropped {duplicates} node(s) with a duplicate legacy id")

    dropped = 0
    for edge in snapshot.edges:
        if store.add_edge(edge.source_id, edge.target_id, edge_id=edge.id) is None:
            dropped += 1
    if dropped:
        logger.warning(f"Dropped {dropped} edge(s) with missing endpoints")
    return store


def load_snapshot_text(text: str, node_spacing: float = DEFAULT_NODE_SPACING) -> Result[GraphStore, str]:
    return map_ok(parse_snapshot(text), lambda snap: build_store(snap, node_spacing))


def save_snapshot(store: GraphStore, path: Path) -> FlowSnapshot:
    snapshot = export_snapshot(store)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(snapshot_to_json(snapshot), encoding="utf-8")
    logger.info(f"Saved flow with {len(snapshot.nodes)} nodes to {path}")
    return snapshot


def load_snapshot(path: Path, node_spacing: float = DEFAULT_NODE_SPACING) -> GraphStore:
    """Load a GraphStore from a snapshot file, raising SnapshotError on failure."""
    if not path.exists():
        raise SnapshotError(path, "file not found")

    result = load_snapshot_text(path.read_text(encoding="utf-8"), node_spacing)
    if isinstance(result, Err):
        raise SnapshotError(path, result.error)
    return result.unwrap()
