"""
Core modules for convoflow.

This package contains the graph engine:
- types: Data structures (Node, Edge, ContentRecord, LinearOrder)
- store: Authoritative in-memory graph
- linearize: Playback order derivation
- selection: Click/range/toggle selection and group drag
- search: Content search
- storage: Snapshot export/import
"""

from .linearize import compute_linear_order
from .result import Err, Ok, Result
from .search import SearchIndexer
from .selection import SelectionController
from .storage import FlowSnapshot, SnapshotError, export_snapshot, load_snapshot, save_snapshot
from .store import GraphSnapshot, GraphStore
from .types import (
    ClickModifier, ComponentContent, ContentRecord, DeleteRequest,
    Edge, LinearOrder, Node, Position, ToolType,
)

__all__ = [
    # Types
    "ClickModifier", "ComponentContent", "ContentRecord", "DeleteRequest",
    "Edge", "LinearOrder", "Node", "Position", "ToolType",
    # Graph
    "GraphStore", "GraphSnapshot", "compute_linear_order",
    # Interaction
    "SelectionController", "SearchIndexer",
    # Storage
    "FlowSnapshot", "SnapshotError", "export_snapshot", "load_snapshot", "save_snapshot",
    "Ok", "Err", "Result",
]
