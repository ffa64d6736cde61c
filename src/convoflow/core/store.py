"""
GraphStore - authoritative owner of nodes, edges and content records.

Records live in id-keyed tables (dict insertion order is the node list order
the selection controller slices over). A rustworkx multigraph mirrors the
topology so degree and incidence queries do not scan the edge table.

Every node or edge mutation drops the cached LinearOrder; `order_dirty`
stays True until `linear_order()` recomputes it.
"""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import rustworkx as rx

from ..config import DEFAULT_NODE_SPACING
from .linearize import compute_linear_order
from .types import ContentRecord, Edge, LinearOrder, Node, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable view of the graph handed to pure algorithms."""
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]


class GraphStore:
    """
    In-memory flow graph.

    Features:
    - get/put/delete over Node, Edge and ContentRecord tables
    - auto-chaining of newly added nodes (sequential default topology)
    - cascade removal of edges when a node goes away
    - cached, lazily recomputed LinearOrder
    """

    def __init__(self, node_spacing: float = DEFAULT_NODE_SPACING):
        self.node_spacing = node_spacing
        self._graph = rx.PyDiGraph(multigraph=True)
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._contents: Dict[str, ContentRecord] = {}
        self._id_to_idx: Dict[str, int] = {}
        self._edge_to_idx: Dict[str, int] = {}
        self._node_seq = 0
        self._edge_seq = 0
        self._order_cache: Optional[LinearOrder] = None

    # =========================================================================
    # Id allocation
    # =========================================================================

    def _next_node_ids(self) -> Tuple[str, str]:
        legacy_ids = {n.legacy_id for n in self._nodes.values()}
        while True:
            self._node_seq += 1
            node_id = f"n-{self._node_seq}"
            legacy_id = f"msg-{self._node_seq}"
            if node_id not in self._nodes and legacy_id not in legacy_ids:
                return node_id, legacy_id

    def _next_edge_id(self) -> str:
        while True:
            self._edge_seq += 1
            edge_id = f"e-{self._edge_seq}"
            if edge_id not in self._edges:
                return edge_id

    def _invalidate(self) -> None:
        self._order_cache = None

    # =========================================================================
    # Nodes
    # =========================================================================

    def add_node(
        self,
        content_id: str,
        position: Optional[Position] = None,
        legacy_id: Optional[str] = None,
        chain: bool = True,
    ) -> str:
        """
        Create a node referencing content_id and return its id.

        When chain is set and the graph already has nodes, an edge is drawn
        from the most recently added node to the new one. Without a position
        the node is placed one spacing step right of that node.
        """
        previous = self.last_node()
        node_id, generated_legacy_id = self._next_node_ids()
        if legacy_id and self.find_by_legacy_id(legacy_id) is not None:
            logger.warning(f"Legacy id {legacy_id} already in use; assigning {generated_legacy_id}")
            legacy_id = None

        if position is None:
            if previous is None:
                position = Position(x=0.0, y=0.0)
            else:
                position = previous.position.offset(self.node_spacing, 0.0)

        node = Node(
            id=node_id,
            position=position,
            content_id=content_id,
            legacy_id=legacy_id or generated_legacy_id,
        )
        self.put_node(node)
        logger.debug(f"Added node {node_id} ({node.legacy_id}) for content {content_id}")

        if chain and previous is not None:
            self.add_edge(previous.id, node_id)
        return node_id

    def put_node(self, node: Node) -> None:
        """Insert a node or replace the stored node with the same id."""
        if node.id in self._id_to_idx:
            self._graph[self._id_to_idx[node.id]] = node
        else:
            self._id_to_idx[node.id] = self._graph.add_node(node)
        self._nodes[node.id] = node
        self._invalidate()

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def find_by_legacy_id(self, legacy_id: str) -> Optional[Node]:
        for node in self._nodes.values():
            if node.legacy_id == legacy_id:
                return node
        return None

    def last_node(self) -> Optional[Node]:
        if not self._nodes:
            return None
        return self._nodes[next(reversed(self._nodes))]

    def delete_node(self, node_id: str) -> List[Edge]:
        """Remove one node and every edge touching it. Returns the removed edges."""
        if node_id not in self._nodes:
            return []

        idx = self._id_to_idx.pop(node_id)
        # A self-loop shows up in both lists; key by edge id.
        incident = {
            payload.id: payload
            for _, _, payload in list(self._graph.in_edges(idx)) + list(self._graph.out_edges(idx))
        }
        removed = list(incident.values())

        for edge in removed:
            self._edges.pop(edge.id, None)
            self._edge_to_idx.pop(edge.id, None)

        self._graph.remove_node(idx)
        del self._nodes[node_id]
        self._invalidate()
        logger.debug(f"Removed node {node_id} and {len(removed)} edge(s)")
        return removed

    def remove_nodes(self, legacy_ids: Iterable[str]) -> List[Node]:
        """
        Remove every node whose legacy_id is in legacy_ids, cascading edges.

        Returns the removed nodes in node list order; an empty list means the
        set matched nothing and the graph is untouched.
        """
        wanted = set(legacy_ids)
        doomed = [n for n in self._nodes.values() if n.legacy_id in wanted]
        for node in doomed:
            self.delete_node(node.id)
        return doomed

    def move_nodes(self, positions: Mapping[str, Position]) -> List[str]:
        """Apply new positions; unknown node ids are skipped. Returns moved ids."""
        moved = []
        for node_id, position in positions.items():
            node = self._nodes.get(node_id)
            if node is None:
                continue
            # Replace the node; earlier snapshots keep the old position.
            self.put_node(node.model_copy(update={"position": position}))
            moved.append(node_id)
        return moved

    def update_node(self, node_id: str, **changes: Any) -> Optional[Node]:
        node = self._nodes.get(node_id)
        if node is None:
            return None
        updated = node.model_copy(update=changes)
        self.put_node(updated)
        return updated

    # =========================================================================
    # Edges
    # =========================================================================

    def add_edge(self, source_id: str, target_id: str, edge_id: Optional[str] = None) -> Optional[str]:
        """
        Connect two existing nodes and return the new edge id.

        Edges with a missing endpoint are dropped (None is returned).
        Parallel edges between the same pair are allowed.
        """
        if source_id not in self._id_to_idx or target_id not in self._id_to_idx:
            logger.debug(f"Rejected edge {source_id} -> {target_id}: dangling endpoint")
            return None
        if edge_id is None or edge_id in self._edges:
            edge_id = self._next_edge_id()

        edge = Edge(id=edge_id, source_id=source_id, target_id=target_id)
        u = self._id_to_idx[source_id]
        v = self._id_to_idx[target_id]
        self._edge_to_idx[edge_id] = self._graph.add_edge(u, v, edge)
        self._edges[edge_id] = edge
        self._invalidate()
        return edge_id

    def remove_edge(self, edge_id: str) -> Optional[Edge]:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return None
        self._graph.remove_edge_from_index(self._edge_to_idx.pop(edge_id))
        self._invalidate()
        return edge

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def has_edge(self, source_id: str, target_id: str) -> bool:
        if source_id not in self._id_to_idx or target_id not in self._id_to_idx:
            return False
        return self._graph.has_edge(self._id_to_idx[source_id], self._id_to_idx[target_id])

    def in_degree(self, node_id: str) -> int:
        idx = self._id_to_idx.get(node_id)
        return 0 if idx is None else self._graph.in_degree(idx)

    def out_degree(self, node_id: str) -> int:
        idx = self._id_to_idx.get(node_id)
        return 0 if idx is None else self._graph.out_degree(idx)

    # =========================================================================
    # Content records
    # =========================================================================

    def put_content(self, record: ContentRecord) -> None:
        self._contents[record.id] = record

    def get_content(self, content_id: str) -> Optional[ContentRecord]:
        return self._contents.get(content_id)

    def delete_content(self, content_id: str) -> Optional[ContentRecord]:
        return self._contents.pop(content_id, None)

    def content_for(self, node: Node) -> Optional[ContentRecord]:
        """Resolve a node's record; a miss is logged and the caller renders a placeholder."""
        record = self._contents.get(node.content_id)
        if record is None:
            logger.debug(f"Node {node.id} references missing content {node.content_id}")
        return record

    def update_content(self, content_id: str, **changes: Any) -> Optional[ContentRecord]:
        """Patch fields of a content record and bump its updated_at."""
        record = self._contents.get(content_id)
        if record is None:
            return None

        known = {}
        for field_name, value in changes.items():
            if field_name not in ContentRecord.model_fields or field_name == "id":
                logger.warning(f"Ignoring unknown content field '{field_name}'")
                continue
            known[field_name] = value

        # Re-validate so enum and nested content values are coerced.
        updated = ContentRecord.model_validate({**record.model_dump(), **known})
        updated.touch()
        self._contents[content_id] = updated
        return updated

    def nodes_for_content(self, content_id: str) -> List[Node]:
        return [n for n in self._nodes.values() if n.content_id == content_id]

    # =========================================================================
    # Derived order
    # =========================================================================

    @property
    def order_dirty(self) -> bool:
        return self._order_cache is None

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(nodes=tuple(self._nodes.values()), edges=tuple(self._edges.values()))

    def linear_order(self) -> LinearOrder:
        """Return the playback order, recomputing it if the graph changed."""
        if self._order_cache is None:
            snap = self.snapshot()
            self._order_cache = compute_linear_order(snap.nodes, snap.edges)
            logger.debug(
                f"Recomputed order over {len(snap.nodes)} nodes / {len(snap.edges)} edges"
            )
        return self._order_cache

    # =========================================================================
    # Iteration & stats
    # =========================================================================

    def iter_nodes(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def iter_edges(self) -> Iterator[Edge]:
        return iter(list(self._edges.values()))

    def iter_contents(self) -> Iterator[ContentRecord]:
        return iter(list(self._contents.values()))

    def node_ids(self) -> List[str]:
        return list(self._nodes)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get_stats(self) -> Dict[str, Any]:
        tool_types: Counter = Counter()
        missing = 0
        for node in self._nodes.values():
            record = self._contents.get(node.content_id)
            if record is None:
                missing += 1
            else:
                tool_types[record.tool_type.value] += 1

        convergence = sum(
            1 for node_id in self._nodes
            if len({e.source_id for _, _, e in self._graph.in_edges(self._id_to_idx[node_id])}) > 1
        )
        order = self.linear_order()

        return {
            "total_nodes": self.node_count,
            "total_edges": self.edge_count,
            "total_contents": len(self._contents),
            "nodes_by_tool_type": dict(tool_types),
            "orphans": len(order.orphan_ids),
            "excluded": len(order.excluded_ids),
            "convergence_points": convergence,
            "missing_content": missing,
        }

    def clear(self) -> None:
        self._graph = rx.PyDiGraph(multigraph=True)
        self._nodes.clear()
        self._edges.clear()
        self._contents.clear()
        self._id_to_idx.clear()
        self._edge_to_idx.clear()
        self._invalidate()
