"""
Flow Editor - orchestration of the graph engine.

Every operation follows the same fixed sequence within one call:

    mutate GraphStore / Selection  ->  recompute LinearOrder  ->  broadcast

so the preview never sees a stale order after an edit. The editor is also the
InboundHandler the SyncBridge dispatches preview commands to.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .config import EditorConfig
from .core.search import SearchIndexer
from .core.selection import SelectionController
from .core.store import GraphStore
from .core.types import (
    ClickModifier,
    ContentRecord,
    DeleteRequest,
    Edge,
    LinearOrder,
    Node,
    Position,
    ToolType,
)
from .sync.bridge import SyncBridge
from .sync.channel import MessageChannel

logger = logging.getLogger(__name__)


@dataclass
class EditSession:
    """Open edit window; `original` is restored if the edit is discarded."""
    legacy_id: str
    content_id: str
    original: Optional[ContentRecord]


class FlowEditor:
    """Single writer over the graph, selection and derived order."""

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        channel: Optional[MessageChannel] = None,
        config: Optional[EditorConfig] = None,
    ):
        self.config = config or EditorConfig()
        self.store = store or GraphStore(node_spacing=self.config.node_spacing)
        self.bridge = SyncBridge(channel)
        self.selection = SelectionController()
        self.search_indexer = SearchIndexer(self.store)

        self.test_mode = False
        self.highlighted_node_id: Optional[str] = None
        self.edit_session: Optional[EditSession] = None
        self._order: LinearOrder = self.store.linear_order()

        self.bridge.bind(self)

    @property
    def channel(self) -> MessageChannel:
        return self.bridge.channel

    @property
    def order(self) -> LinearOrder:
        return self._order

    # =========================================================================
    # Order synchronisation
    # =========================================================================

    def recompute_order(self) -> LinearOrder:
        self._order = self.store.linear_order()
        return self._order

    def broadcast(self) -> None:
        self.bridge.publish_order(self._order)

    def _sync_order(self) -> LinearOrder:
        """Recompute then broadcast. Called after every node or edge mutation."""
        order = self.recompute_order()
        self.broadcast()
        return order

    def _broadcast_selection(self) -> None:
        self.bridge.publish_selection(self._legacy_ids(self.selection.selected))

    def _legacy_ids(self, node_ids: Iterable[str]) -> List[str]:
        ids = []
        for node_id in node_ids:
            node = self.store.get_node(node_id)
            if node is not None:
                ids.append(node.legacy_id)
        return ids

    def _name_of(self, node_id: str) -> str:
        node = self.store.get_node(node_id)
        record = self.store.content_for(node) if node else None
        if record is None:
            return "Component"
        return record.name.strip() or record.display_text()

    # =========================================================================
    # Graph mutations
    # =========================================================================

    def add_component(
        self,
        record: ContentRecord,
        position: Optional[Position] = None,
        chain: bool = True,
        show_dropdown: bool = False,
    ) -> Node:
        """Place a node for record (storing the record if new) and announce it."""
        if self.store.get_content(record.id) is None:
            self.store.put_content(record)

        node_id = self.store.add_node(record.id, position=position, chain=chain)
        node = self.store.get_node(node_id)
        if show_dropdown:
            node = self.store.update_node(node_id, show_dropdown=True)

        self.bridge.publish_add_message(node, self.store.get_content(record.id))
        self.bridge.publish_component_data(node.legacy_id, self.store.get_content(record.id))
        self._sync_order()
        return node

    def connect(self, source_id: str, target_id: str) -> Optional[Edge]:
        edge_id = self.store.add_edge(source_id, target_id)
        if edge_id is None:
            return None
        self._sync_order()
        return self.store.get_edge(edge_id)

    def disconnect(self, edge_id: str) -> bool:
        if self.store.remove_edge(edge_id) is None:
            return False
        self._sync_order()
        return True

    def delete_nodes(self, legacy_ids: Iterable[str]) -> List[Node]:
        """
        Cascade-delete nodes by legacy id.

        A set matching no nodes is a silent no-op: nothing is published.
        """
        removed = self.store.remove_nodes(legacy_ids)
        if not removed:
            return []

        removed_ids = {n.id for n in removed}
        for node in removed:
            self.bridge.publish_delete_message(node.legacy_id)

        if self.highlighted_node_id in removed_ids:
            self.highlighted_node_id = None
        if self.edit_session is not None and self.edit_session.legacy_id in {n.legacy_id for n in removed}:
            self.edit_session = None
            self.bridge.publish_edit_window_close()

        self._sync_order()
        if self.selection.prune(self.store.node_ids()):
            self._broadcast_selection()
        return removed

    def drag_node(self, node_id: str, new_position: Position) -> Dict[str, Position]:
        """Move node_id, carrying the rest of its multi-node selection along."""
        positions = {n.id: n.position for n in self.store.iter_nodes()}
        updates = self.selection.group_drag(node_id, new_position, positions)
        if not updates:
            return {}
        self.store.move_nodes(updates)
        self._sync_order()
        return updates

    # =========================================================================
    # Selection
    # =========================================================================

    def click_node(self, node_id: str, modifier: ClickModifier = ClickModifier.NONE) -> List[str]:
        node = self.store.get_node(node_id)
        if node is None:
            return self.selection.selected
        self.selection.click(node_id, self.store.node_ids(), modifier)
        self.bridge.publish_scroll_to(node.legacy_id)
        self._broadcast_selection()
        return self.selection.selected

    def click_background(self) -> bool:
        changed = self.selection.background_click(test_mode=self.test_mode)
        if changed:
            self._broadcast_selection()
        return changed

    def hover_node(self, node_id: str, entering: bool = True) -> None:
        node = self.store.get_node(node_id)
        if node is None:
            return
        if entering:
            self.bridge.publish_highlight(node.legacy_id)
        else:
            self.bridge.publish_unhighlight(node.legacy_id)

    def request_delete(self) -> Optional[DeleteRequest]:
        """Delete key: build a confirmation prompt for the selection, if any."""
        return self.selection.delete_request(
            legacy_id_of=lambda nid: getattr(self.store.get_node(nid), "legacy_id", None),
            name_of=self._name_of,
            test_mode=self.test_mode,
        )

    def confirm_delete(self, request: DeleteRequest) -> List[Node]:
        return self.delete_nodes(request.legacy_ids)

    # =========================================================================
    # Search
    # =========================================================================

    def search(self, query: str) -> Set[str]:
        return self.search_indexer.search(query)

    # =========================================================================
    # Content editing
    # =========================================================================

    def open_edit_window(self, legacy_id: str) -> Optional[EditSession]:
        node = self.store.find_by_legacy_id(legacy_id)
        if node is None:
            logger.debug(f"Cannot edit unknown node {legacy_id}")
            return None
        if self.edit_session is not None:
            self.close_edit_window(commit=True)

        record = self.store.content_for(node)
        self.edit_session = EditSession(
            legacy_id=legacy_id,
            content_id=node.content_id,
            original=record.model_copy(deep=True) if record else None,
        )
        return self.edit_session

    def update_content(self, content_id: str, **changes: Any) -> Optional[ContentRecord]:
        """Patch a content record and push it to every node that shows it."""
        record = self.store.update_content(content_id, **changes)
        if record is None:
            return None
        for node in self.store.nodes_for_content(content_id):
            self.bridge.publish_component_data(node.legacy_id, record)
        return record

    def close_edit_window(self, commit: bool = True) -> None:
        session = self.edit_session
        if session is None:
            return
        self.edit_session = None

        if not commit and session.original is not None:
            self.store.put_content(session.original)
            for node in self.store.nodes_for_content(session.content_id):
                self.bridge.publish_component_data(node.legacy_id, session.original)
        self.bridge.publish_edit_window_close()

    # =========================================================================
    # Export pull
    # =========================================================================

    def current_messages(self) -> List[Dict[str, Any]]:
        """Ordered playable units, with a placeholder for nodes missing content."""
        order = self.recompute_order()
        orphans = set(order.orphan_ids)
        messages = []
        for legacy_id in order.playback_ids:
            node = self.store.find_by_legacy_id(legacy_id)
            if node is None:
                continue
            record = self.store.content_for(node)
            messages.append({
                "legacyId": legacy_id,
                "contentId": node.content_id,
                "toolType": record.tool_type.value if record else None,
                "content": record.display_text() if record else "Missing component",
                "orphan": legacy_id in orphans,
            })
        return messages

    # =========================================================================
    # Inbound commands (SyncBridge)
    # =========================================================================

    def on_highlight_node(self, legacy_id: str) -> None:
        node = self.store.find_by_legacy_id(legacy_id)
        if node is not None:
            self.highlighted_node_id = node.id

    def on_unhighlight_node(self, legacy_id: str) -> None:
        self.highlighted_node_id = None

    def on_update_node(self, legacy_id: str, tool_type: Optional[ToolType], show_dropdown: Optional[bool]) -> None:
        node = self.store.find_by_legacy_id(legacy_id)
        if node is None:
            logger.debug(f"updateNode for unknown node {legacy_id}")
            return
        if show_dropdown is not None:
            self.store.update_node(node.id, show_dropdown=show_dropdown)
        if tool_type is not None:
            record = self.store.content_for(node)
            if record is not None and record.tool_type != tool_type:
                self.update_content(record.id, tool_type=tool_type)
        self._sync_order()

    def on_delete_node(self, legacy_id: str) -> None:
        self.delete_nodes([legacy_id])

    def on_select_node(self, legacy_id: str) -> None:
        node = self.store.find_by_legacy_id(legacy_id)
        if node is None:
            return
        self.selection.select_only(node.id)
        self._broadcast_selection()

    def on_enter_test_mode(self) -> None:
        self.test_mode = True

    def on_exit_test_mode(self) -> None:
        self.test_mode = False

    def on_open_edit_window(self, legacy_id: str) -> None:
        self.open_edit_window(legacy_id)

    def on_get_current_messages(self, callback: Callable[[List[Dict[str, Any]]], Any]) -> None:
        callback(self.current_messages())
