"""
Sync Bridge.

The only integration surface between the core and the preview/editor
surfaces. Outbound helpers turn core state into event payloads; inbound
events are validated and dispatched to an InboundHandler (the FlowEditor).
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

from pydantic import ValidationError

from ..core.types import ContentRecord, LinearOrder, Node, ToolType
from .channel import MessageChannel
from .events import (
    INBOUND_PAYLOADS,
    AddMessagePayload,
    InboundEvent,
    LegacyIdPayload,
    NodeSelectionPayload,
    OutboundEvent,
    SyncMessageOrderPayload,
    UpdateComponentDataPayload,
)

logger = logging.getLogger(__name__)


class InboundHandler(Protocol):
    def on_highlight_node(self, legacy_id: str) -> None: ...
    def on_unhighlight_node(self, legacy_id: str) -> None: ...
    def on_update_node(self, legacy_id: str, tool_type: Optional[ToolType], show_dropdown: Optional[bool]) -> None: ...
    def on_delete_node(self, legacy_id: str) -> None: ...
    def on_select_node(self, legacy_id: str) -> None: ...
    def on_enter_test_mode(self) -> None: ...
    def on_exit_test_mode(self) -> None: ...
    def on_open_edit_window(self, legacy_id: str) -> None: ...
    def on_get_current_messages(self, callback: Callable[[List[Dict[str, Any]]], Any]) -> None: ...


class SyncBridge:
    """Publishes graph state and routes inbound commands."""

    def __init__(self, channel: Optional[MessageChannel] = None):
        self.channel = channel or MessageChannel()
        self._unsubscribers: List[Callable[[], None]] = []

    # =========================================================================
    # Outbound
    # =========================================================================

    def _publish(self, event: OutboundEvent, payload: Optional[Mapping[str, Any]] = None) -> None:
        logger.debug(f"-> {event.value}")
        self.channel.publish(event.value, payload or {})

    def publish_add_message(self, node: Node, record: Optional[ContentRecord]) -> None:
        payload = AddMessagePayload(
            legacy_id=node.legacy_id,
            content_id=node.content_id,
            tool_type=record.tool_type if record else None,
            show_dropdown=node.show_dropdown,
        )
        self._publish(OutboundEvent.ADD_MESSAGE, payload.to_payload())

    def publish_delete_message(self, legacy_id: str) -> None:
        self._publish(OutboundEvent.DELETE_MESSAGE, LegacyIdPayload(legacy_id=legacy_id).to_payload())

    def publish_component_data(self, legacy_id: str, record: ContentRecord) -> None:
        payload = UpdateComponentDataPayload(legacy_id=legacy_id, content_data=record.to_payload())
        self._publish(OutboundEvent.UPDATE_COMPONENT_DATA, payload.to_payload())

    def publish_order(self, order: LinearOrder) -> None:
        payload = SyncMessageOrderPayload(order=order.order, orphan_ids=order.orphan_ids)
        self._publish(OutboundEvent.SYNC_MESSAGE_ORDER, payload.to_payload())

    def publish_selection(self, legacy_ids: Iterable[str]) -> None:
        payload = NodeSelectionPayload(selected_legacy_ids=list(legacy_ids))
        self._publish(OutboundEvent.NODE_SELECTION, payload.to_payload())

    def publish_scroll_to(self, legacy_id: str) -> None:
        self._publish(OutboundEvent.SCROLL_TO_MESSAGE, LegacyIdPayload(legacy_id=legacy_id).to_payload())

    def publish_highlight(self, legacy_id: str) -> None:
        self._publish(OutboundEvent.HIGHLIGHT_MESSAGE, LegacyIdPayload(legacy_id=legacy_id).to_payload())

    def publish_unhighlight(self, legacy_id: str) -> None:
        self._publish(OutboundEvent.UNHIGHLIGHT_MESSAGE, LegacyIdPayload(legacy_id=legacy_id).to_payload())

    def publish_edit_window_close(self) -> None:
        self._publish(OutboundEvent.EDIT_WINDOW_CLOSE, {})

    # =========================================================================
    # Inbound
    # =========================================================================

    def bind(self, handler: InboundHandler) -> None:
        """Subscribe handler to every inbound event. Rebinding drops the old handler."""
        self.unbind()
        for event in InboundEvent:
            self._unsubscribers.append(
                self.channel.subscribe(event.value, self._make_dispatcher(event, handler))
            )

    def unbind(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def _make_dispatcher(self, event: InboundEvent, handler: InboundHandler) -> Callable[[Dict[str, Any]], None]:
        model = INBOUND_PAYLOADS[event]

        def dispatch(detail: Dict[str, Any]) -> None:
            try:
                payload = model.model_validate(detail)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed '{event.value}' payload: {e.error_count()} error(s)")
                return
            logger.debug(f"<- {event.value}")
            self._route(event, payload, handler)

        return dispatch

    def _route(self, event: InboundEvent, payload: Any, handler: InboundHandler) -> None:
        if event == InboundEvent.HIGHLIGHT_NODE:
            handler.on_highlight_node(payload.legacy_id)
        elif event == InboundEvent.UNHIGHLIGHT_NODE:
            handler.on_unhighlight_node(payload.legacy_id)
        elif event == InboundEvent.UPDATE_NODE:
            handler.on_update_node(payload.legacy_id, payload.tool_type, payload.show_dropdown)
        elif event == InboundEvent.DELETE_NODE:
            handler.on_delete_node(payload.legacy_id)
        elif event == InboundEvent.SELECT_NODE:
            handler.on_select_node(payload.legacy_id)
        elif event == InboundEvent.ENTER_TEST_MODE:
            handler.on_enter_test_mode()
        elif event == InboundEvent.EXIT_TEST_MODE:
            handler.on_exit_test_mode()
        elif event == InboundEvent.OPEN_EDIT_WINDOW:
            handler.on_open_edit_window(payload.legacy_id)
        elif event == InboundEvent.GET_CURRENT_MESSAGES:
            handler.on_get_current_messages(payload.callback)
