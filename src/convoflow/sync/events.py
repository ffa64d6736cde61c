"""
Event catalogue shared with the preview and editor surfaces.

Outbound events are published by the core; inbound events are commands the
surfaces send back. Payloads travel as plain camelCase dicts.
"""

from enum import StrEnum
from typing import Any, Callable, Dict, List, Optional

from pydantic import ConfigDict

from ..core.types import CamelModel, ToolType


class OutboundEvent(StrEnum):
    ADD_MESSAGE = "addMessage"
    DELETE_MESSAGE = "deleteMessage"
    UPDATE_COMPONENT_DATA = "updateComponentData"
    SYNC_MESSAGE_ORDER = "syncMessageOrder"
    NODE_SELECTION = "nodeSelection"
    SCROLL_TO_MESSAGE = "scrollToMessage"
    HIGHLIGHT_MESSAGE = "highlightMessage"
    UNHIGHLIGHT_MESSAGE = "unhighlightMessage"
    EDIT_WINDOW_CLOSE = "editWindowClose"


class InboundEvent(StrEnum):
    HIGHLIGHT_NODE = "highlightNode"
    UNHIGHLIGHT_NODE = "unhighlightNode"
    UPDATE_NODE = "updateNode"
    DELETE_NODE = "deleteNode"
    SELECT_NODE = "selectNode"
    ENTER_TEST_MODE = "enterTestMode"
    EXIT_TEST_MODE = "exitTestMode"
    OPEN_EDIT_WINDOW = "openEditWindow"
    GET_CURRENT_MESSAGES = "getCurrentMessages"


# =============================================================================
# Outbound payloads
# =============================================================================

class AddMessagePayload(CamelModel):
    legacy_id: str
    content_id: str
    tool_type: Optional[ToolType] = None
    show_dropdown: bool = False


class LegacyIdPayload(CamelModel):
    legacy_id: str


class UpdateComponentDataPayload(CamelModel):
    legacy_id: str
    content_data: Dict[str, Any]


class SyncMessageOrderPayload(CamelModel):
    order: List[str]
    orphan_ids: List[str]


class NodeSelectionPayload(CamelModel):
    selected_legacy_ids: List[str]


class EmptyPayload(CamelModel):
    pass


# =============================================================================
# Inbound payloads
# =============================================================================

class UpdateNodePayload(CamelModel):
    legacy_id: str
    tool_type: Optional[ToolType] = None
    show_dropdown: Optional[bool] = None


class GetCurrentMessagesPayload(CamelModel):
    callback: Callable[[List[Dict[str, Any]]], Any]

    model_config = ConfigDict(arbitrary_types_allowed=True)


INBOUND_PAYLOADS = {
    InboundEvent.HIGHLIGHT_NODE: LegacyIdPayload,
    InboundEvent.UNHIGHLIGHT_NODE: LegacyIdPayload,
    InboundEvent.UPDATE_NODE: UpdateNodePayload,
    InboundEvent.DELETE_NODE: LegacyIdPayload,
    InboundEvent.SELECT_NODE: LegacyIdPayload,
    InboundEvent.ENTER_TEST_MODE: EmptyPayload,
    InboundEvent.EXIT_TEST_MODE: EmptyPayload,
    InboundEvent.OPEN_EDIT_WINDOW: LegacyIdPayload,
    InboundEvent.GET_CURRENT_MESSAGES: GetCurrentMessagesPayload,
}
