"""Unit tests for the sync bridge."""

from unittest.mock import MagicMock

import pytest

from convoflow.core.types import ContentRecord, LinearOrder, Node, ToolType
from convoflow.sync.bridge import SyncBridge
from convoflow.sync.channel import MessageChannel


@pytest.fixture
def channel():
    return MessageChannel()


@pytest.fixture
def events(channel):
    log = []
    channel.subscribe_all(lambda name, payload: log.append((name, payload)))
    return log


class TestOutbound:
    def test_add_message(self, channel, events):
        node = Node(id="n1", content_id="c1", legacy_id="m1", show_dropdown=True)
        SyncBridge(channel).publish_add_message(node, ContentRecord(id="c1", tool_type=ToolType.FORM))

        assert events == [(
            "addMessage",
            {"legacyId": "m1", "contentId": "c1", "toolType": "form", "showDropdown": True},
        )]

    def test_add_message_without_record(self, channel, events):
        node = Node(id="n1", content_id="c1", legacy_id="m1")
        SyncBridge(channel).publish_add_message(node, None)
        assert events[0][1]["toolType"] is None

    def test_order(self, channel, events):
        order = LinearOrder(order=["m1", "m2"], orphan_ids=["m3"], excluded_ids=["m4"])
        SyncBridge(channel).publish_order(order)
        assert events == [("syncMessageOrder", {"order": ["m1", "m2"], "orphanIds": ["m3"]})]

    def test_component_data(self, channel, events):
        SyncBridge(channel).publish_component_data("m1", ContentRecord(id="c1", name="Hi"))
        name, payload = events[0]
        assert name == "updateComponentData"
        assert payload["legacyId"] == "m1"
        assert payload["contentData"]["name"] == "Hi"

    def test_simple_events(self, channel, events):
        bridge = SyncBridge(channel)
        bridge.publish_delete_message("m1")
        bridge.publish_selection(["m1", "m2"])
        bridge.publish_scroll_to("m2")
        bridge.publish_highlight("m2")
        bridge.publish_unhighlight("m2")
        bridge.publish_edit_window_close()

        assert events == [
            ("deleteMessage", {"legacyId": "m1"}),
            ("nodeSelection", {"selectedLegacyIds": ["m1", "m2"]}),
            ("scrollToMessage", {"legacyId": "m2"}),
            ("highlightMessage", {"legacyId": "m2"}),
            ("unhighlightMessage", {"legacyId": "m2"}),
            ("editWindowClose", {}),
        ]


class TestInbound:
    @pytest.fixture
    def handler(self):
        return MagicMock()

    @pytest.fixture
    def bridge(self, channel, handler):
        b = SyncBridge(channel)
        b.bind(handler)
        return b

    def test_routes_legacy_id_events(self, bridge, channel, handler):
        channel.publish("highlightNode", {"legacyId": "m1"})
        channel.publish("unhighlightNode", {"legacyId": "m1"})
        channel.publish("deleteNode", {"legacyId": "m2"})
        channel.publish("selectNode", {"legacyId": "m3"})
        channel.publish("openEditWindow", {"legacyId": "m4"})

        handler.on_highlight_node.assert_called_once_with("m1")
        handler.on_unhighlight_node.assert_called_once_with("m1")
        handler.on_delete_node.assert_called_once_with("m2")
        handler.on_select_node.assert_called_once_with("m3")
        handler.on_open_edit_window.assert_called_once_with("m4")

    def test_update_node(self, bridge, channel, handler):
        channel.publish("updateNode", {"legacyId": "m1", "toolType": "question"})
        handler.on_update_node.assert_called_once_with("m1", ToolType.QUESTION, None)

    def test_test_mode(self, bridge, channel, handler):
        channel.publish("enterTestMode")
        channel.publish("exitTestMode")
        handler.on_enter_test_mode.assert_called_once_with()
        handler.on_exit_test_mode.assert_called_once_with()

    def test_get_current_messages(self, bridge, channel, handler):
        callback = MagicMock()
        channel.publish("getCurrentMessages", {"callback": callback})
        handler.on_get_current_messages.assert_called_once_with(callback)

    def test_malformed_payload_ignored(self, bridge, channel, handler, caplog):
        channel.publish("deleteNode", {"wrong": "shape"})
        channel.publish("updateNode", {"legacyId": "m1", "toolType": "hologram"})

        handler.on_delete_node.assert_not_called()
        handler.on_update_node.assert_not_called()
        assert "Ignoring malformed 'deleteNode' payload" in caplog.text

    def test_unbind(self, bridge, channel, handler):
        bridge.unbind()
        channel.publish("selectNode", {"legacyId": "m1"})
        handler.on_select_node.assert_not_called()

    def test_rebind_replaces_handler(self, bridge, channel, handler):
        other = MagicMock()
        bridge.bind(other)
        channel.publish("selectNode", {"legacyId": "m1"})

        handler.on_select_node.assert_not_called()
        other.on_select_node.assert_called_once_with("m1")
