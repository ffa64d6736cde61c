"""Shared fixtures for CLI tests."""

import pytest
from click.testing import CliRunner

from convoflow.core.storage import save_snapshot
from convoflow.core.store import GraphStore
from convoflow.core.types import ContentRecord, Position


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with a saved flow at .convoflow/flow.json."""
    monkeypatch.chdir(tmp_path)

    store = GraphStore()
    store.put_content(ContentRecord.model_validate(
        {"id": "c1", "name": "Welcome", "content": {"message": {"text": "Hello there"}}}
    ))
    store.put_content(ContentRecord.model_validate(
        {"id": "c2", "name": "Strengths", "toolType": "question",
         "content": {"question": {"text": "What are your strengths?"}}}
    ))
    store.put_content(ContentRecord.model_validate(
        {"id": "c3", "name": "Detour", "content": {"message": {"text": "A side path"}}}
    ))
    first = store.add_node("c1", legacy_id="m1", position=Position(x=0, y=0))
    second = store.add_node("c2", legacy_id="m2")
    detour = store.add_node("c3", legacy_id="m3", chain=False, position=Position(x=0, y=300))
    store.add_edge(first, detour)
    store.add_edge(detour, second)
    store.add_node("ghost", legacy_id="m4", chain=False)

    save_snapshot(store, tmp_path / ".convoflow" / "flow.json")
    return tmp_path
