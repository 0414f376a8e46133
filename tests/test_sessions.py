"""
Tests for the sessions module.
"""

import threading
from unittest.mock import MagicMock

import pytest

from src.dashboard_layout.config import Settings
from src.dashboard_layout.registry import default_card_registry
from src.dashboard_layout.sessions import EditorSessionManager
from src.dashboard_layout.snapshot_store import SnapshotStore, SnapshotStoreError


@pytest.fixture
def manager(tmp_path):
    store = SnapshotStore(tmp_path / "layout.json")
    return EditorSessionManager(store, default_card_registry(), settings=Settings())


def test_open_uses_default_layout_when_store_is_empty(manager) -> None:
    """Sessions start from the default layout if nothing is stored."""

    session_id, dialog = manager.open()

    assert len(manager) == 1
    assert manager.get(session_id) is dialog
    assert dialog.engine.category_order[0] == "calendar"


def test_save_persists_and_closes(manager) -> None:
    """Saving writes the store and forgets the session."""

    session_id, dialog = manager.open()
    dialog.engine.move_category_to("navigation", 0)

    snapshot = manager.save(session_id)

    assert snapshot is not None
    assert len(manager) == 0
    assert manager.store.load().category_order[0] == "navigation"
    assert manager.save(session_id) is None


def test_failed_save_keeps_session(manager) -> None:
    """A store error does not lose the open session."""

    session_id, dialog = manager.open()
    manager.store.save = MagicMock(side_effect=SnapshotStoreError("disk full"))
    dialog.on_save = manager.store.save

    with pytest.raises(SnapshotStoreError):
        manager.save(session_id)

    assert manager.get(session_id) is dialog
    assert dialog.is_open is True


def test_cancel(manager) -> None:
    """Cancelling discards the session."""

    session_id, _ = manager.open()

    assert manager.cancel(session_id) is True
    assert manager.cancel(session_id) is False
    assert manager.store.exists() is False


def test_save_waits_for_session_lock(manager) -> None:
    """A save from another thread blocks while a request holds the session."""

    session_id, _ = manager.open()
    results = []

    with manager.locked(session_id) as dialog:
        assert dialog is manager.get(session_id)
        worker = threading.Thread(target=lambda: results.append(manager.save(session_id)))
        worker.start()
        worker.join(timeout=0.2)

        assert worker.is_alive()
        assert manager.store.exists() is False

    worker.join(timeout=5)

    assert not worker.is_alive()
    assert results[0] is not None
    assert manager.store.exists() is True
    assert len(manager) == 0


def test_locked_unknown_session_yields_none(manager) -> None:
    """Locking an unknown session yields None instead of raising."""

    with manager.locked("nope") as dialog:
        assert dialog is None
