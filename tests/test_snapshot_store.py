"""
Tests for the snapshot_store module.
"""

import json

import pytest

from src.dashboard_layout.models import CategoryConfig, LayoutSnapshot
from src.dashboard_layout.snapshot_store import SnapshotStore, SnapshotStoreError


def test_load_missing_file_returns_none(tmp_path) -> None:
    """A missing layout file is not an error."""

    store = SnapshotStore(tmp_path / "layout.json")

    assert store.exists() is False
    assert store.load() is None


def test_save_writes_camel_case_keys(tmp_path) -> None:
    """Saved files use the web part property names."""

    path = tmp_path / "nested" / "layout.json"
    store = SnapshotStore(path)
    snapshot = LayoutSnapshot(
        card_order=["a"],
        card_category_assignment={"a": "cat1"},
        category_order=["cat1"],
        category_config={"cat1": CategoryConfig(id="cat1", show_title=False)},
    )

    store.save(snapshot)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["cardOrder"] == ["a"]
    assert payload["cardCategoryAssignment"] == {"a": "cat1"}
    assert payload["categoryConfig"]["cat1"]["showTitle"] is False
    assert not (tmp_path / "nested" / "layout.json.tmp").exists()
    assert store.load() == snapshot


def test_load_accepts_host_payload(tmp_path) -> None:
    """A payload written by the host loads through the aliases."""

    path = tmp_path / "layout.json"
    path.write_text(
        json.dumps(
            {
                "cardOrder": ["a", "b"],
                "categoryOrder": ["custom-1"],
                "cardCategoryAssignment": {"a": "custom-1"},
                "categoryNames": {"custom-1": "Projects"},
            }
        ),
        encoding="utf-8",
    )

    snapshot = SnapshotStore(path).load()

    assert snapshot is not None
    assert snapshot.category_names == {"custom-1": "Projects"}
    assert snapshot.card_visibility == {}


@pytest.mark.parametrize("content", ["not json", '{"cardOrder": "nope"}'])
def test_load_invalid_file_raises(tmp_path, content) -> None:
    """Corrupt files raise SnapshotStoreError."""

    path = tmp_path / "layout.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(SnapshotStoreError):
        SnapshotStore(path).load()
