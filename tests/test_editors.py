"""
Tests for the editors module.
"""

from unittest.mock import MagicMock

import pytest

from src.dashboard_layout.config import Settings
from src.dashboard_layout.editors import DialogClosedError, LayoutDialog, LiveLayoutEditor
from src.dashboard_layout.engine import EditorCallbacks
from src.dashboard_layout.registry import (
    build_default_snapshot,
    default_card_registry,
    default_category_registry,
)


@pytest.fixture
def cards():
    return default_card_registry()


@pytest.fixture
def default_snapshot(cards):
    return build_default_snapshot(cards, default_category_registry())


class TestLayoutDialog:
    """Tests for the batched dialog."""

    def test_save_emits_once_and_closes(self, cards, default_snapshot):
        """Test that save hands the snapshot to on_save exactly once."""
        on_save = MagicMock()
        dialog = LayoutDialog(cards, on_save=on_save, settings=Settings())

        engine = dialog.open(default_snapshot)
        engine.move_card("myTasks", "email", 0)
        saved = dialog.save()

        on_save.assert_called_once_with(saved)
        assert saved.card_category_assignment["myTasks"] == "email"
        assert dialog.is_open is False
        with pytest.raises(DialogClosedError):
            dialog.engine

    def test_cancel_discards_changes(self, cards, default_snapshot):
        """Test that cancel never calls on_save."""
        on_save = MagicMock()
        dialog = LayoutDialog(cards, on_save=on_save, settings=Settings())

        dialog.open(default_snapshot).create_category("Scratch")
        dialog.cancel()

        on_save.assert_not_called()
        assert dialog.open(default_snapshot).category_order == default_snapshot.category_order

    def test_each_open_gets_a_fresh_category_registry(self, cards, default_snapshot):
        """Test categories created in one session do not leak into the next."""
        dialog = LayoutDialog(cards, on_save=MagicMock(), settings=Settings())

        first = dialog.open(default_snapshot)
        first.create_category()
        second = dialog.open(default_snapshot)

        assert "custom-1" in first.categories
        assert "custom-1" not in second.categories
        assert second.create_category() == "custom-1"

    def test_render_lists_available_last(self, cards, default_snapshot):
        """Test the dialog renders every category plus available."""
        dialog = LayoutDialog(cards, on_save=MagicMock(), settings=Settings())
        dialog.open(default_snapshot)

        views = dialog.render()

        assert len(views) == 7
        assert views[-1].id == "available"


class TestLiveLayoutEditor:
    """Tests for the immediate-apply editor."""

    def test_changes_are_forwarded(self, cards, default_snapshot):
        """Test that every mutation reaches the host callbacks."""
        on_order_changed = MagicMock()
        on_card_category_changed = MagicMock()
        editor = LiveLayoutEditor(
            default_snapshot,
            cards,
            EditorCallbacks(
                on_order_changed=on_order_changed,
                on_card_category_changed=on_card_category_changed,
            ),
            settings=Settings(),
        )

        editor.engine.move_card("quickLinks", "available")

        on_card_category_changed.assert_called_once_with("quickLinks", "available")
        on_order_changed.assert_called_once_with(editor.engine.card_order)
        assert editor.engine.cards_in_category("available") == ["quickLinks"]

    def test_refresh_reloads_host_state(self, cards, default_snapshot):
        """Test refresh replaces the session with the host's configuration."""
        editor = LiveLayoutEditor(default_snapshot, cards, EditorCallbacks(), settings=Settings())
        editor.engine.delete_category("email")
        editor.engine.toggle_category_visibility("email")

        editor.refresh(default_snapshot)

        assert editor.engine.category_config("email").visible is True
        assert [view.id for view in editor.render()][:2] == ["calendar", "email"]

    def test_refresh_keeps_new_empty_category_visible(self, cards, default_snapshot):
        """Test a category created before the host echoes it back stays visible."""
        on_category_config_changed = MagicMock()
        editor = LiveLayoutEditor(
            default_snapshot,
            cards,
            EditorCallbacks(on_category_config_changed=on_category_config_changed),
            settings=Settings(),
        )

        category_id = editor.engine.create_category("Projects")
        host_snapshot = editor.engine.snapshot()
        editor.refresh(host_snapshot)

        assert editor.engine.category_config(category_id).visible is True
        assert category_id in editor.engine.altered
        assert editor.render()[0].id == category_id
        on_category_config_changed.assert_not_called()

    def test_refresh_reports_hidden_categories(self, cards, default_snapshot):
        """Test categories hidden by a refresh are reported to the host."""
        on_category_config_changed = MagicMock()
        editor = LiveLayoutEditor(
            default_snapshot,
            cards,
            EditorCallbacks(on_category_config_changed=on_category_config_changed),
            settings=Settings(),
        )
        host_snapshot = default_snapshot.model_copy(
            update={"category_order": ["custom-9", *default_snapshot.category_order]}
        )

        editor.refresh(host_snapshot)

        assert editor.engine.category_config("custom-9").visible is False
        on_category_config_changed.assert_called_once_with("custom-9", {"visible": False})

    def test_refresh_forgets_categories_the_host_removed(self, cards, default_snapshot):
        """Test altered state does not outlive a category the host dropped."""
        editor = LiveLayoutEditor(default_snapshot, cards, EditorCallbacks(), settings=Settings())
        category_id = editor.engine.create_category()

        editor.refresh(default_snapshot)

        assert category_id not in editor.engine.altered
        assert editor.engine.has_category(category_id) is False
