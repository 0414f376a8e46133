from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.dashboard_layout.config import Settings
from src.dashboard_layout.snapshot_store import SnapshotStore
from src.dashboard_layout.webapp import create_app, get_session_manager


@pytest.fixture
def store(tmp_path):
    return SnapshotStore(tmp_path / "layout.json")


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store, settings=Settings()))


def _open(client: TestClient) -> str:
    resp = client.post("/api/sessions")
    assert resp.status_code == 200
    return resp.json()["session_id"]


def _cards(payload: dict, category_id: str) -> list[str]:
    for category in payload["categories"]:
        if category["id"] == category_id:
            return [card["id"] for card in category["cards"]]
    raise AssertionError(f"category {category_id} not rendered")


def test_health(client) -> None:
    """Health endpoint returns ok."""

    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_home_renders_layout_preview(client) -> None:
    """Home page shows the stored (default) layout."""

    resp = client.get("/")

    assert resp.status_code == 200
    assert "Dashboard Layout Editor" in resp.text
    assert "Available Cards" in resp.text
    assert "Today&#39;s Agenda" in resp.text or "Today's Agenda" in resp.text


def test_drag_card_between_categories(client) -> None:
    """A full drag session moves a card and returns to idle."""

    session_id = _open(client)

    resp = client.post(f"/api/sessions/{session_id}/drag/start", json={"kind": "card", "id": "myTasks"})
    assert resp.json()["started"] is True
    assert resp.json()["drag"]["state"] == "DraggingCard"

    resp = client.post(
        f"/api/sessions/{session_id}/drag/over", json={"category_id": "email", "index": 1}
    )
    assert resp.json()["drag"]["candidate"] == {"category_id": "email", "index": 1}

    resp = client.post(
        f"/api/sessions/{session_id}/drag/drop", json={"category_id": "email", "index": 1}
    )
    payload = resp.json()
    assert payload["changed"] is True
    assert _cards(payload, "email") == ["unreadInbox", "myTasks", "flaggedEmails", "waitingOnYou"]
    assert payload["drag"] == {"state": "Idle", "candidate": None}


def test_drag_category_on_header(client) -> None:
    """Dropping a category on another header reorders categories."""

    session_id = _open(client)

    client.post(f"/api/sessions/{session_id}/drag/start", json={"kind": "category", "id": "tasks"})
    resp = client.post(
        f"/api/sessions/{session_id}/drag/drop", json={"category_id": "calendar", "zone": "header"}
    )

    ids = [category["id"] for category in resp.json()["categories"]]
    assert ids[:2] == ["tasks", "calendar"]
    assert ids[-1] == "available"


def test_drop_without_category_is_rejected_and_ends_drag(client) -> None:
    """A malformed drop returns 422 and leaves no drag in flight."""

    session_id = _open(client)
    client.post(f"/api/sessions/{session_id}/drag/start", json={"kind": "card", "id": "myTasks"})

    resp = client.post(f"/api/sessions/{session_id}/drag/drop", json={})
    assert resp.status_code == 422

    resp = client.get(f"/api/sessions/{session_id}")
    assert resp.json()["drag"]["state"] == "Idle"


def test_category_lifecycle_and_save(client, store) -> None:
    """Create, edit and save a custom category."""

    session_id = _open(client)

    resp = client.post(f"/api/sessions/{session_id}/categories", json={"name": "Projects"})
    category_id = resp.json()["category_id"]
    assert category_id == "custom-1"
    assert resp.json()["categories"][0]["id"] == "custom-1"

    resp = client.patch(
        f"/api/sessions/{session_id}/categories/{category_id}",
        json={"name": "Work", "icon": "briefcase", "show_title": False},
    )
    first = resp.json()["categories"][0]
    assert resp.json()["changed"] is True
    assert (first["name"], first["icon"], first["show_title"]) == ("Work", "briefcase", False)

    client.post(f"/api/sessions/{session_id}/cards/myTasks/move", json={"category_id": category_id})
    client.post(f"/api/sessions/{session_id}/categories/{category_id}/move", json={"position": 2})

    resp = client.post(f"/api/sessions/{session_id}/save")
    assert resp.json()["saved"] is True

    saved = store.load()
    assert saved.category_order[2] == "custom-1"
    assert saved.category_names["custom-1"] == "Work"
    assert saved.card_category_assignment["myTasks"] == "custom-1"
    assert client.get(f"/api/sessions/{session_id}").status_code == 404


def test_delete_category_moves_cards_to_available(client) -> None:
    """Deleting a custom category keeps its cards."""

    session_id = _open(client)
    category_id = client.post(f"/api/sessions/{session_id}/categories").json()["category_id"]
    client.post(f"/api/sessions/{session_id}/cards/myTeam/move", json={"category_id": category_id})

    resp = client.delete(f"/api/sessions/{session_id}/categories/{category_id}")

    assert resp.json()["changed"] is True
    assert "myTeam" in _cards(resp.json(), "available")

    resp = client.delete(f"/api/sessions/{session_id}/categories/email")
    assert resp.json()["changed"] is False


def test_shift_and_toggle_card(client) -> None:
    """Cards can be shifted and hidden without a drag session."""

    session_id = _open(client)

    resp = client.post(f"/api/sessions/{session_id}/cards/upcomingWeek/move", json={"offset": -1})
    assert _cards(resp.json(), "calendar") == ["upcomingWeek", "todaysAgenda"]

    resp = client.post(f"/api/sessions/{session_id}/cards/upcomingWeek/visibility")
    calendar = resp.json()["categories"][0]
    assert calendar["cards"][0] == {"id": "upcomingWeek", "title": "Upcoming Week", "visible": False}


def test_unknown_session_and_category(client) -> None:
    """Unknown ids return 404."""

    assert client.get("/api/sessions/nope").status_code == 404
    assert client.delete("/api/sessions/nope").status_code == 404

    session_id = _open(client)
    resp = client.patch(f"/api/sessions/{session_id}/categories/ghost", json={"name": "X"})
    assert resp.status_code == 404


def test_cancel_session_does_not_save(client, store) -> None:
    """Cancelling discards edits."""

    session_id = _open(client)
    client.post(f"/api/sessions/{session_id}/categories/email/move", json={"target_category_id": "calendar"})

    resp = client.delete(f"/api/sessions/{session_id}")

    assert resp.json() == {"cancelled": True}
    assert store.exists() is False


def test_session_manager_can_be_overridden(store) -> None:
    """The session manager dependency can be replaced in tests."""

    app = create_app(store=store, settings=Settings())
    manager = MagicMock()
    manager.open.side_effect = RuntimeError("should not be called")
    manager.cancel.return_value = False
    app.dependency_overrides[get_session_manager] = lambda: manager

    client = TestClient(app)
    resp = client.delete("/api/sessions/abc")

    assert resp.status_code == 404
    manager.cancel.assert_called_once_with("abc")


def test_icons_endpoint(client) -> None:
    """Icon catalog is exposed for pickers."""

    icons = client.get("/api/icons").json()["icons"]
    assert "grid" in icons
    assert "briefcase" in icons


def test_home_lists_categories_and_cards(client) -> None:
    """The preview page renders each category and the card count."""

    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert "Calendar" in resp.text
    assert "Unread Inbox" in resp.text


@pytest.mark.parametrize(
    ("method", "path", "body"),
    [
        ("post", "cards/myTasks/move", {"category_id": "email", "index": "top"}),
        ("post", "cards/myTasks/move", {"offset": "up"}),
        ("post", "cards/myTasks/move", {}),
        ("patch", "categories/email", {"visible": "nope"}),
        ("post", "categories/email/move", {"position": "first"}),
        ("post", "drag/start", {"kind": "bogus", "id": "myTasks"}),
        ("post", "drag/over", {"category_id": "email", "zone": "footer"}),
    ],
)
def test_malformed_bodies_are_rejected(client, method, path, body) -> None:
    """Bad payloads return 422 and leave the layout untouched."""

    session_id = _open(client)
    before = client.get(f"/api/sessions/{session_id}").json()["categories"]

    resp = getattr(client, method)(f"/api/sessions/{session_id}/{path}", json=body)

    assert resp.status_code == 422
    after = client.get(f"/api/sessions/{session_id}")
    assert after.status_code == 200
    assert after.json()["categories"] == before


def test_move_with_header_zone_appends(client) -> None:
    """Moving a card onto a header puts it at the end of that category."""

    session_id = _open(client)

    resp = client.post(
        f"/api/sessions/{session_id}/cards/myTasks/move",
        json={"category_id": "calendar", "zone": "header"},
    )

    assert resp.status_code == 200
    assert _cards(resp.json(), "calendar")[-1] == "myTasks"
