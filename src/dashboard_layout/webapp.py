"""FastAPI web frontend for the dashboard layout editor.

Objective:
    Provide a JSON API for driving layout editing sessions from a browser
    front end, plus an HTML preview of the stored layout. All ordering logic
    stays inside :class:`src.dashboard_layout.engine.LayoutEngine`; this
    module only parses requests and renders responses.

High-level call tree:
    - :func:`create_app`:
        - defines routes:
            - ``GET /health`` -> :func:`health`
            - ``GET /`` -> :func:`home`
            - ``POST /api/sessions`` -> :func:`open_session`
            - ``GET /api/sessions/{id}`` -> :func:`get_session`
            - ``POST /api/sessions/{id}/drag/{start,over,drop,end}``
            - ``POST /api/sessions/{id}/cards/{card_id}/move``
            - ``POST /api/sessions/{id}/cards/{card_id}/visibility``
            - ``POST /api/sessions/{id}/categories``
            - ``PATCH /api/sessions/{id}/categories/{category_id}``
            - ``POST /api/sessions/{id}/categories/{category_id}/move``
            - ``DELETE /api/sessions/{id}/categories/{category_id}``
            - ``POST /api/sessions/{id}/save``
            - ``DELETE /api/sessions/{id}``
        - wires templates via :class:`fastapi.templating.Jinja2Templates`
    - :func:`get_session_manager`:
        - returns the app's :class:`EditorSessionManager`.

Data flow:
    - HTTP request -> lock session -> call engine -> render layout JSON.

Operational notes:
    - Run with ``python -m uvicorn src.dashboard_layout.webapp:app``
      (install the ``server`` extra).
    - Request bodies are pydantic models, so malformed payloads are rejected
      with 422 before an engine is touched.
    - Each request holds its session's lock from the first engine call to
      the rendered response.
    - For tests, :func:`get_session_manager` is overridden via
      ``app.dependency_overrides`` or the app is built with an explicit store.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from .config import Settings, get_settings
from .drag import CardSlot, CategoryHeader, DropZone
from .editors import LayoutDialog
from .engine import LayoutEngine
from .models import (
    CardMoveRequest,
    CategoryCreateRequest,
    CategoryMoveRequest,
    CategoryUpdateRequest,
    DragStartRequest,
    DropZoneRequest,
)
from .registry import AVAILABLE_ICONS, default_card_registry
from .sessions import EditorSessionManager
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def get_session_manager(request: Request) -> EditorSessionManager:
    """Return the session manager attached to the running app.

    This function exists primarily to support FastAPI dependency injection
    and testing.

    Args:
        request: FastAPI request.

    Returns:
        EditorSessionManager: The app's session manager.
    """

    return request.app.state.session_manager


@contextmanager
def _session(manager: EditorSessionManager, session_id: str) -> Iterator[LayoutEngine]:
    """Yield a session's engine while holding the session lock.

    Raises:
        HTTPException: 404 if the session does not exist.
    """

    with manager.locked(session_id) as dialog:
        if dialog is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        yield dialog.engine


def _to_zone(request: DropZoneRequest) -> DropZone:
    if request.zone == "header":
        return CategoryHeader(category_id=request.category_id)
    return CardSlot(category_id=request.category_id, index=request.index)


def _parse_zone(payload: dict[str, Any]) -> DropZone:
    """Validate a raw drop-zone payload.

    Used by the drag routes, which must end the drag session even when the
    payload is rejected.

    Raises:
        HTTPException: 422 if the payload is not a valid drop zone.
    """

    try:
        return _to_zone(DropZoneRequest.model_validate(payload))
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc


def _layout_payload(session_id: str, engine: LayoutEngine, changed: Optional[bool] = None) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "session_id": session_id,
        "categories": [view.model_dump() for view in engine.render()],
        "drag": _drag_payload(engine),
    }
    if changed is not None:
        payload["changed"] = changed
    return payload


def _drag_payload(engine: LayoutEngine) -> dict[str, Any]:
    candidate = engine.drop_candidate
    if isinstance(candidate, CardSlot):
        candidate_payload: Any = {"category_id": candidate.category_id, "index": candidate.index}
    else:
        candidate_payload = candidate
    return {
        "state": type(engine.drag.state).__name__,
        "candidate": candidate_payload,
    }


def create_app(
    store: Optional[SnapshotStore] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Snapshot store; defaults to ``settings.snapshot_path``.
        settings: Application settings (loads from env if None).

    Returns:
        FastAPI: FastAPI app.
    """

    settings = settings or get_settings()
    store = store or SnapshotStore(settings.snapshot_path)

    app = FastAPI(title="Dashboard Layout Editor")
    app.state.session_manager = EditorSessionManager(
        store, default_card_registry(), settings=settings
    )

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint.

        Returns:
            dict[str, str]: Health payload.
        """

        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def home(
        request: Request,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> Any:
        """Render a read-only preview of the stored layout."""

        dialog = LayoutDialog(manager.cards, on_save=manager.store.save, settings=manager.settings)
        engine = dialog.open(manager.current_snapshot())
        categories = engine.render()
        dialog.cancel()

        return templates.TemplateResponse(
            request,
            "layout.html",
            {
                "categories": categories,
                "total_cards": sum(len(cat.cards) for cat in categories),
            },
        )

    @app.get("/api/icons")
    def list_icons() -> dict[str, list[str]]:
        """Return the icon ids a category can use."""

        return {"icons": list(AVAILABLE_ICONS)}

    @app.post("/api/sessions")
    def open_session(
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Open an editing session on the stored layout."""

        session_id, _ = manager.open()
        with _session(manager, session_id) as engine:
            return _layout_payload(session_id, engine)

    @app.get("/api/sessions/{session_id}")
    def get_session(
        session_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Return the current layout of a session."""

        with _session(manager, session_id) as engine:
            return _layout_payload(session_id, engine)

    @app.post("/api/sessions/{session_id}/drag/start")
    def drag_start(
        session_id: str,
        payload: DragStartRequest,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Start dragging a card or a category.

        Expected request body:
            ``{"kind": "card", "id": "myTasks"}`` or
            ``{"kind": "category", "id": "email"}``
        """

        with _session(manager, session_id) as engine:
            if payload.kind == "card":
                started = engine.begin_card_drag(payload.id)
            else:
                started = engine.begin_category_drag(payload.id)
            return {"started": started, "drag": _drag_payload(engine)}

    @app.post("/api/sessions/{session_id}/drag/over")
    def drag_over(
        session_id: str,
        payload: DropZoneRequest,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Update the candidate drop target."""

        with _session(manager, session_id) as engine:
            engine.drag_over(_to_zone(payload))
            return {"drag": _drag_payload(engine)}

    @app.post("/api/sessions/{session_id}/drag/drop")
    def drag_drop(
        session_id: str,
        payload: dict[str, Any],
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Drop the in-flight payload and return the new layout.

        A rejected payload still ends the drag session.
        """

        with _session(manager, session_id) as engine:
            try:
                zone = _parse_zone(payload)
            except HTTPException:
                engine.end_drag()
                raise
            changed = engine.drop(zone)
            return _layout_payload(session_id, engine, changed)

    @app.post("/api/sessions/{session_id}/drag/end")
    def drag_end(
        session_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Cancel or finish the drag session."""

        with _session(manager, session_id) as engine:
            engine.end_drag()
            return {"drag": _drag_payload(engine)}

    @app.post("/api/sessions/{session_id}/cards/{card_id}/move")
    def move_card(
        session_id: str,
        card_id: str,
        payload: CardMoveRequest,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Move a card without a drag session.

        Expected request body:
            ``{"category_id": "email", "index": 0}`` or ``{"offset": -1}``
        """

        if payload.offset is None and not payload.category_id:
            raise HTTPException(status_code=422, detail="category_id or offset is required")

        with _session(manager, session_id) as engine:
            if payload.offset is not None:
                changed = engine.shift_card(card_id, payload.offset)
            else:
                index = payload.index if payload.zone == "slot" else None
                changed = engine.move_card(card_id, payload.category_id, index)
            return _layout_payload(session_id, engine, changed)

    @app.post("/api/sessions/{session_id}/cards/{card_id}/visibility")
    def toggle_card(
        session_id: str,
        card_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Show or hide a card."""

        with _session(manager, session_id) as engine:
            changed = engine.toggle_card_visibility(card_id)
            return _layout_payload(session_id, engine, changed)

    @app.post("/api/sessions/{session_id}/categories")
    def create_category(
        session_id: str,
        payload: Optional[CategoryCreateRequest] = None,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Create a custom category at the top of the list."""

        with _session(manager, session_id) as engine:
            category_id = engine.create_category(payload.name if payload else None)
            result = _layout_payload(session_id, engine, True)
        result["category_id"] = category_id
        return result

    @app.patch("/api/sessions/{session_id}/categories/{category_id}")
    def update_category(
        session_id: str,
        category_id: str,
        payload: CategoryUpdateRequest,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Rename a category, change its icon or its display flags.

        Expected request body (all keys optional):
            ``{"name": "Projects", "icon": "briefcase", "visible": true,
            "show_title": false}``
        """

        with _session(manager, session_id) as engine:
            if not engine.has_category(category_id):
                raise HTTPException(status_code=404, detail=f"Unknown category: {category_id}")

            changed = False
            if payload.name is not None:
                changed = engine.rename_category(category_id, payload.name) or changed
            if payload.icon is not None:
                changed = engine.set_category_icon(category_id, payload.icon) or changed
            changed = (
                engine.update_category_config(
                    category_id, visible=payload.visible, show_title=payload.show_title
                )
                or changed
            )
            return _layout_payload(session_id, engine, changed)

    @app.post("/api/sessions/{session_id}/categories/{category_id}/move")
    def move_category(
        session_id: str,
        category_id: str,
        payload: CategoryMoveRequest,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Move a category onto another category's position.

        Expected request body:
            ``{"target_category_id": "calendar"}`` or ``{"position": 0}``
        """

        with _session(manager, session_id) as engine:
            if payload.position is not None:
                changed = engine.move_category_to(category_id, payload.position)
            else:
                changed = engine.reorder_category(category_id, payload.target_category_id or "")
            return _layout_payload(session_id, engine, changed)

    @app.delete("/api/sessions/{session_id}/categories/{category_id}")
    def delete_category(
        session_id: str,
        category_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Delete a custom category; its cards move to ``available``."""

        with _session(manager, session_id) as engine:
            changed = engine.delete_category(category_id)
            return _layout_payload(session_id, engine, changed)

    @app.post("/api/sessions/{session_id}/save")
    def save_session(
        session_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Persist the session's layout and close the session."""

        snapshot = manager.save(session_id)
        if snapshot is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return {"saved": True, "snapshot": snapshot.model_dump(by_alias=True)}

    @app.delete("/api/sessions/{session_id}")
    def cancel_session(
        session_id: str,
        manager: EditorSessionManager = Depends(get_session_manager),
    ) -> dict[str, Any]:
        """Discard the session's changes."""

        if not manager.cancel(session_id):
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        return {"cancelled": True}

    return app


app = create_app()
