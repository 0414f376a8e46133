"""Open editing sessions for the web app.

Objective:
    Keep track of the :class:`~src.dashboard_layout.editors.LayoutDialog`
    instances opened through the HTTP API, keyed by an opaque session id.

Operational notes:
    - Sessions live in process memory only; restarting the server discards
      unsaved edits, like closing the dialog in a browser would.
    - Every session gets its own dialog and therefore its own category
      registry.
    - The web app serves requests from a thread pool. Each session has its
      own lock and callers hold it (:meth:`EditorSessionManager.locked`) for
      the whole request, so one mutation and the render that follows it are
      never interleaved with another request on the same session.
"""

import logging
import threading
import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from .config import Settings
from .editors import LayoutDialog
from .models import LayoutSnapshot
from .registry import CardRegistry, build_default_snapshot, default_category_registry
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class EditorSessionManager:
    """
    Registry of open layout dialogs.

    Attributes:
        store: Snapshot store sessions load from and save to.
        cards: Card registry shared by all sessions (read-only).
        settings: Application settings.
    """

    def __init__(
        self, store: SnapshotStore, cards: CardRegistry, settings: Optional[Settings] = None
    ) -> None:
        self.store = store
        self.cards = cards
        self.settings = settings
        self._sessions: dict[str, LayoutDialog] = {}
        self._session_locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def current_snapshot(self) -> LayoutSnapshot:
        """Return the stored layout, or the default layout if nothing is stored."""
        snapshot = self.store.load()
        if snapshot is None:
            snapshot = build_default_snapshot(self.cards, default_category_registry())
        return snapshot

    def open(self) -> tuple[str, LayoutDialog]:
        """Open a new dialog on the stored layout.

        Returns:
            tuple[str, LayoutDialog]: Session id and its dialog.
        """
        dialog = LayoutDialog(self.cards, on_save=self.store.save, settings=self.settings)
        dialog.open(self.current_snapshot())

        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = dialog
            self._session_locks[session_id] = threading.RLock()
        logger.info(f"Opened editor session {session_id}")
        return session_id, dialog

    def get(self, session_id: str) -> Optional[LayoutDialog]:
        with self._lock:
            return self._sessions.get(session_id)

    @contextmanager
    def locked(self, session_id: str) -> Iterator[Optional[LayoutDialog]]:
        """Hold a session's lock for the duration of the block.

        Yields:
            Optional[LayoutDialog]: The session's dialog, or None if the id is
            unknown or the session was closed while waiting for the lock.
        """
        with self._lock:
            session_lock = self._session_locks.get(session_id)
        if session_lock is None:
            yield None
            return

        with session_lock:
            yield self.get(session_id)

    def save(self, session_id: str) -> Optional[LayoutSnapshot]:
        """Save and close a session.

        Returns:
            Optional[LayoutSnapshot]: The saved snapshot, or None if unknown.
        """
        with self.locked(session_id) as dialog:
            if dialog is None:
                return None
            snapshot = dialog.save()
            self._forget(session_id)
        return snapshot

    def cancel(self, session_id: str) -> bool:
        """Discard a session. Returns False if the id is unknown."""
        with self.locked(session_id) as dialog:
            if dialog is None:
                return False
            dialog.cancel()
            self._forget(session_id)
        logger.info(f"Cancelled editor session {session_id}")
        return True

    def _forget(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
            self._session_locks.pop(session_id, None)
