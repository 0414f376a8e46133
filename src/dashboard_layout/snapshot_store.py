"""File-backed layout snapshot store.

Objective:
    Provide a small persistence layer for hosts that run the editor outside
    SharePoint (the CLI and the web app). The snapshot is stored as JSON
    using the web part's property names.

Key points:
    - Writes go to a temporary file that is then renamed over the target, so
      a crash never leaves a half-written snapshot behind.
    - A missing file is not an error: :meth:`SnapshotStore.load` returns
      ``None`` and callers fall back to the default layout.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import LayoutSnapshot

logger = logging.getLogger(__name__)


class SnapshotStoreError(RuntimeError):
    """Raised when a stored snapshot cannot be read or written."""


class SnapshotStore:
    """Store and retrieve a :class:`LayoutSnapshot` from a JSON file.

    Args:
        path: Location of the JSON file.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Optional[LayoutSnapshot]:
        """Read the stored snapshot.

        Returns:
            Optional[LayoutSnapshot]: The snapshot, or None if no file exists.

        Raises:
            SnapshotStoreError: If the file is not a valid snapshot.
        """
        if not self.exists():
            logger.info(f"No stored layout at {self.path}")
            return None

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            snapshot = LayoutSnapshot.model_validate(payload)
        except (OSError, ValueError, ValidationError) as exc:
            raise SnapshotStoreError(f"Failed to read layout from {self.path}: {exc}") from exc

        logger.info(f"Loaded layout from {self.path}")
        return snapshot

    def save(self, snapshot: LayoutSnapshot) -> None:
        """Write the snapshot atomically.

        Args:
            snapshot: Snapshot to persist.

        Raises:
            SnapshotStoreError: If the file cannot be written.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                snapshot.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
            )
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise SnapshotStoreError(f"Failed to write layout to {self.path}: {exc}") from exc

        logger.info(f"Saved layout to {self.path}")
