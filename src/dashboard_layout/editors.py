"""Editor surfaces over the layout engine.

Objective:
    Provide the two ways a host edits the dashboard layout, both driven by
    the same :class:`~src.dashboard_layout.engine.LayoutEngine`:

    - :class:`LayoutDialog`: a modal configuration dialog. Edits stay local
      until :meth:`LayoutDialog.save` hands a snapshot to ``on_save``;
      :meth:`LayoutDialog.cancel` discards them.
    - :class:`LiveLayoutEditor`: a property-pane editor. Every mutation is
      forwarded to the host immediately through
      :class:`~src.dashboard_layout.engine.EditorCallbacks`.

Design notes:
    Neither surface implements any ordering logic. They manage the session
    lifecycle and expose the engine for mutations and rendering.

High-level call tree:
    - :class:`LayoutDialog`
        - :meth:`open` -> new :class:`LayoutEngine`
        - :meth:`save` -> :meth:`LayoutEngine.build_save_snapshot` -> ``on_save``
        - :meth:`cancel`
    - :class:`LiveLayoutEditor`
        - :meth:`refresh` -> :meth:`LayoutEngine.reload`
"""

import logging
from typing import Callable, Optional

from .config import Settings
from .engine import EditorCallbacks, LayoutEngine
from .models import CategoryView, LayoutSnapshot
from .registry import CardRegistry, CategoryRegistry, default_category_registry

logger = logging.getLogger(__name__)


class DialogClosedError(RuntimeError):
    """Raised when a closed dialog is asked for its editing session."""


class LayoutDialog:
    """
    Batched layout editor.

    Each :meth:`open` starts a new session from a copy of the host's
    configuration and a fresh category registry.

    Attributes:
        cards: Card registry.
        on_save: Called once per :meth:`save` with the final snapshot.
        settings: Application settings passed to the engine.
    """

    def __init__(
        self,
        cards: CardRegistry,
        on_save: Callable[[LayoutSnapshot], None],
        settings: Optional[Settings] = None,
        category_registry_factory: Callable[[], CategoryRegistry] = default_category_registry,
    ) -> None:
        self.cards = cards
        self.on_save = on_save
        self.settings = settings
        self._category_registry_factory = category_registry_factory
        self._engine: Optional[LayoutEngine] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> LayoutEngine:
        """Return the open session.

        Raises:
            DialogClosedError: If the dialog is not open.
        """
        if self._engine is None:
            raise DialogClosedError("Layout dialog is not open")
        return self._engine

    def open(self, snapshot: LayoutSnapshot) -> LayoutEngine:
        """Start an editing session from the host's configuration.

        Re-opening discards any unsaved session.

        Args:
            snapshot: Current host configuration.

        Returns:
            LayoutEngine: The new session.
        """
        self._engine = LayoutEngine(
            snapshot,
            self.cards,
            self._category_registry_factory(),
            settings=self.settings,
        )
        logger.debug("Layout dialog opened")
        return self._engine

    def render(self) -> list[CategoryView]:
        return self.engine.render()

    def save(self) -> LayoutSnapshot:
        """
        Commit the session: emit the snapshot to ``on_save`` and close.

        Returns:
            LayoutSnapshot: The snapshot passed to ``on_save``.
        """
        snapshot = self.engine.build_save_snapshot()
        self.on_save(snapshot)
        self._engine = None
        logger.info("Layout dialog saved")
        return snapshot

    def cancel(self) -> None:
        """Discard the session without calling ``on_save``."""
        if self._engine is not None:
            logger.debug("Layout dialog cancelled")
        self._engine = None


class LiveLayoutEditor:
    """
    Immediate-apply layout editor.

    The host keeps the configuration; this editor forwards each change
    through ``callbacks`` and is refreshed when the host's configuration
    changes underneath it.

    Attributes:
        engine: Engine bound to the host callbacks.
    """

    def __init__(
        self,
        snapshot: LayoutSnapshot,
        cards: CardRegistry,
        callbacks: EditorCallbacks,
        settings: Optional[Settings] = None,
        categories: Optional[CategoryRegistry] = None,
    ) -> None:
        self.engine = LayoutEngine(
            snapshot,
            cards,
            categories or default_category_registry(),
            settings=settings,
            callbacks=callbacks,
        )

    def render(self) -> list[CategoryView]:
        return self.engine.render()

    def refresh(self, snapshot: LayoutSnapshot) -> None:
        """Reload the host's configuration after it changed externally.

        The editing session continues: categories altered through this editor
        stay altered, so a freshly created empty category is not auto-hidden
        once the host echoes it back.
        """
        self.engine.reload(snapshot, keep_session=True)
