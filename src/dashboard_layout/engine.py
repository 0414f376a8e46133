"""Layout editing engine.

Objective:
    Own one editing session of the dashboard layout: a local copy of the
    host's configuration that is mutated by drag-and-drop and click
    operations, then either discarded or handed back as a snapshot.

Responsibilities:
    - Load and normalize a :class:`~src.dashboard_layout.models.LayoutSnapshot`.
    - Apply every mutation (card move, category reorder/create/rename/
      delete, visibility toggles, card title/visibility) as one atomic step.
    - Track categories altered during the session and run the auto-hide
      pass for empty, untouched custom categories after every mutation.
    - Drive the :class:`~src.dashboard_layout.drag.DragCoordinator`.
    - Render category views and build the snapshot emitted on save.
    - Notify a host through :class:`EditorCallbacks` after each mutation.

High-level call tree:
    - :class:`LayoutEngine`
        - :meth:`LayoutEngine.__init__` -> :meth:`LayoutEngine._load`
        - mutations (e.g. :meth:`LayoutEngine.move_card`)
            - :func:`src.dashboard_layout.ordering.move_card`
            - :meth:`LayoutEngine._commit`
                - :meth:`LayoutEngine.apply_auto_hide`
                - callbacks
        - drag: :meth:`begin_card_drag` / :meth:`drag_over` / :meth:`drop` /
          :meth:`end_drag`
        - :meth:`LayoutEngine.render`
        - :meth:`LayoutEngine.build_save_snapshot`
            - :func:`src.dashboard_layout.ordering.validate_layout`

Operational notes:
    - Mutations never raise for bad input: unknown cards or categories,
      system-category deletes and unknown icons are ignored and the method
      returns ``False``.
    - The altered set and collapsed state are session-only and are never
      written to a snapshot.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .config import AVAILABLE_CATEGORY, Settings, get_settings
from .drag import CardMove, CardSlot, CategoryMove, DragCoordinator, DropZone
from .models import CardView, CategoryConfig, CategoryDefinition, CategoryView, LayoutSnapshot
from .ordering import (
    cards_in_category,
    category_of,
    move_card,
    move_category,
    move_category_to,
    normalize_card_order,
    normalize_category_order,
    validate_layout,
)
from .registry import CardRegistry, CategoryRegistry, is_known_icon

logger = logging.getLogger(__name__)


@dataclass
class EditorCallbacks:
    """
    Per-field notifications for hosts that apply changes immediately.

    Every field is optional. ``on_category_config_changed`` receives a
    partial config using the persisted key names (``visible``,
    ``showTitle``).
    """

    on_order_changed: Optional[Callable[[list[str]], None]] = None
    on_visibility_changed: Optional[Callable[[str, bool], None]] = None
    on_card_title_changed: Optional[Callable[[str, str], None]] = None
    on_category_name_changed: Optional[Callable[[str, str], None]] = None
    on_category_icon_changed: Optional[Callable[[str, str], None]] = None
    on_category_order_changed: Optional[Callable[[list[str]], None]] = None
    on_category_config_changed: Optional[Callable[[str, dict[str, bool]], None]] = None
    on_card_category_changed: Optional[Callable[[str, str], None]] = None
    on_category_added: Optional[Callable[[str, str], None]] = None
    on_category_deleted: Optional[Callable[[str], None]] = None


class LayoutEngine:
    """
    One in-memory editing session of the dashboard layout.

    The flat card order is authoritative for intra-category order; the
    assignment map is authoritative for membership only.

    Attributes:
        cards: Card registry (the universe of card ids).
        categories: Category registry for this session.
        settings: Application settings.
        callbacks: Host notifications.
        drag: Drag session state machine.
        altered: Categories explicitly touched this session.
        collapsed: Categories collapsed in the editor.
    """

    def __init__(
        self,
        snapshot: LayoutSnapshot,
        cards: CardRegistry,
        categories: CategoryRegistry,
        settings: Optional[Settings] = None,
        callbacks: Optional[EditorCallbacks] = None,
    ) -> None:
        """
        Initialize a session from a host snapshot.

        The snapshot is copied; later edits never reach the caller's object.

        Args:
            snapshot: Layout supplied by the host.
            cards: Card registry.
            categories: Category registry for this session.
            settings: Application settings (loads from env if None).
            callbacks: Host notifications (none if None).
        """
        self.cards = cards
        self.categories = categories
        self.settings = settings or get_settings()
        self.callbacks = callbacks or EditorCallbacks()
        self.drag = DragCoordinator()
        self.altered: set[str] = set()
        self.collapsed: set[str] = set()

        self._card_order: list[str] = []
        self._assignment: dict[str, str] = {}
        self._category_order: list[str] = []
        self._category_config: dict[str, CategoryConfig] = {}
        self._card_visibility: dict[str, bool] = {}
        self._card_titles: dict[str, str] = {}
        self._category_names: dict[str, str] = {}
        self._category_icons: dict[str, str] = {}
        self._category_counter = 1

        self._load(snapshot)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load(self, snapshot: LayoutSnapshot, keep_session: bool = False) -> None:
        """Copy and normalize a snapshot into the session.

        Args:
            snapshot: Layout to load.
            keep_session: Keep the altered and collapsed state of categories
                that still exist, keep the id counter, and notify the host of
                categories hidden by the auto-hide pass.
        """
        category_order = normalize_category_order(snapshot.category_order)
        if not category_order:
            category_order = self.categories.default_category_order()

        for category_id in category_order:
            if category_id not in self.categories:
                self.categories.register(
                    CategoryDefinition(
                        id=category_id,
                        default_name=snapshot.category_names.get(category_id, category_id),
                        icon=snapshot.category_icons.get(
                            category_id, self.settings.default_category_icon
                        ),
                        is_system=False,
                    )
                )

        lanes = set(category_order) | {AVAILABLE_CATEGORY}
        card_order = normalize_card_order(snapshot.card_order, self.cards.card_ids())
        assignment: dict[str, str] = {}
        for card_id in card_order:
            category = snapshot.card_category_assignment.get(card_id) or AVAILABLE_CATEGORY
            assignment[card_id] = category if category in lanes else AVAILABLE_CATEGORY

        config: dict[str, CategoryConfig] = {}
        for category_id in [*category_order, AVAILABLE_CATEGORY]:
            stored = snapshot.category_config.get(category_id)
            if stored is None:
                config[category_id] = CategoryConfig(id=category_id)
            else:
                config[category_id] = stored.model_copy(update={"id": category_id})

        self._card_order = card_order
        self._assignment = assignment
        self._category_order = category_order
        self._category_config = config
        known_cards = set(card_order)
        self._card_visibility = {
            cid: visible for cid, visible in snapshot.card_visibility.items() if cid in known_cards
        }
        self._card_titles = {
            cid: title for cid, title in snapshot.card_titles.items() if cid in known_cards
        }
        self._category_names = dict(snapshot.category_names)
        self._category_icons = dict(snapshot.category_icons)

        self.drag.end()
        if keep_session:
            self.altered.intersection_update(lanes)
            self.collapsed.intersection_update(lanes)
        else:
            self.altered.clear()
            self.collapsed.clear()
            self._category_counter = 1

        logger.debug(
            f"Loaded layout: {len(card_order)} cards, {len(category_order)} categories"
        )
        self.apply_auto_hide(notify=keep_session)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def card_order(self) -> list[str]:
        return list(self._card_order)

    @property
    def category_order(self) -> list[str]:
        return list(self._category_order)

    @property
    def assignment(self) -> dict[str, str]:
        return dict(self._assignment)

    def has_category(self, category_id: str) -> bool:
        """Return True for ordered categories and ``available``."""
        return category_id == AVAILABLE_CATEGORY or category_id in self._category_order

    def is_custom(self, category_id: str) -> bool:
        return category_id != AVAILABLE_CATEGORY and not self.categories.is_system(category_id)

    def category_of(self, card_id: str) -> str:
        return category_of(self._assignment, card_id)

    def cards_in_category(self, category_id: str) -> list[str]:
        """Return a category's cards in flat-order order."""
        return cards_in_category(self._card_order, self._assignment, category_id)

    def category_config(self, category_id: str) -> CategoryConfig:
        return self._category_config.get(category_id) or CategoryConfig(id=category_id)

    def category_name(self, category_id: str) -> str:
        return self._category_names.get(category_id) or self.categories.default_name(category_id)

    def category_icon(self, category_id: str) -> str:
        return self._category_icons.get(category_id) or self.categories.default_icon(category_id)

    def card_title(self, card_id: str) -> str:
        return self._card_titles.get(card_id) or self.cards.default_title(card_id)

    def is_card_visible(self, card_id: str) -> bool:
        return self._card_visibility.get(card_id) is not False

    # ------------------------------------------------------------------
    # Card mutations
    # ------------------------------------------------------------------

    def move_card(
        self, card_id: str, target_category: str, index: Optional[int] = None
    ) -> bool:
        """
        Move a card to a local position inside a category.

        Moving across categories marks both categories altered.

        Args:
            card_id: Card to move.
            target_category: Destination category.
            index: Local index among the destination's other cards; ``None``
                or an out-of-range index appends, negative indices clamp to 0.

        Returns:
            bool: True if the order or assignment changed.
        """
        if card_id not in self._assignment:
            logger.debug(f"Ignoring move of unknown card: {card_id}")
            return False
        if not self.has_category(target_category):
            logger.debug(f"Ignoring move of {card_id} to unknown category: {target_category}")
            return False

        source_category = self.category_of(card_id)
        new_order, new_assignment = move_card(
            self._card_order,
            self._assignment,
            self._category_order,
            card_id,
            target_category,
            index,
        )

        order_changed = new_order != self._card_order
        category_changed = source_category != target_category
        if not order_changed and not category_changed:
            return False

        self._card_order = new_order
        self._assignment = new_assignment
        if category_changed:
            self.altered.update((source_category, target_category))

        def notify() -> None:
            if order_changed:
                self._emit("on_order_changed", list(self._card_order))
            if category_changed:
                self._emit("on_card_category_changed", card_id, target_category)

        self._commit(notify)
        return True

    def move_card_to_available(self, card_id: str) -> bool:
        """Append a card to ``available``; no-op if it is already there."""
        if self.category_of(card_id) == AVAILABLE_CATEGORY:
            return False
        return self.move_card(card_id, AVAILABLE_CATEGORY)

    def shift_card(self, card_id: str, offset: int) -> bool:
        """
        Move a card up (negative) or down (positive) within its category.

        Args:
            card_id: Card to shift.
            offset: Number of local positions to move.

        Returns:
            bool: True if the card moved; out-of-range shifts are no-ops.
        """
        if card_id not in self._assignment or offset == 0:
            return False

        category = self.category_of(card_id)
        partition = self.cards_in_category(category)
        new_index = partition.index(card_id) + offset
        if new_index < 0 or new_index >= len(partition):
            return False
        return self.move_card(card_id, category, new_index)

    def toggle_card_visibility(self, card_id: str) -> bool:
        """Flip a card's visible flag."""
        if card_id not in self._assignment:
            return False
        visible = not self.is_card_visible(card_id)
        self._card_visibility[card_id] = visible
        self._commit(lambda: self._emit("on_visibility_changed", card_id, visible))
        return True

    def set_card_title(self, card_id: str, title: str) -> bool:
        """Set a card's custom title."""
        if card_id not in self._assignment:
            return False
        self._card_titles[card_id] = title
        self._commit(lambda: self._emit("on_card_title_changed", card_id, title))
        return True

    def reset_card(self, card_id: str) -> bool:
        """Restore a card's default title and make it visible again."""
        if card_id not in self._assignment:
            return False
        title = self.cards.default_title(card_id)
        self._card_titles[card_id] = title
        self._card_visibility[card_id] = True

        def notify() -> None:
            self._emit("on_card_title_changed", card_id, title)
            self._emit("on_visibility_changed", card_id, True)

        self._commit(notify)
        return True

    # ------------------------------------------------------------------
    # Category lifecycle
    # ------------------------------------------------------------------

    def create_category(self, name: Optional[str] = None) -> str:
        """
        Create a custom category at the front of the category order.

        The category is marked altered so the auto-hide pass leaves it
        visible while it is still empty.

        Args:
            name: Display name; a generated ``New Category <n>`` if None.

        Returns:
            str: The new category id.
        """
        counter = self._category_counter
        category_id = self.settings.custom_category_id(counter)
        while self.has_category(category_id) or category_id in self.categories:
            counter += 1
            category_id = self.settings.custom_category_id(counter)
        self._category_counter = counter + 1

        display_name = (name or "").strip() or self.settings.new_category_name(counter)
        icon = self.settings.default_category_icon

        self.categories.register(
            CategoryDefinition(id=category_id, default_name=display_name, icon=icon, is_system=False)
        )
        self._category_order = [category_id, *self._category_order]
        self._category_names[category_id] = display_name
        self._category_icons[category_id] = icon
        self._category_config[category_id] = CategoryConfig(id=category_id)
        self.altered.add(category_id)

        def notify() -> None:
            self._emit("on_category_added", category_id, display_name)
            self._emit("on_category_order_changed", list(self._category_order))

        self._commit(notify)
        logger.info(f"Created category {category_id} ({display_name})")
        return category_id

    def rename_category(self, category_id: str, name: str) -> bool:
        """
        Change a category's display name and mark it altered.

        Args:
            category_id: Category to rename.
            name: New name; blank names are ignored.

        Returns:
            bool: True if the name was applied.
        """
        name = (name or "").strip()
        if not name or not self.has_category(category_id):
            return False

        self._category_names[category_id] = name
        self.altered.add(category_id)
        self._commit(lambda: self._emit("on_category_name_changed", category_id, name))
        return True

    def set_category_icon(self, category_id: str, icon_id: str) -> bool:
        """Change a category's icon and mark it altered."""
        if not self.has_category(category_id):
            return False
        if not is_known_icon(icon_id):
            logger.warning(f"Ignoring unknown icon {icon_id!r} for category {category_id}")
            return False

        self._category_icons[category_id] = icon_id
        self.altered.add(category_id)
        self._commit(lambda: self._emit("on_category_icon_changed", category_id, icon_id))
        return True

    def delete_category(self, category_id: str) -> bool:
        """
        Delete a custom category.

        Cards of the deleted category move to ``available``; no card is ever
        removed. System categories, ``available`` and unknown ids are
        ignored.

        Args:
            category_id: Category to delete.

        Returns:
            bool: True if the category was deleted.
        """
        if category_id not in self._category_order or not self.is_custom(category_id):
            logger.debug(f"Ignoring delete of category: {category_id}")
            return False

        orphaned = self.cards_in_category(category_id)
        new_assignment = dict(self._assignment)
        for card_id in orphaned:
            new_assignment[card_id] = AVAILABLE_CATEGORY

        self._assignment = new_assignment
        self._category_order = [cid for cid in self._category_order if cid != category_id]
        self._category_config.pop(category_id, None)
        self._category_names.pop(category_id, None)
        self._category_icons.pop(category_id, None)
        self.altered.discard(category_id)
        self.collapsed.discard(category_id)

        self._commit(lambda: self._emit("on_category_deleted", category_id))
        logger.info(f"Deleted category {category_id}; {len(orphaned)} cards moved to available")
        return True

    def reorder_category(self, category_id: str, target_category_id: str) -> bool:
        """Move a category onto the position of another category."""
        new_order = move_category(self._category_order, category_id, target_category_id)
        return self._set_category_order(new_order)

    def move_category_to(self, category_id: str, position: int) -> bool:
        """Move a category to an absolute position in the category order."""
        new_order = move_category_to(self._category_order, category_id, position)
        return self._set_category_order(new_order)

    def _set_category_order(self, new_order: list[str]) -> bool:
        if new_order == self._category_order:
            return False
        self._category_order = new_order
        self._commit(lambda: self._emit("on_category_order_changed", list(new_order)))
        return True

    def toggle_category_visibility(self, category_id: str) -> bool:
        """Flip a category's visible flag."""
        if not self.has_category(category_id):
            return False
        return self.update_category_config(
            category_id, visible=not self.category_config(category_id).visible
        )

    def toggle_category_title(self, category_id: str) -> bool:
        """Flip a category's show-title flag."""
        if not self.has_category(category_id):
            return False
        return self.update_category_config(
            category_id, show_title=not self.category_config(category_id).show_title
        )

    def update_category_config(
        self,
        category_id: str,
        visible: Optional[bool] = None,
        show_title: Optional[bool] = None,
    ) -> bool:
        """
        Set category display flags.

        Args:
            category_id: Category to update.
            visible: New visible flag, unchanged if None.
            show_title: New show-title flag, unchanged if None.

        Returns:
            bool: True if a flag changed.
        """
        if not self.has_category(category_id):
            return False

        current = self.category_config(category_id)
        partial: dict[str, bool] = {}
        if visible is not None and visible != current.visible:
            partial["visible"] = visible
        if show_title is not None and show_title != current.show_title:
            partial["showTitle"] = show_title
        if not partial:
            return False

        self._category_config[category_id] = CategoryConfig.model_validate(
            {**current.model_dump(by_alias=True), **partial, "id": category_id}
        )
        self._commit(lambda: self._emit("on_category_config_changed", category_id, partial))
        return True

    def toggle_collapsed(self, category_id: str) -> bool:
        """Collapse or expand a category in the editor (session only)."""
        if not self.has_category(category_id):
            return False
        if category_id in self.collapsed:
            self.collapsed.discard(category_id)
        else:
            self.collapsed.add(category_id)
        return True

    # ------------------------------------------------------------------
    # Auto-hide
    # ------------------------------------------------------------------

    def hidden_candidates(self) -> list[str]:
        """Custom categories that are empty and were never altered."""
        occupied = set(self._assignment.values())
        return [
            cid
            for cid in self._category_order
            if self.is_custom(cid) and cid not in occupied and cid not in self.altered
        ]

    def apply_auto_hide(self, notify: bool = True) -> list[str]:
        """
        Hide empty custom categories that were not altered this session.

        System categories and ``available`` are never hidden by this pass.

        Args:
            notify: Emit ``on_category_config_changed`` for each change.

        Returns:
            list[str]: Categories whose visible flag was switched off.
        """
        hidden: list[str] = []
        for category_id in self.hidden_candidates():
            current = self.category_config(category_id)
            if current.visible:
                self._category_config[category_id] = current.model_copy(
                    update={"visible": False, "id": category_id}
                )
                hidden.append(category_id)

        if hidden:
            logger.debug(f"Auto-hid empty categories: {hidden}")
            if notify:
                for category_id in hidden:
                    self._emit("on_category_config_changed", category_id, {"visible": False})
        return hidden

    def _commit(self, notify: Callable[[], None]) -> None:
        """Finish a mutation: run the derived pass, then notify the host."""
        hidden = self.apply_auto_hide(notify=False)
        notify()
        for category_id in hidden:
            self._emit("on_category_config_changed", category_id, {"visible": False})

    def _emit(self, name: str, *args: Any) -> None:
        callback = getattr(self.callbacks, name, None)
        if callback is not None:
            callback(*args)

    # ------------------------------------------------------------------
    # Drag and drop
    # ------------------------------------------------------------------

    def begin_card_drag(self, card_id: str) -> bool:
        """Start dragging a card; its source category comes from the assignment."""
        if card_id not in self._assignment:
            self.drag.end()
            return False
        self.drag.start_card(card_id, self.category_of(card_id))
        return True

    def begin_category_drag(self, category_id: str) -> bool:
        """Start dragging an ordered category (``available`` cannot be dragged)."""
        if category_id not in self._category_order:
            self.drag.end()
            return False
        self.drag.start_category(category_id)
        return True

    def drag_over(self, zone: DropZone) -> None:
        """Update the candidate drop target; never mutates the layout."""
        if self.has_category(zone.category_id):
            self.drag.drag_over(zone)

    def drop(self, zone: DropZone) -> bool:
        """
        Apply the drop of the in-flight payload on ``zone``.

        The drag session always returns to idle, whether or not the drop
        changed anything.

        Returns:
            bool: True if the layout changed.
        """
        action = self.drag.drop(zone)
        if isinstance(action, CardMove):
            return self.move_card(action.card_id, action.target_category, action.index)
        if isinstance(action, CategoryMove):
            return self.reorder_category(action.category_id, action.target_category_id)
        return False

    def end_drag(self) -> None:
        """Cancel or finish the drag session."""
        self.drag.end()

    @property
    def drop_candidate(self) -> Union[CardSlot, str, None]:
        return self.drag.candidate

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def render(self, include_available: bool = True) -> list[CategoryView]:
        """
        Build the category views shown by an editor.

        Ordered categories come first, ``available`` last.

        Args:
            include_available: Whether to append the ``available`` section.

        Returns:
            list[CategoryView]: Views in display order.
        """
        category_ids = list(self._category_order)
        if include_available:
            category_ids.append(AVAILABLE_CATEGORY)

        views: list[CategoryView] = []
        for category_id in category_ids:
            config = self.category_config(category_id)
            views.append(
                CategoryView(
                    id=category_id,
                    name=self.category_name(category_id),
                    icon=self.category_icon(category_id),
                    is_system=self.categories.is_system(category_id),
                    is_available=category_id == AVAILABLE_CATEGORY,
                    visible=config.visible,
                    show_title=config.show_title,
                    collapsed=category_id in self.collapsed,
                    cards=[
                        CardView(
                            id=card_id,
                            title=self.card_title(card_id),
                            visible=self.is_card_visible(card_id),
                        )
                        for card_id in self.cards_in_category(category_id)
                    ],
                )
            )
        return views

    def snapshot(self) -> LayoutSnapshot:
        """Return a copy of the current session state, unfiltered."""
        return LayoutSnapshot(
            card_order=list(self._card_order),
            card_visibility=dict(self._card_visibility),
            card_titles=dict(self._card_titles),
            category_order=list(self._category_order),
            category_config={cid: cfg.model_copy() for cid, cfg in self._category_config.items()},
            card_category_assignment=dict(self._assignment),
            category_names=dict(self._category_names),
            category_icons=dict(self._category_icons),
        )

    def build_save_snapshot(self) -> LayoutSnapshot:
        """
        Build the snapshot handed to the host on save.

        Custom categories that are empty and were never altered are dropped
        from the category order and every per-category map.

        Returns:
            LayoutSnapshot: Invariant-checked snapshot.

        Raises:
            LayoutInvariantError: If the session state is inconsistent.
        """
        dropped = set(self.hidden_candidates())
        snapshot = self.snapshot()
        if dropped:
            logger.info(f"Dropping empty unaltered categories on save: {sorted(dropped)}")
            snapshot.category_order = [
                cid for cid in snapshot.category_order if cid not in dropped
            ]
            for mapping in (
                snapshot.category_config,
                snapshot.category_names,
                snapshot.category_icons,
            ):
                for category_id in dropped:
                    mapping.pop(category_id, None)

        validate_layout(
            snapshot.card_order,
            snapshot.card_category_assignment,
            snapshot.category_order,
            self.cards.card_ids(),
        )
        return snapshot

    def reload(self, snapshot: LayoutSnapshot, keep_session: bool = False) -> None:
        """Load ``snapshot`` in place of the current layout.

        By default the whole session is discarded. With ``keep_session`` the
        session continues on the new layout: categories altered earlier stay
        altered, which is what a host refreshing a live editor needs.
        """
        self._load(snapshot, keep_session=keep_session)
