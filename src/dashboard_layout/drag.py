"""Drag-and-drop session state machine.

Objective:
    Track a single drag session in the layout editor and turn a drop into a
    mutation request, without touching the layout itself.

States:
    - :class:`Idle`: nothing is being dragged.
    - :class:`DraggingCard`: a card is in flight; carries its source
      category and the candidate :class:`CardSlot` under the pointer.
    - :class:`DraggingCategory`: a category is in flight; carries the
      candidate category id under the pointer.

Exactly one state is active at a time. The candidate target lives inside
the dragging state, so returning to :data:`IDLE` clears it too.

Transitions:
    - :meth:`DragCoordinator.start_card` / :meth:`DragCoordinator.start_category`
      (from any state; an unfinished drag is discarded first)
    - :meth:`DragCoordinator.drag_over` updates the candidate only
    - :meth:`DragCoordinator.drop` resolves a :class:`CardMove` or
      :class:`CategoryMove` and returns to idle
    - :meth:`DragCoordinator.end` returns to idle (drop, escape, pointer left
      every drop zone)

Drop resolution:
    - Card payload on a :class:`CardSlot`: move to that slot.
    - Card payload on a :class:`CategoryHeader`: append to that category.
    - Category payload on any zone: reorder onto that zone's category.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardSlot:
    """Drop zone between cards of a category.

    Args:
        category_id: Category owning the slot.
        index: Local index among the category's cards; ``None`` appends.
    """

    category_id: str
    index: Optional[int] = None


@dataclass(frozen=True)
class CategoryHeader:
    """Drop zone covering a category header / drag handle."""

    category_id: str


DropZone = Union[CardSlot, CategoryHeader]


@dataclass(frozen=True)
class Idle:
    """No drag in progress."""


@dataclass(frozen=True)
class DraggingCard:
    card_id: str
    source_category: str
    candidate: Optional[CardSlot] = None


@dataclass(frozen=True)
class DraggingCategory:
    category_id: str
    candidate: Optional[str] = None


DragState = Union[Idle, DraggingCard, DraggingCategory]

IDLE = Idle()


@dataclass(frozen=True)
class CardMove:
    """Resolved request to move a card into a category position."""

    card_id: str
    source_category: str
    target_category: str
    index: Optional[int] = None


@dataclass(frozen=True)
class CategoryMove:
    """Resolved request to move a category onto another category's slot."""

    category_id: str
    target_category_id: str


DropAction = Union[CardMove, CategoryMove]


class DragCoordinator:
    """
    Single drag session of an editor.

    The coordinator never mutates layout data. :meth:`drop` returns the
    action to apply and the caller applies it.

    Attributes:
        _state: Current :data:`DragState`.
    """

    def __init__(self) -> None:
        self._state: DragState = IDLE

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_idle(self) -> bool:
        return isinstance(self._state, Idle)

    @property
    def candidate(self) -> Union[CardSlot, str, None]:
        """Candidate drop target for placeholder highlighting."""
        if isinstance(self._state, (DraggingCard, DraggingCategory)):
            return self._state.candidate
        return None

    def start_card(self, card_id: str, source_category: str) -> None:
        """Begin dragging a card.

        Args:
            card_id: Card under the pointer.
            source_category: Category the card currently belongs to.
        """
        self._discard_unfinished()
        self._state = DraggingCard(card_id=card_id, source_category=source_category)
        logger.debug(f"Drag start: card {card_id} from {source_category}")

    def start_category(self, category_id: str) -> None:
        """Begin dragging a category by its drag handle."""
        self._discard_unfinished()
        self._state = DraggingCategory(category_id=category_id)
        logger.debug(f"Drag start: category {category_id}")

    def drag_over(self, zone: DropZone) -> None:
        """
        Record the drop zone under the pointer.

        Hovering a category header while dragging a card targets the end of
        that category. Hovering a category's own zone while dragging it is
        ignored. Idle hovers are ignored.

        Args:
            zone: Drop zone under the pointer.
        """
        state = self._state
        if isinstance(state, DraggingCard):
            slot = zone if isinstance(zone, CardSlot) else CardSlot(zone.category_id)
            if state.candidate != slot:
                self._state = DraggingCard(state.card_id, state.source_category, slot)
        elif isinstance(state, DraggingCategory):
            if zone.category_id != state.category_id and state.candidate != zone.category_id:
                self._state = DraggingCategory(state.category_id, zone.category_id)

    def drop(self, zone: DropZone) -> Optional[DropAction]:
        """
        Resolve a drop on ``zone`` and return to idle.

        Args:
            zone: Drop zone receiving the payload.

        Returns:
            Optional[DropAction]: The mutation to apply, or None when nothing
            was being dragged.
        """
        state = self._state
        try:
            if isinstance(state, DraggingCard):
                index = zone.index if isinstance(zone, CardSlot) else None
                return CardMove(
                    card_id=state.card_id,
                    source_category=state.source_category,
                    target_category=zone.category_id,
                    index=index,
                )
            if isinstance(state, DraggingCategory):
                return CategoryMove(
                    category_id=state.category_id, target_category_id=zone.category_id
                )
            return None
        finally:
            self.end()

    def end(self) -> None:
        """Return to idle unconditionally."""
        if not self.is_idle:
            logger.debug(f"Drag end: {self._state}")
        self._state = IDLE

    def _discard_unfinished(self) -> None:
        if not self.is_idle:
            logger.debug(f"Discarding unfinished drag: {self._state}")
            self._state = IDLE
