"""Partitioned card order algorithms.

Objective:
    Represent many independently orderable categories as one flat card
    order. The flat order (``OrderStore``) is the only place intra-category
    order lives; the assignment map (card -> category) only carries
    membership. A category's cards are obtained by filtering the flat order.

Responsibilities:
    - Filter the flat order into one category's cards.
    - Translate a drop position expressed as a *local* index (position among
      the target category's cards) into a *global* insertion index.
    - Move a card between or within categories.
    - Move a category within the category order.
    - Normalize a stored card/category order on load.
    - Validate the structural invariants of a layout.

High-level call tree:
    - :func:`move_card`
        - :func:`cards_in_category`
        - :func:`resolve_insert_index`
            - :func:`_index_after_preceding_category`
    - :func:`move_category`
    - :func:`normalize_card_order` / :func:`normalize_category_order`
    - :func:`validate_layout`

Operational notes:
    - All functions are pure: they return new lists/dicts and never mutate
      their inputs. The engine swaps the results in as one step.
    - Cards missing from the assignment map belong to ``available``.
"""

import logging
from typing import Iterable, Optional

from .config import AVAILABLE_CATEGORY

logger = logging.getLogger(__name__)


class LayoutInvariantError(ValueError):
    """Raised when a layout violates the card/category order invariants."""


def category_of(assignment: dict[str, str], card_id: str) -> str:
    """Return the category of a card, defaulting to ``available``."""
    return assignment.get(card_id) or AVAILABLE_CATEGORY


def cards_in_category(
    order: list[str], assignment: dict[str, str], category_id: str
) -> list[str]:
    """
    Return the cards of one category in flat-order order.

    Args:
        order: Flat card order.
        assignment: Card id -> category id.
        category_id: Category to filter by.

    Returns:
        list[str]: Card ids rendered under ``category_id``.
    """
    return [card_id for card_id in order if category_of(assignment, card_id) == category_id]


def _index_after_preceding_category(
    order: list[str],
    assignment: dict[str, str],
    category_order: list[str],
    target_category: str,
) -> int:
    """Global index right after the last card of the nearest non-empty
    category that precedes ``target_category``.

    ``available`` is rendered after every ordered category, so it is walked
    back from the end of the category order.
    """
    lanes = [*category_order, AVAILABLE_CATEGORY]
    if target_category not in lanes:
        return len(order)

    position = lanes.index(target_category)
    for previous in reversed(lanes[:position]):
        previous_cards = cards_in_category(order, assignment, previous)
        if previous_cards:
            return order.index(previous_cards[-1]) + 1
    return 0


def resolve_insert_index(
    order: list[str],
    assignment: dict[str, str],
    category_order: list[str],
    target_category: str,
    local_index: Optional[int],
) -> int:
    """
    Translate a local drop index into a global insertion index.

    ``order`` must already exclude the dragged card so its old position does
    not skew the local indices.

    Resolution rules:
        - Non-empty target, local index in bounds: insert before the card
          currently at that local index.
        - Non-empty target, local index at (or past) the end: insert right
          after the category's last card.
        - Empty target: insert after the last card of the nearest preceding
          non-empty category, or at position 0 if there is none.

    Args:
        order: Flat card order without the dragged card.
        assignment: Card id -> category id.
        category_order: Ordered category ids.
        target_category: Category receiving the card.
        local_index: Position among the target's cards; ``None`` appends.

    Returns:
        int: Index into ``order`` at which to insert.
    """
    partition = cards_in_category(order, assignment, target_category)
    local_index = clamp_local_index(local_index, len(partition))

    if not partition:
        return _index_after_preceding_category(order, assignment, category_order, target_category)

    if local_index < len(partition):
        return order.index(partition[local_index])
    return order.index(partition[-1]) + 1


def clamp_local_index(local_index: Optional[int], partition_size: int) -> int:
    """Clamp a local index into ``[0, partition_size]``; ``None`` appends."""
    if local_index is None or local_index > partition_size:
        return partition_size
    return max(local_index, 0)


def move_card(
    order: list[str],
    assignment: dict[str, str],
    category_order: list[str],
    card_id: str,
    target_category: str,
    local_index: Optional[int] = None,
) -> tuple[list[str], dict[str, str]]:
    """
    Move a card to a position inside a category.

    The card is removed first and reinserted at the resolved global index,
    so the flat order can never hold it twice. Dropping a card back onto its
    own (category, local index) keeps its global slot, leaving the order
    untouched.

    Args:
        order: Flat card order.
        assignment: Card id -> category id.
        category_order: Ordered category ids.
        card_id: Card being moved; must be in ``order``.
        target_category: Category receiving the card.
        local_index: Position among the target's other cards; ``None`` appends.

    Returns:
        tuple[list[str], dict[str, str]]: New (order, assignment).
    """
    source_category = category_of(assignment, card_id)
    original_index = order.index(card_id)
    original_local = cards_in_category(order, assignment, source_category).index(card_id)

    remaining = [cid for cid in order if cid != card_id]
    new_assignment = dict(assignment)
    new_assignment[card_id] = target_category

    target_size = len(cards_in_category(remaining, new_assignment, target_category))
    local = clamp_local_index(local_index, target_size)

    if source_category == target_category and local == original_local:
        insert_at = original_index
    else:
        insert_at = resolve_insert_index(
            remaining, new_assignment, category_order, target_category, local
        )

    remaining.insert(insert_at, card_id)
    logger.debug(
        f"Moved card {card_id}: {source_category}[{original_local}] -> "
        f"{target_category}[{local}] (global {original_index} -> {insert_at})"
    )
    return remaining, new_assignment


def move_category(
    category_order: list[str], category_id: str, target_category_id: str
) -> list[str]:
    """
    Move a category to the position currently held by another category.

    Unknown ids, ``available`` and self-drops leave the order unchanged.

    Args:
        category_order: Ordered category ids.
        category_id: Category being dragged.
        target_category_id: Category it was dropped on.

    Returns:
        list[str]: New category order.
    """
    if category_id not in category_order or target_category_id not in category_order:
        return list(category_order)

    source_index = category_order.index(category_id)
    target_index = category_order.index(target_category_id)
    if source_index == target_index:
        return list(category_order)

    new_order = list(category_order)
    new_order.pop(source_index)
    new_order.insert(target_index, category_id)
    return new_order


def move_category_to(category_order: list[str], category_id: str, position: int) -> list[str]:
    """Move a category to an absolute position, clamped to the list bounds."""
    if category_id not in category_order:
        return list(category_order)

    new_order = [cid for cid in category_order if cid != category_id]
    position = min(max(position, 0), len(new_order))
    new_order.insert(position, category_id)
    return new_order


def normalize_card_order(order: Iterable[str], known_card_ids: list[str]) -> list[str]:
    """
    Make a stored card order contain every known card exactly once.

    Duplicates and unknown ids are dropped; known ids missing from the stored
    order are appended in registry order.

    Args:
        order: Stored card order (may be stale).
        known_card_ids: Every card id from the card registry.

    Returns:
        list[str]: Normalized card order.
    """
    known = set(known_card_ids)
    seen: set[str] = set()
    result: list[str] = []
    for card_id in order:
        if card_id in known and card_id not in seen:
            seen.add(card_id)
            result.append(card_id)

    missing = [card_id for card_id in known_card_ids if card_id not in seen]
    if missing:
        logger.debug(f"Appending {len(missing)} cards missing from stored order: {missing}")
    return result + missing


def normalize_category_order(order: Iterable[str]) -> list[str]:
    """Drop duplicates, blanks and the ``available`` sentinel."""
    seen: set[str] = set()
    result: list[str] = []
    for category_id in order:
        if not category_id or category_id == AVAILABLE_CATEGORY or category_id in seen:
            continue
        seen.add(category_id)
        result.append(category_id)
    return result


def validate_layout(
    order: list[str],
    assignment: dict[str, str],
    category_order: list[str],
    known_card_ids: Iterable[str],
) -> None:
    """
    Check the structural invariants of a layout.

    Checks:
        - The flat order holds every known card exactly once.
        - Every card in the flat order has an assignment.
        - Every assignment points at an ordered category or ``available``.
        - The category order has no duplicates and no ``available``.

    Raises:
        LayoutInvariantError: On the first violated invariant.
    """
    known = set(known_card_ids)

    if len(order) != len(set(order)):
        duplicates = sorted({cid for cid in order if order.count(cid) > 1})
        raise LayoutInvariantError(f"Duplicate cards in card order: {duplicates}")
    if set(order) != known:
        missing = sorted(known - set(order))
        unknown = sorted(set(order) - known)
        raise LayoutInvariantError(
            f"Card order does not match known cards (missing={missing}, unknown={unknown})"
        )

    unassigned = [cid for cid in order if cid not in assignment]
    if unassigned:
        raise LayoutInvariantError(f"Cards without category assignment: {unassigned}")

    if len(category_order) != len(set(category_order)):
        raise LayoutInvariantError("Duplicate categories in category order")
    if AVAILABLE_CATEGORY in category_order:
        raise LayoutInvariantError("Category order must not contain the available category")

    lanes = set(category_order) | {AVAILABLE_CATEGORY}
    stray = {cid: cat for cid, cat in assignment.items() if cat not in lanes}
    if stray:
        raise LayoutInvariantError(f"Cards assigned to unknown categories: {stray}")
