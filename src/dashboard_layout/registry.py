"""Card and category registries.

Objective:
    Hold the definitions the editor needs but does not own: the universe of
    card ids (fixed by the dashboard's card catalog) and the category
    definitions (system categories plus any custom category created during a
    session).

Responsibilities:
    - :class:`CardRegistry`: known card ids in catalog order, default titles,
      default categories.
    - :class:`CategoryRegistry`: category definitions, system flag lookup,
      default names/icons, registration of custom categories.
    - :data:`AVAILABLE_ICONS`: icon ids a category may be given.
    - :func:`build_default_snapshot`: the registry-driven default layout a
      host uses when nothing is stored yet.

Design notes:
    Registries are plain objects passed into each editing session. Creating
    a custom category registers it in *that* session's
    :class:`CategoryRegistry` only, so two sessions (or two tests) never see
    each other's categories.

High-level call tree:
    - :func:`default_card_registry` / :func:`default_category_registry`
    - :func:`build_default_snapshot`
        - :meth:`CardRegistry.card_ids`
        - :meth:`CategoryRegistry.default_category_order`
"""

import logging
from typing import Iterable, Optional

from .config import AVAILABLE_CATEGORY, DEFAULT_CATEGORY_ORDER, DEFAULT_ICON_ID, SystemCategory
from .models import CardDefinition, CategoryConfig, CategoryDefinition, LayoutSnapshot

logger = logging.getLogger(__name__)

AVAILABLE_ICONS: tuple[str, ...] = (
    "grid", "home", "star", "heart", "bookmark", "tag", "sparkle", "lightbulb",
    "trophy", "ribbon", "target", "rocket", "gift", "flash",
    "folder", "folderOpen", "document", "archive", "box", "attach", "save", "print",
    "briefcase", "building", "buildingMultiple", "money", "wallet", "calculator",
    "chart", "trending", "barChart", "organization",
    "calendar", "calendarLtr", "tasks", "board", "clipboardTask", "checkboxChecked",
    "checkmarkCircle", "clipboardList", "clock", "timer", "hourglass",
    "mail", "flag", "chat", "chatMultiple", "comment", "commentMultiple", "call",
    "video", "send",
    "people", "person", "personCircle", "peopleTeam", "personAdd", "share",
    "camera", "image", "imageMultiple", "music", "play",
    "notebook", "book", "bookOpen", "news", "graduationCap",
    "link", "globe", "map", "location", "compass", "history",
    "settings", "wrench", "hammer", "code", "bug", "beaker", "puzzle",
    "designIdeas", "paintBrush", "ruler", "pen",
    "shield", "lock", "key", "fingerprint", "alert", "info", "question",
    "food", "coffee", "shoppingBag", "cart", "games", "sport",
    "heartPulse", "stethoscope", "pill", "car", "airplane", "sunny", "cloud", "leaf",
)


def is_known_icon(icon_id: str) -> bool:
    """Return True if ``icon_id`` is part of the icon catalog."""
    return icon_id in AVAILABLE_ICONS


class CardRegistry:
    """
    Catalog of the cards a dashboard can show.

    The registry order is the order used to append cards missing from a
    stored ``cardOrder``.

    Attributes:
        _cards: Card definitions keyed by id, in catalog order.
    """

    def __init__(self, definitions: Iterable[CardDefinition]) -> None:
        self._cards: dict[str, CardDefinition] = {}
        for definition in definitions:
            if definition.id in self._cards:
                logger.warning(f"Duplicate card definition ignored: {definition.id}")
                continue
            self._cards[definition.id] = definition

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def card_ids(self) -> list[str]:
        """Return every known card id in catalog order."""
        return list(self._cards)

    def get(self, card_id: str) -> Optional[CardDefinition]:
        return self._cards.get(card_id)

    def default_title(self, card_id: str) -> str:
        """Return the catalog title for a card, or the id itself."""
        definition = self._cards.get(card_id)
        return definition.default_title if definition else card_id

    def default_category(self, card_id: str) -> str:
        """Return the category a card starts in on a fresh dashboard."""
        definition = self._cards.get(card_id)
        if definition and definition.default_category:
            return definition.default_category
        return AVAILABLE_CATEGORY


class CategoryRegistry:
    """
    Category definitions for one editing session.

    Unknown ids are treated as custom categories, matching how categories
    created by an earlier session are loaded from a stored snapshot.

    Attributes:
        _categories: Definitions keyed by category id.
    """

    def __init__(self, definitions: Iterable[CategoryDefinition]) -> None:
        self._categories: dict[str, CategoryDefinition] = {}
        for definition in definitions:
            self._categories[definition.id] = definition

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._categories

    def get(self, category_id: str) -> Optional[CategoryDefinition]:
        return self._categories.get(category_id)

    def register(self, definition: CategoryDefinition) -> None:
        """Add or replace a category definition.

        Args:
            definition: Definition to register.
        """
        self._categories[definition.id] = definition
        logger.debug(f"Registered category definition: {definition.id}")

    def is_system(self, category_id: str) -> bool:
        """Return True for system categories and the ``available`` sentinel."""
        definition = self._categories.get(category_id)
        return bool(definition and definition.is_system)

    def default_name(self, category_id: str) -> str:
        definition = self._categories.get(category_id)
        return definition.default_name if definition else category_id

    def default_icon(self, category_id: str) -> str:
        definition = self._categories.get(category_id)
        return definition.icon if definition else DEFAULT_ICON_ID

    def default_category_order(self) -> list[str]:
        """Return the system categories in registration order.

        ``available`` is excluded because it is never part of the
        category order.
        """
        return [
            cid
            for cid, definition in self._categories.items()
            if definition.is_system and cid != AVAILABLE_CATEGORY
        ]


_DEFAULT_CARDS = [
    ("todaysAgenda", "Today's Agenda", SystemCategory.CALENDAR),
    ("unreadInbox", "Unread Inbox", SystemCategory.EMAIL),
    ("myTasks", "My Tasks", SystemCategory.TASKS),
    ("recentFiles", "Recent Files", SystemCategory.FILES),
    ("upcomingWeek", "Upcoming Week", SystemCategory.CALENDAR),
    ("flaggedEmails", "Flagged Emails", SystemCategory.EMAIL),
    ("myTeam", "My Team", SystemCategory.PEOPLE),
    ("sharedWithMe", "Shared With Me", SystemCategory.FILES),
    ("quickLinks", "Quick Links", SystemCategory.NAVIGATION),
    ("siteActivity", "Site Activity", SystemCategory.PEOPLE),
    ("waitingOnYou", "Waiting On You", SystemCategory.EMAIL),
]

_SYSTEM_CATEGORY_META = {
    SystemCategory.CALENDAR: ("Calendar", "calendar"),
    SystemCategory.EMAIL: ("Email", "mail"),
    SystemCategory.TASKS: ("Tasks", "tasks"),
    SystemCategory.FILES: ("Files", "document"),
    SystemCategory.PEOPLE: ("People & Activity", "people"),
    SystemCategory.NAVIGATION: ("Navigation", "link"),
}


def default_card_registry() -> CardRegistry:
    """Build the registry of the cards shipped with the dashboard."""
    return CardRegistry(
        CardDefinition(id=card_id, default_title=title, default_category=category.value)
        for card_id, title, category in _DEFAULT_CARDS
    )


def default_category_registry() -> CategoryRegistry:
    """Build a fresh category registry holding the system categories.

    Each call returns a new object; sessions must not share one.
    """
    definitions = [
        CategoryDefinition(id=cat.value, default_name=name, icon=icon, is_system=True)
        for cat, (name, icon) in _SYSTEM_CATEGORY_META.items()
    ]
    definitions.append(
        CategoryDefinition(
            id=AVAILABLE_CATEGORY,
            default_name="Available Cards",
            icon=DEFAULT_ICON_ID,
            is_system=True,
        )
    )
    return CategoryRegistry(definitions)


def build_default_snapshot(
    cards: CardRegistry, categories: CategoryRegistry
) -> LayoutSnapshot:
    """
    Build the registry-driven default layout.

    Every card sits in its catalog default category (or ``available`` when
    that category is not a system category), every category is visible with
    its title shown.

    Args:
        cards: Card registry.
        categories: Category registry.

    Returns:
        LayoutSnapshot: Default layout.
    """
    category_order = categories.default_category_order() or list(DEFAULT_CATEGORY_ORDER)
    known_categories = set(category_order)

    assignment: dict[str, str] = {}
    for card_id in cards.card_ids():
        category = cards.default_category(card_id)
        assignment[card_id] = category if category in known_categories else AVAILABLE_CATEGORY

    config = {
        cid: CategoryConfig(id=cid, visible=True, show_title=True)
        for cid in [*category_order, AVAILABLE_CATEGORY]
    }

    return LayoutSnapshot(
        card_order=cards.card_ids(),
        card_visibility={card_id: True for card_id in cards.card_ids()},
        card_titles={},
        category_order=category_order,
        category_config=config,
        card_category_assignment=assignment,
        category_names={},
        category_icons={},
    )
