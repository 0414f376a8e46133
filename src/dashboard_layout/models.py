"""Pydantic data models used across the application.

Objective:
    Centralize all strongly-typed data structures representing:
    - The persisted dashboard layout (:class:`LayoutSnapshot`)
    - Per-category display flags (:class:`CategoryConfig`)
    - Card and category definitions held by the registries
    - Render-ready views produced by the editing engine

Design notes:
    - Persisted models use camelCase aliases matching the web part property
      names (e.g. ``cardOrder`` -> :attr:`LayoutSnapshot.card_order`).
    - ``model_config = ConfigDict(populate_by_name=True)`` is used to allow
      constructing models with either alias names or pythonic field names.
    - Snapshots are serialized with ``by_alias=True`` so the stored payload
      keeps the host's property names.

High-level structure:
    - Persisted primitives:
        - :class:`CategoryConfig`
        - :class:`LayoutSnapshot`
    - Registry primitives:
        - :class:`CardDefinition`
        - :class:`CategoryDefinition`
    - View primitives:
        - :class:`CardView`
        - :class:`CategoryView`
    - Web request bodies:
        - :class:`DropZoneRequest`, :class:`DragStartRequest`
        - :class:`CardMoveRequest`
        - :class:`CategoryCreateRequest`, :class:`CategoryUpdateRequest`,
          :class:`CategoryMoveRequest`

Call tree usage:
    - :class:`src.dashboard_layout.engine.LayoutEngine`:
        - loads and emits :class:`LayoutSnapshot`
        - renders :class:`CategoryView`
    - :class:`src.dashboard_layout.registry.CardRegistry` /
      :class:`src.dashboard_layout.registry.CategoryRegistry`:
        - hold :class:`CardDefinition` / :class:`CategoryDefinition`
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryConfig(BaseModel):
    """Display flags of one category.

    Attributes:
        id: Category id (kept for compatibility with the stored payload).
        visible: Whether the category is rendered on the dashboard.
        show_title: Whether the category header is rendered.
    """

    id: str = ""
    visible: bool = True
    show_title: bool = Field(default=True, alias="showTitle")

    model_config = ConfigDict(populate_by_name=True)


class LayoutSnapshot(BaseModel):
    """
    Complete dashboard layout configuration.

    This is the unit of persistence: loaded when an editor opens and handed
    back to the host on save.

    Attributes:
        card_order: Flat order of every card id (source of intra-category order).
        card_visibility: Card id -> visible flag (missing means visible).
        card_titles: Card id -> custom title.
        category_order: Ordered category ids, never containing ``available``.
        category_config: Category id -> display flags.
        card_category_assignment: Card id -> category id.
        category_names: Category id -> custom display name.
        category_icons: Category id -> icon id.
    """

    card_order: list[str] = Field(default_factory=list, alias="cardOrder")
    card_visibility: dict[str, bool] = Field(default_factory=dict, alias="cardVisibility")
    card_titles: dict[str, str] = Field(default_factory=dict, alias="cardTitles")
    category_order: list[str] = Field(default_factory=list, alias="categoryOrder")
    category_config: dict[str, CategoryConfig] = Field(
        default_factory=dict, alias="categoryConfig"
    )
    card_category_assignment: dict[str, str] = Field(
        default_factory=dict, alias="cardCategoryAssignment"
    )
    category_names: dict[str, str] = Field(default_factory=dict, alias="categoryNames")
    category_icons: dict[str, str] = Field(default_factory=dict, alias="categoryIcons")

    model_config = ConfigDict(populate_by_name=True)


class CardDefinition(BaseModel):
    """A card known to the dashboard's card registry.

    Attributes:
        id: Stable card id.
        default_title: Title shown when no custom title is set.
        default_category: Category the card lands in on a fresh dashboard.
    """

    id: str
    default_title: str = Field(alias="defaultTitle")
    default_category: Optional[str] = Field(default=None, alias="defaultCategory")

    model_config = ConfigDict(populate_by_name=True)


class CategoryDefinition(BaseModel):
    """A category known to a session's category registry.

    Attributes:
        id: Category id.
        default_name: Name shown when no custom name is set.
        icon: Default icon id.
        is_system: System categories cannot be deleted.
    """

    id: str
    default_name: str = Field(alias="defaultName")
    icon: str = "grid"
    is_system: bool = Field(default=False, alias="isSystem")

    model_config = ConfigDict(populate_by_name=True)


class CardView(BaseModel):
    """A card as rendered inside a category."""

    id: str
    title: str
    visible: bool = True


class CategoryView(BaseModel):
    """
    A category as rendered by an editor surface.

    Attributes:
        id: Category id.
        name: Resolved display name.
        icon: Resolved icon id.
        is_system: Whether the category is a system category.
        is_available: Whether this is the ``available`` sentinel.
        visible: Category visible flag.
        show_title: Category header flag.
        collapsed: Session-only collapsed state.
        cards: Cards in this category, in OrderStore order.
    """

    id: str
    name: str
    icon: str
    is_system: bool = False
    is_available: bool = False
    visible: bool = True
    show_title: bool = True
    collapsed: bool = False
    cards: list[CardView] = Field(default_factory=list)


class DropZoneRequest(BaseModel):
    """Drop zone sent by the web front end.

    Attributes:
        category_id: Category owning the zone.
        zone: ``"slot"`` (between cards) or ``"header"``.
        index: Local index for slots; ``None`` appends.
    """

    category_id: str = Field(min_length=1)
    zone: Literal["slot", "header"] = "slot"
    index: Optional[int] = None


class DragStartRequest(BaseModel):
    kind: Literal["card", "category"]
    id: str


class CardMoveRequest(BaseModel):
    """Move a card to a slot, or shift it by ``offset`` within its category."""

    category_id: Optional[str] = None
    zone: Literal["slot", "header"] = "slot"
    index: Optional[int] = None
    offset: Optional[int] = None


class CategoryCreateRequest(BaseModel):
    name: Optional[str] = None


class CategoryUpdateRequest(BaseModel):
    """Partial category update; omitted fields are left unchanged."""

    name: Optional[str] = None
    icon: Optional[str] = None
    visible: Optional[bool] = None
    show_title: Optional[bool] = Field(default=None, alias="showTitle")

    model_config = ConfigDict(populate_by_name=True)


class CategoryMoveRequest(BaseModel):
    target_category_id: Optional[str] = None
    position: Optional[int] = None
