"""Application configuration and settings.

Objective:
    Provide a single source of truth for the constants and runtime
    configuration used by the layout editor (category identifiers, id and
    name generation for custom categories, where the host stores snapshots).

Responsibilities:
    - Define the canonical set of system categories (:class:`SystemCategory`).
    - Define the ``available`` sentinel category.
    - Load environment-driven settings via :class:`Settings` (Pydantic
      BaseSettings).

High-level call tree:
    - :func:`get_settings` -> returns :class:`Settings`
    - :class:`Settings`
        - :meth:`Settings.new_category_name`
        - :meth:`Settings.custom_category_id`

Operational notes:
    - ``Settings`` loads from ``.env`` by default via ``pydantic-settings``.
    - Every field has a default, so the editor works without any env vars.
    - Most modules accept a ``Settings`` object explicitly to enable testing;
      the engine falls back to :func:`get_settings` when not provided.
"""

from enum import Enum
import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Sentinel category holding every card not placed anywhere else
AVAILABLE_CATEGORY = "available"

# Icon used for custom categories and unknown icon ids
DEFAULT_ICON_ID = "grid"


class SystemCategory(str, Enum):
    """Fixed set of categories shipped with the dashboard.

    System categories can be hidden and renamed but never deleted. The enum
    order is the default category order of a fresh dashboard.
    """

    CALENDAR = "calendar"
    EMAIL = "email"
    TASKS = "tasks"
    FILES = "files"
    PEOPLE = "people"
    NAVIGATION = "navigation"


DEFAULT_CATEGORY_ORDER: list[str] = [cat.value for cat in SystemCategory]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        snapshot_path: JSON file used by the CLI and web app as the
            configuration store.
        custom_category_prefix: Prefix of generated custom category ids.
        new_category_name_template: Display name given to new categories;
            ``{n}`` is replaced with the category counter.
        default_category_icon: Icon id assigned to new categories.
        log_level: Logging level.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    snapshot_path: str = Field(
        default="dashboard_layout.json",
        description="Path of the JSON file holding the persisted layout snapshot",
    )
    custom_category_prefix: str = Field(
        default="custom-", description="Prefix for generated custom category ids"
    )
    new_category_name_template: str = Field(
        default="New Category {n}",
        description="Default display name for new categories ({n} = counter)",
    )
    default_category_icon: str = Field(
        default=DEFAULT_ICON_ID, description="Icon id assigned to new categories"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    def custom_category_id(self, counter: int) -> str:
        """Build the id of the ``counter``-th custom category.

        Args:
            counter: Per-session category counter (1-based).

        Returns:
            str: Category id such as ``custom-1``.
        """
        return f"{self.custom_category_prefix}{counter}"

    def new_category_name(self, counter: int) -> str:
        """Build the default display name of a new category.

        Args:
            counter: Per-session category counter (1-based).

        Returns:
            str: Display name such as ``New Category 1``.
        """
        return self.new_category_name_template.replace("{n}", str(counter))


def get_settings() -> Settings:
    """
    Load and return application settings.

    For tests, construct a :class:`Settings` instance directly instead.

    Returns:
        Settings: Application settings instance.

    Raises:
        ValidationError: If an environment variable has an invalid value.
    """
    return Settings()
