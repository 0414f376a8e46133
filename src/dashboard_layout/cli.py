"""Command-line interface (CLI) entrypoint.

Objective:
    Provide a human-friendly CLI around the layout editor for hosts that
    keep the dashboard configuration in a JSON file.

Responsibilities:
    - Parse arguments (command, snapshot path, verbosity, dry-run).
    - Configure logging.
    - Open a :class:`src.dashboard_layout.editors.LayoutDialog` on the stored
      layout, apply one mutation, save, and print the resulting layout.

High-level call tree:
    - :func:`main`
        - :func:`setup_logging`
        - :class:`SnapshotStore` -> :meth:`SnapshotStore.load`
        - :meth:`LayoutDialog.open`
        - :func:`apply_command`
        - :meth:`LayoutDialog.save` (unless ``--dry-run``)
        - :func:`print_layout`

Operational notes:
    - This module supports being run both as a package module
      (``python -m src.dashboard_layout.cli``) and as a script
      (``python src/dashboard_layout/cli.py``). The import fallback handles
      the script case.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

try:
    from .config import get_settings
    from .editors import LayoutDialog
    from .engine import LayoutEngine
    from .models import CategoryView
    from .registry import build_default_snapshot, default_card_registry, default_category_registry
    from .snapshot_store import SnapshotStore
except ImportError:  # pragma: no cover
    src_root = Path(__file__).resolve().parents[1]
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))

    from dashboard_layout.config import get_settings
    from dashboard_layout.editors import LayoutDialog
    from dashboard_layout.engine import LayoutEngine
    from dashboard_layout.models import CategoryView
    from dashboard_layout.registry import (
        build_default_snapshot,
        default_card_registry,
        default_category_registry,
    )
    from dashboard_layout.snapshot_store import SnapshotStore


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def print_layout(categories: list[CategoryView], verbose: bool = False) -> None:
    """
    Print a layout to the console.

    Output format:
        - One block per category in display order, ``available`` last.
        - Hidden categories and cards are marked.
        - Category and card ids are shown when ``verbose=True``.

    Args:
        categories: Rendered category views.
        verbose: If True, print ids next to names.
    """
    total_cards = sum(len(cat.cards) for cat in categories)

    print(f"\n{'='*60}")
    print(f"DASHBOARD LAYOUT: {len(categories)} categories, {total_cards} cards")
    print(f"{'='*60}")

    for category in categories:
        flags = []
        if not category.visible:
            flags.append("hidden")
        if not category.show_title:
            flags.append("no title")
        if category.is_system and not category.is_available:
            flags.append("system")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        ident = f" <{category.id}>" if verbose else ""

        print(f"\n{category.name}{ident} ({len(category.cards)} cards){suffix}")
        print("-" * 40)

        if not category.cards:
            print("  (empty)")
        for card in category.cards:
            marker = " " if card.visible else "x"
            card_ident = f" <{card.id}>" if verbose else ""
            print(f"  [{marker}] {card.title}{card_ident}")

    print(f"\n{'='*60}\n")


def apply_command(engine: LayoutEngine, parsed_args: argparse.Namespace) -> bool:
    """
    Apply the parsed CLI command to an editing session.

    Args:
        engine: Open editing session.
        parsed_args: Parsed arguments.

    Returns:
        bool: True if the layout changed.
    """
    command = parsed_args.command

    if command == "show":
        return False
    if command == "move-card":
        return engine.move_card(parsed_args.card_id, parsed_args.category_id, parsed_args.index)
    if command == "add-category":
        category_id = engine.create_category(parsed_args.name)
        for card_id in parsed_args.cards:
            engine.move_card(card_id, category_id)
        print(f"Created category {category_id}")
        return True
    if command == "rename-category":
        return engine.rename_category(parsed_args.category_id, parsed_args.name)
    if command == "set-icon":
        return engine.set_category_icon(parsed_args.category_id, parsed_args.icon_id)
    if command == "delete-category":
        return engine.delete_category(parsed_args.category_id)
    if command == "move-category":
        return engine.move_category_to(parsed_args.category_id, parsed_args.position)
    if command == "toggle-category":
        return engine.toggle_category_visibility(parsed_args.category_id)
    if command == "toggle-title":
        return engine.toggle_category_title(parsed_args.category_id)
    if command == "toggle-card":
        return engine.toggle_card_visibility(parsed_args.card_id)
    if command == "reset":
        engine.reload(build_default_snapshot(engine.cards, default_category_registry()))
        return True

    raise ValueError(f"Unknown command: {command}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per editor operation."""
    parser = argparse.ArgumentParser(
        description="Dashboard Layout Editor - organize dashboard cards into categories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s show                          Print the stored layout
  %(prog)s move-card myTasks email -i 0  Move a card to the top of Email
  %(prog)s add-category --name Projects  Create a custom category
  %(prog)s delete-category custom-1      Delete a custom category
        """,
    )

    parser.add_argument(
        "--snapshot",
        "-s",
        type=str,
        default=None,
        help="Layout JSON file (overrides SNAPSHOT_PATH)",
    )
    parser.add_argument(
        "--dry-run",
        "-d",
        action="store_true",
        help="Apply the change and print the result without saving",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides LOG_LEVEL)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("show", help="Print the layout")

    move_card = sub.add_parser("move-card", help="Move a card into a category")
    move_card.add_argument("card_id")
    move_card.add_argument("category_id")
    move_card.add_argument(
        "--index", "-i", type=int, default=None, help="Position in the category (default: end)"
    )

    add_category = sub.add_parser("add-category", help="Create a custom category")
    add_category.add_argument("--name", "-n", type=str, default=None)
    add_category.add_argument(
        "--cards",
        "-c",
        nargs="*",
        default=[],
        help="Cards to move into the new category",
    )

    rename = sub.add_parser("rename-category", help="Rename a category")
    rename.add_argument("category_id")
    rename.add_argument("name")

    set_icon = sub.add_parser("set-icon", help="Change a category icon")
    set_icon.add_argument("category_id")
    set_icon.add_argument("icon_id")

    delete = sub.add_parser("delete-category", help="Delete a custom category")
    delete.add_argument("category_id")

    move_category = sub.add_parser("move-category", help="Move a category to a position")
    move_category.add_argument("category_id")
    move_category.add_argument("position", type=int)

    toggle = sub.add_parser("toggle-category", help="Show/hide a category")
    toggle.add_argument("category_id")

    toggle_title = sub.add_parser("toggle-title", help="Show/hide a category title")
    toggle_title.add_argument("category_id")

    toggle_card = sub.add_parser("toggle-card", help="Show/hide a card")
    toggle_card.add_argument("card_id")

    sub.add_parser("reset", help="Replace the layout with the default layout")

    return parser


def main(args: Optional[list[str]] = None) -> int:
    """
    Main CLI entry point.

    Pass an explicit ``args`` list instead of relying on ``sys.argv`` to
    call this from tests.

    Args:
        args: Command line arguments (uses sys.argv if None).

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    parsed_args = build_parser().parse_args(args)
    settings = get_settings()

    log_level = "DEBUG" if parsed_args.verbose else (parsed_args.log_level or settings.log_level)
    setup_logging(log_level)

    logger = logging.getLogger(__name__)

    try:
        store = SnapshotStore(parsed_args.snapshot or settings.snapshot_path)
        cards = default_card_registry()
        snapshot = store.load() or build_default_snapshot(cards, default_category_registry())

        dialog = LayoutDialog(cards, on_save=store.save, settings=settings)
        engine = dialog.open(snapshot)

        changed = apply_command(engine, parsed_args)
        categories = engine.render()

        if parsed_args.command != "show" and not changed:
            print(f"\nNo change: {parsed_args.command} had no effect\n")

        if parsed_args.dry_run:
            print("DRY RUN MODE - layout not saved\n")
            dialog.cancel()
        elif changed:
            dialog.save()
        else:
            dialog.cancel()

        print_layout(categories, verbose=parsed_args.verbose)
        return 0

    except Exception as e:
        logger.exception("Fatal error")
        print(f"\nError: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
