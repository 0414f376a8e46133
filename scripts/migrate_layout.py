"""Utility script to normalize a stored dashboard layout.

Older layout files can contain cards that no longer exist, miss newly added
cards, or carry empty custom categories nobody uses. Loading the file into
an editing session and saving it again rewrites it in the current shape.
If no layout file exists yet, the default layout is written.

Usage:
    python scripts/migrate_layout.py [path/to/dashboard_layout.json]
"""

import logging
import sys

from dashboard_layout.config import get_settings
from dashboard_layout.editors import LayoutDialog
from dashboard_layout.registry import (
    build_default_snapshot,
    default_card_registry,
    default_category_registry,
)
from dashboard_layout.snapshot_store import SnapshotStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Load, normalize and re-save the stored layout."""
    settings = get_settings()
    path = sys.argv[1] if len(sys.argv) > 1 else settings.snapshot_path
    store = SnapshotStore(path)
    cards = default_card_registry()

    snapshot = store.load()
    if snapshot is None:
        logger.info(f"No layout at {path}; writing the default layout")
        store.save(build_default_snapshot(cards, default_category_registry()))
        return

    dialog = LayoutDialog(cards, on_save=store.save, settings=settings)
    engine = dialog.open(snapshot)

    dropped_cards = [cid for cid in snapshot.card_order if cid not in cards]
    added_cards = [cid for cid in engine.card_order if cid not in snapshot.card_order]
    pruned = engine.hidden_candidates()

    saved = dialog.save()

    logger.info("=" * 60)
    logger.info("Migration complete!")
    logger.info(f"Unknown cards removed: {dropped_cards}")
    logger.info(f"New cards added to available: {added_cards}")
    logger.info(f"Empty categories pruned: {pruned}")
    logger.info(f"Categories saved: {len(saved.category_order)}")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
