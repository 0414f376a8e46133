"""Dashboard Layout package.

Objective:
    Provide the card and category ordering engine behind a dashboard
    configuration editor:
    - Keep a flat card order plus a card -> category assignment consistent
      under drag-and-drop moves between and within categories.
    - Create, rename, re-icon, reorder, hide and delete categories.
    - Auto-hide and prune empty custom categories the user never touched.

Key modules:
    - :mod:`src.dashboard_layout.ordering`:
        Pure functions translating local (category, index) moves into the
        flat order, plus normalization and invariant checks.
    - :mod:`src.dashboard_layout.drag`:
        Drag session state machine.
    - :mod:`src.dashboard_layout.engine`:
        One editing session: mutations, auto-hide, rendering, save snapshot.
    - :mod:`src.dashboard_layout.editors`:
        Batched dialog and live (immediate-apply) editor surfaces.
    - :mod:`src.dashboard_layout.registry`:
        Card catalog, system categories and the icon catalog.
    - :mod:`src.dashboard_layout.snapshot_store` /
      :mod:`src.dashboard_layout.sessions`:
        JSON persistence and web editing sessions.
    - :mod:`src.dashboard_layout.cli` / :mod:`src.dashboard_layout.webapp`:
        User-facing entrypoints.
"""

__version__ = "0.1.0"
