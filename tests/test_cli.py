import json
import runpy
from pathlib import Path

from src.dashboard_layout import cli
from src.dashboard_layout.models import CardView, CategoryView


def test_cli_can_be_loaded_via_runpy_without_package_context() -> None:
    """Load cli.py as a script module without executing main.

    The relative imports fail in that case and the absolute imports are used
    after the src root is added to sys.path.
    """

    project_root = Path(__file__).resolve().parents[1]
    cli_path = project_root / "src" / "dashboard_layout" / "cli.py"

    runpy.run_path(str(cli_path), run_name="_cli_test_")


def test_print_layout_marks_hidden_items(capsys) -> None:
    """Ensure CLI output shows categories, cards and their flags."""

    categories = [
        CategoryView(
            id="custom-1",
            name="Projects",
            icon="briefcase",
            visible=False,
            cards=[
                CardView(id="myTasks", title="My Tasks"),
                CardView(id="myTeam", title="My Team", visible=False),
            ],
        ),
        CategoryView(id="available", name="Available Cards", icon="grid", is_system=True, is_available=True),
    ]

    cli.print_layout(categories, verbose=True)

    captured = capsys.readouterr().out
    assert "2 categories, 2 cards" in captured
    assert "Projects <custom-1> (2 cards) [hidden]" in captured
    assert "[ ] My Tasks <myTasks>" in captured
    assert "[x] My Team <myTeam>" in captured
    assert "(empty)" in captured


def test_show_without_stored_layout_does_not_write(tmp_path, capsys) -> None:
    """Showing the default layout never creates the snapshot file."""

    path = tmp_path / "layout.json"

    exit_code = cli.main(["--snapshot", str(path), "show"])

    assert exit_code == 0
    assert not path.exists()
    assert "Calendar (2 cards)" in capsys.readouterr().out


def test_move_card_saves_snapshot(tmp_path) -> None:
    """A successful mutation is persisted."""

    path = tmp_path / "layout.json"

    exit_code = cli.main(["--snapshot", str(path), "move-card", "myTasks", "email", "--index", "0"])

    assert exit_code == 0
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["cardCategoryAssignment"]["myTasks"] == "email"
    assert payload["cardOrder"].index("myTasks") < payload["cardOrder"].index("unreadInbox")


def test_add_category_with_cards(tmp_path) -> None:
    """A new category filled with cards survives later sessions."""

    path = tmp_path / "layout.json"

    assert cli.main(["-s", str(path), "add-category", "-n", "Projects", "-c", "myTasks", "recentFiles"]) == 0
    assert cli.main(["-s", str(path), "rename-category", "custom-1", "Work"]) == 0

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["categoryOrder"][0] == "custom-1"
    assert payload["categoryNames"]["custom-1"] == "Work"
    assert payload["cardCategoryAssignment"]["recentFiles"] == "custom-1"


def test_dry_run_does_not_save(tmp_path, capsys) -> None:
    """Dry runs print the result but leave the store untouched."""

    path = tmp_path / "layout.json"

    exit_code = cli.main(["-s", str(path), "--dry-run", "toggle-category", "email"])

    assert exit_code == 0
    assert not path.exists()
    assert "DRY RUN MODE" in capsys.readouterr().out


def test_noop_command_reports_no_change(tmp_path, capsys) -> None:
    """System categories cannot be deleted from the CLI either."""

    path = tmp_path / "layout.json"

    exit_code = cli.main(["-s", str(path), "delete-category", "email"])

    assert exit_code == 0
    assert not path.exists()
    assert "No change: delete-category had no effect" in capsys.readouterr().out


def test_corrupt_snapshot_returns_error(tmp_path) -> None:
    """Store errors are reported with exit code 1."""

    path = tmp_path / "layout.json"
    path.write_text("{broken", encoding="utf-8")

    assert cli.main(["-s", str(path), "show"]) == 1
