"""CLI integration tests for the `marktree` command group."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from click.testing import CliRunner, Result

from marktree.cli import cli

API_KEY = "test-api-key"


def _invoke(tmp_path: Path, *args: str, api_key: str | None = None) -> Result:
    """Run the CLI against a config file and store inside ``tmp_path``.

    Args:
        tmp_path: Temporary directory provided by pytest.
        *args: Command arguments following the global options.
        api_key: Optional API key passed with ``--api-key``.

    Returns:
        Result: Click runner result.
    """
    base = [
        "--config",
        str(tmp_path / "config.yaml"),
        "--store",
        str(tmp_path / "bookmarks.json"),
    ]
    if api_key is not None:
        base.extend(["--api-key", api_key])
    runner = CliRunner()
    return runner.invoke(
        cli,
        [*base, *args],
        env={"MARKTREE_API_KEY": None, "HOME": str(tmp_path / "home")},
    )


def _json(result: Result) -> Any:
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


def test_cli_help_displays_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Marktree organizes bookmarks" in result.output
    for command in ("list", "folders", "tags", "folder", "bookmark", "config"):
        assert command in result.output


def test_list_json_on_seeded_store(tmp_path: Path) -> None:
    payload = _json(_invoke(tmp_path, "list", "--json"))

    assert payload["title"] == "All Bookmarks"
    assert payload["scope"] == {"kind": "all"}
    assert payload["counts"] == {"total": 6, "matches": 6}


def test_list_folder_flatten_toggle(tmp_path: Path) -> None:
    flat = _json(_invoke(tmp_path, "list", "--folder", "folder-1", "--json"))
    nested = _json(_invoke(tmp_path, "list", "--folder", "folder-1", "--no-flatten", "--json"))

    assert flat["title"] == "Development"
    assert {entry["id"] for entry in flat["results"]} == {
        "bookmark-1",
        "bookmark-2",
        "bookmark-3",
        "bookmark-4",
    }
    assert flat["subfolders"] == []
    assert nested["counts"]["matches"] == 0
    assert [entry["id"] for entry in nested["subfolders"]] == ["folder-2", "folder-3"]


def test_list_tag_and_search(tmp_path: Path) -> None:
    tagged = _json(_invoke(tmp_path, "list", "--tag", "web", "--json"))
    searched = _json(_invoke(tmp_path, "list", "--search", "PYTHON", "--json"))

    assert [entry["id"] for entry in tagged["results"]] == ["bookmark-2", "bookmark-3"]
    assert [entry["id"] for entry in searched["results"]] == ["bookmark-1", "bookmark-4"]


def test_list_rejects_tag_with_folder(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "list", "--tag", "web", "--folder", "folder-1")

    assert result.exit_code != 0
    assert "--tag cannot be combined" in result.output


def test_mutation_requires_authentication(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "folder", "create", "Archive")

    assert result.exit_code == 1
    assert "Authentication required" in result.output
    assert not (tmp_path / "bookmarks.json").exists()


def test_short_api_key_is_not_enough(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "bookmark", "favorite", "bookmark-6", api_key="short")

    assert result.exit_code == 1
    assert "Authentication required" in result.output


def test_folder_create_persists(tmp_path: Path) -> None:
    created = _invoke(
        tmp_path, "folder", "create", "  Archive ", "--parent", "folder-5", api_key=API_KEY
    )
    assert created.exit_code == 0, created.output

    folders = _json(_invoke(tmp_path, "folders", "--json"))
    archive = next(entry for entry in folders if entry["name"] == "Archive")
    assert archive["path"] == "Reading > Archive"
    assert archive["depth"] == 1
    assert archive["count"] == 0


def test_folder_create_blank_name_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "folder", "create", "   ", api_key=API_KEY)

    assert result.exit_code == 1
    assert "must not be blank" in result.output


def test_folder_move_refuses_cycle(tmp_path: Path) -> None:
    result = _invoke(
        tmp_path, "folder", "move", "folder-1", "--parent", "folder-2", api_key=API_KEY
    )

    assert result.exit_code == 1
    assert "cycle" in result.output


def test_folder_rename(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "folder", "rename", "folder-2", "Web", api_key=API_KEY)
    assert result.exit_code == 0, result.output

    payload = _json(_invoke(tmp_path, "list", "--folder", "folder-2", "--json"))
    assert payload["title"] == "Development > Web"


def test_bookmark_lifecycle(tmp_path: Path) -> None:
    added = _invoke(
        tmp_path,
        "bookmark",
        "add",
        "--folder",
        "folder-4",
        "--title",
        "Figma",
        "--url",
        "https://figma.com",
        "--tag",
        "tools",
        "--tag",
        "tools",
        api_key=API_KEY,
    )
    assert added.exit_code == 0, added.output

    listing = _json(_invoke(tmp_path, "list", "--folder", "folder-4", "--json"))
    created = next(entry for entry in listing["results"] if entry["title"] == "Figma")
    assert created["tags"] == ["tools"]
    assert created["folder_id"] == "folder-4"

    bookmark_id = created["id"]
    assert _invoke(tmp_path, "bookmark", "favorite", bookmark_id, api_key=API_KEY).exit_code == 0
    tagged = _invoke(tmp_path, "bookmark", "tag", bookmark_id, "design", api_key=API_KEY)
    assert tagged.exit_code == 0, tagged.output
    favorites = _json(_invoke(tmp_path, "list", "--favorites", "--json"))
    assert bookmark_id in {entry["id"] for entry in favorites["results"]}

    moved = _invoke(tmp_path, "bookmark", "update", bookmark_id, "--unfiled", api_key=API_KEY)
    assert moved.exit_code == 0, moved.output
    after_move = _json(_invoke(tmp_path, "list", "--folder", "folder-4", "--json"))
    assert bookmark_id not in {entry["id"] for entry in after_move["results"]}

    deleted = _invoke(tmp_path, "bookmark", "delete", bookmark_id, api_key=API_KEY)
    assert deleted.exit_code == 0, deleted.output
    missing = _invoke(tmp_path, "bookmark", "delete", bookmark_id, api_key=API_KEY)
    assert missing.exit_code == 1
    assert "Unknown bookmark" in missing.output


def test_tags_json(tmp_path: Path) -> None:
    counts = _json(_invoke(tmp_path, "tags", "--json"))

    assert counts["python"] == 2
    assert counts["web"] == 2
    assert list(counts)[0] == "python"


def test_config_set_changes_flatten_default(tmp_path: Path) -> None:
    updated = _invoke(tmp_path, "config", "set", "view.flatten_subfolders", "--value", "false")
    assert updated.exit_code == 0, updated.output

    payload = _json(_invoke(tmp_path, "list", "--folder", "folder-1", "--json"))
    assert payload["counts"]["matches"] == 0


def test_config_set_invalid_value_fails(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "config", "set", "view.view_mode", "--value", "carousel")

    assert result.exit_code == 1
    assert "Invalid configuration values" in result.output


def test_folders_flat_lists_indented_options(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "folders", "--flat")

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "folder-1  Development (4)",
        "folder-2    Frontend (2)",
        "folder-3    Backend (2)",
        "folder-4  Design (1)",
        "folder-5  Reading (0)",
    ]


def test_quiet_default_from_config_silences_output(tmp_path: Path) -> None:
    (tmp_path / "config.yaml").write_text("cli:\n  quiet_default: true\n", encoding="utf-8")

    result = _invoke(tmp_path, "folder", "create", "Work", api_key=API_KEY)

    assert result.exit_code == 0, result.output
    assert result.output == ""
    assert (tmp_path / "bookmarks.json").exists()


def test_quiet_flag_still_applies_without_config(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "--quiet", "folder", "create", "Work", api_key=API_KEY)

    assert result.exit_code == 0, result.output
    assert result.output == ""


def test_config_view_masks_api_key(tmp_path: Path) -> None:
    secret = "super-secret-key"
    updated = _invoke(tmp_path, "config", "set", "auth.api_key", "--value", secret)
    assert updated.exit_code == 0, updated.output

    shown = _invoke(tmp_path, "config", "view")
    assert shown.exit_code == 0, shown.output
    assert secret not in shown.output
    assert "********" in shown.output
    assert secret in (tmp_path / "config.yaml").read_text(encoding="utf-8")


def test_config_view_shell_format(tmp_path: Path) -> None:
    _invoke(tmp_path, "config", "set", "auth.api_key", "--value", "super-secret-key")

    result = _invoke(tmp_path, "config", "view", "--shell")

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert "MARKTREE__VIEW__FLATTEN_SUBFOLDERS=true" in lines
    assert "MARKTREE__AUTH__API_KEY=********" in lines
    assert "super-secret-key" not in result.output
