"""Entity store mutation tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from marktree.store import Bookmark, EntityStore, Folder


def _store() -> EntityStore:
    """Return a store with one folder chain and two bookmarks.

    Returns:
        EntityStore: Store seeded for mutation tests.
    """
    return EntityStore(
        folders=[
            Folder(id="f1", name="Work"),
            Folder(id="f2", name="Projects", parent_id="f1"),
        ],
        bookmarks=[
            Bookmark(id="b1", title="Docs", url="https://docs.example", folder_id="f1"),
            Bookmark(id="b2", title="Repo", url="https://git.example", tags=("code",)),
        ],
    )


def test_create_folder_trims_and_appends() -> None:
    store = _store()

    created = store.create_folder("  Reading  ", "f1")

    assert created is not None
    assert created.name == "Reading"
    assert created.parent_id == "f1"
    assert created.id.startswith("folder-")
    assert store.folders[-1] == created


def test_create_folder_ignores_blank_names() -> None:
    store = _store()
    before = store.folders

    assert store.create_folder("   ", None) is None
    assert store.folders == before
    assert store.revision == 0


def test_created_folder_ids_are_unique() -> None:
    store = EntityStore()

    ids = {store.create_folder(f"Folder {index}").id for index in range(25)}

    assert len(ids) == 25


def test_rename_folder() -> None:
    store = _store()

    assert store.rename_folder("f2", " Side projects ") is True
    assert store.get_folder("f2").name == "Side projects"
    assert store.rename_folder("missing", "Name") is False
    assert store.rename_folder("f2", "  ") is False
    assert store.get_folder("f2").name == "Side projects"


def test_move_folder_refuses_cycles() -> None:
    store = _store()

    assert store.move_folder("f1", "f2") is False
    assert store.move_folder("f1", "f1") is False
    assert store.move_folder("f2", "unknown") is False
    assert store.get_folder("f1").parent_id is None

    assert store.move_folder("f2", None) is True
    assert store.get_folder("f2").parent_id is None


@pytest.mark.parametrize(
    ("scope", "expected"),
    [("all", None), ("favorites", None), (None, None), ("f2", "f2")],
)
def test_add_bookmark_maps_folder_scope(scope: str | None, expected: str | None) -> None:
    store = _store()

    created = store.add_bookmark(folder_scope=scope)

    assert created.folder_id == expected


def test_add_bookmark_uses_placeholders() -> None:
    store = _store()

    created = store.add_bookmark()

    assert created.title == "New Bookmark"
    assert created.url == "https://example.com"
    assert created.description == "Add a description"
    assert created.thumbnail == ""
    assert created.tags == ()
    assert created.favorite is False
    assert created.date_added.endswith("Z")
    assert store.bookmarks[-1] == created


def test_add_bookmark_applies_defaults_but_not_id() -> None:
    store = _store()

    created = store.add_bookmark({"id": "b1", "title": "Custom", "tags": ["a", "b", "a"]}, "f1")

    assert created.id != "b1"
    assert created.title == "Custom"
    assert created.tags == ("a", "b")


def test_update_bookmark_with_mapping_preserves_id() -> None:
    store = _store()

    assert store.update_bookmark("b1", {"title": "Manual", "id": "other"}) is True

    updated = store.get_bookmark("b1")
    assert updated is not None
    assert updated.title == "Manual"
    assert updated.url == "https://docs.example"
    assert store.get_bookmark("other") is None


def test_update_bookmark_with_full_model() -> None:
    store = _store()
    replacement = Bookmark(id="elsewhere", title="Replaced", url="https://new.example")

    assert store.update_bookmark("b2", replacement) is True

    updated = store.get_bookmark("b2")
    assert updated is not None
    assert updated.title == "Replaced"
    assert updated.tags == ()


def test_update_bookmark_unknown_is_noop() -> None:
    store = _store()

    assert store.update_bookmark("missing", {"title": "x"}) is False
    assert store.revision == 0


def test_update_bookmark_rejects_invalid_values() -> None:
    store = _store()

    with pytest.raises(ValidationError):
        store.update_bookmark("b1", {"favorite": "not-a-bool"})


def test_update_bookmark_rejects_unknown_fields() -> None:
    store = _store()

    with pytest.raises(ValidationError):
        store.update_bookmark("b1", {"titel": "New"})

    assert store.get_bookmark("b1").title == "Docs"
    assert store.revision == 0


def test_add_bookmark_rejects_unknown_defaults() -> None:
    store = _store()

    with pytest.raises(ValidationError):
        store.add_bookmark({"titel": "New"})

    assert len(store.bookmarks) == 2
    assert store.revision == 0


def test_delete_and_toggle_favorite() -> None:
    store = _store()

    assert store.toggle_favorite("b1") is True
    assert store.get_bookmark("b1").favorite is True
    assert store.toggle_favorite("b1") is True
    assert store.get_bookmark("b1").favorite is False
    assert store.toggle_favorite("missing") is False

    assert store.delete_bookmark("b1") is True
    assert store.get_bookmark("b1") is None
    assert store.delete_bookmark("b1") is False


def test_add_and_remove_tags() -> None:
    store = _store()

    assert store.add_tag("b2", " python ") is True
    assert store.get_bookmark("b2").tags == ("code", "python")
    assert store.add_tag("b2", "code") is False
    assert store.add_tag("b2", "  ") is False
    assert store.remove_tag("b2", "code") is True
    assert store.get_bookmark("b2").tags == ("python",)
    assert store.remove_tag("b2", "code") is False


def test_tree_is_memoized_until_mutation() -> None:
    store = _store()

    first = store.tree()
    assert store.tree() is first

    created = store.create_folder("Later", "f2")

    refreshed = store.tree()
    assert refreshed is not first
    assert refreshed.descendant_ids("f1") == ["f2", created.id]


def test_collections_are_read_only_views() -> None:
    store = _store()

    assert isinstance(store.folders, tuple)
    assert isinstance(store.bookmarks, tuple)
    with pytest.raises(ValidationError):
        store.folders[0].name = "Changed"
