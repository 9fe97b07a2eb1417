"""Mutation gate tests."""

from __future__ import annotations

from marktree.auth import MutationGate, guarded, is_valid_api_key
from marktree.store import Bookmark, EntityStore, Folder


def _store() -> EntityStore:
    return EntityStore(
        folders=[Folder(id="f1", name="Work")],
        bookmarks=[Bookmark(id="b1", title="Docs", folder_id="f1")],
    )


def test_guarded_rejects_without_running_operation() -> None:
    calls: list[str] = []

    result = guarded(lambda: calls.append("ran"), is_authenticated=False)

    assert result.rejected
    assert result.value is None
    assert calls == []


def test_guarded_returns_operation_value() -> None:
    result = guarded(lambda: 42, is_authenticated=True)

    assert result.allowed
    assert result.value == 42


def test_unauthenticated_create_folder_leaves_store_unchanged() -> None:
    store = _store()
    gate = MutationGate(store, is_authenticated=False)

    result = gate.create_folder("X", None)

    assert result.rejected
    assert store.folders == (Folder(id="f1", name="Work"),)
    assert store.revision == 0


def test_blank_folder_name_is_ignored_even_when_authenticated() -> None:
    store = _store()
    gate = MutationGate(store, is_authenticated=True)

    result = gate.create_folder("   ", None)

    assert result.allowed
    assert result.value is None
    assert len(store.folders) == 1


def test_every_mutation_is_gated() -> None:
    """No mutation may touch the store while unauthenticated."""
    store = _store()
    before = store.bookmarks
    gate = MutationGate(store, is_authenticated=False)

    results = [
        gate.create_folder("New"),
        gate.rename_folder("f1", "Renamed"),
        gate.move_folder("f1", None),
        gate.add_bookmark(),
        gate.update_bookmark("b1", {"title": "Changed"}),
        gate.toggle_favorite("b1"),
        gate.add_tag("b1", "tag"),
        gate.remove_tag("b1", "tag"),
        gate.delete_bookmark("b1"),
    ]

    assert all(result.rejected for result in results)
    assert store.revision == 0
    assert store.bookmarks == before


def test_callable_auth_source_is_consulted_per_call() -> None:
    store = _store()
    state = {"authenticated": False}
    gate = MutationGate(store, is_authenticated=lambda: state["authenticated"])

    assert gate.toggle_favorite("b1").rejected

    state["authenticated"] = True
    result = gate.toggle_favorite("b1")

    assert result.allowed
    assert result.value is True
    assert store.get_bookmark("b1").favorite is True


def test_is_valid_api_key() -> None:
    assert not is_valid_api_key(None)
    assert not is_valid_api_key("")
    assert not is_valid_api_key("short")
    assert not is_valid_api_key("  1234567  ")
    assert is_valid_api_key("12345678")
    assert is_valid_api_key("abcd", min_length=4)
