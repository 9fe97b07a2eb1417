"""Session facade binding a store, its mutation gate and the current selection."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from marktree.auth import AuthSource, GateResult, MutationGate, is_valid_api_key
from marktree.config.models import MarktreeConfig, ViewSettings
from marktree.store import Bookmark, EntityStore, Folder
from marktree.tree import FolderTree
from marktree.views import (
    Selection,
    favorites_count,
    subfolders,
    tag_counts,
    visible_bookmarks,
)


class Session:
    """One user's view of a bookmark store.

    Queries read the store directly and are side-effect free; mutations go
    through the :class:`MutationGate` and return its :class:`GateResult`.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        settings: Optional[ViewSettings] = None,
        is_authenticated: AuthSource = False,
        selection: Optional[Selection] = None,
    ) -> None:
        self._store = store
        self._gate = MutationGate(store, is_authenticated)
        self.settings = settings or ViewSettings()
        self.selection = selection or Selection()

    @classmethod
    def from_config(cls, store: EntityStore, config: MarktreeConfig) -> "Session":
        """Build a session whose view and credentials come from ``config``."""
        authenticated = is_valid_api_key(config.auth.api_key, config.auth.min_key_length)
        return cls(store, settings=config.view, is_authenticated=authenticated)

    @property
    def store(self) -> EntityStore:
        return self._store

    @property
    def gate(self) -> MutationGate:
        return self._gate

    @property
    def authenticated(self) -> bool:
        return self._gate.authenticated

    # Selection ----------------------------------------------------------

    def select_folder(self, selected_folder: Optional[str]) -> Selection:
        """Scope the view to a folder (or ``"all"``/``"favorites"``), clearing any tag."""
        self.selection = self.selection.with_folder(selected_folder)
        return self.selection

    def select_tag(self, tag: Optional[str]) -> Selection:
        """Scope the view to a tag, clearing any folder."""
        self.selection = self.selection.with_tag(tag)
        return self.selection

    def set_search(self, query: str) -> Selection:
        self.selection = self.selection.with_search(query)
        return self.selection

    # Queries ------------------------------------------------------------

    def tree(self) -> FolderTree:
        return self._store.tree()

    def children_of(self, folder_id: Optional[str]) -> list[Folder]:
        return self.tree().children_of(folder_id)

    def descendant_ids(self, folder_id: str) -> list[str]:
        return self.tree().descendant_ids(folder_id)

    def path_name(self, folder_id: Optional[str] = None) -> str:
        """Return the display path for ``folder_id`` or, by default, the selection."""
        if folder_id is None:
            folder_id = self.selection.selected_folder
        return self.tree().path_name(folder_id)

    def bookmark_count(self, folder_id: str) -> int:
        return self.tree().bookmark_count(folder_id, self._store.bookmarks)

    def bookmark_counts(self) -> dict[str, int]:
        return self.tree().bookmark_counts(self._store.bookmarks)

    def visible_bookmarks(self) -> list[Bookmark]:
        """Return the bookmarks visible for the current selection."""
        return visible_bookmarks(self._store.bookmarks, self.selection, self.tree(), self.settings)

    def subfolders(self) -> list[Folder]:
        return subfolders(self.selection, self.tree(), self.settings)

    def tag_counts(self) -> dict[str, int]:
        return tag_counts(self._store.bookmarks)

    def favorites_count(self) -> int:
        return favorites_count(self._store.bookmarks)

    # Gated mutations ----------------------------------------------------

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> GateResult:
        return self._gate.create_folder(name, parent_id)

    def rename_folder(self, folder_id: str, new_name: str) -> GateResult:
        return self._gate.rename_folder(folder_id, new_name)

    def move_folder(self, folder_id: str, parent_id: Optional[str]) -> GateResult:
        return self._gate.move_folder(folder_id, parent_id)

    def add_bookmark(self, defaults: Optional[Mapping[str, Any]] = None) -> GateResult:
        """Add a placeholder bookmark filed under the selected folder, if any."""
        return self._gate.add_bookmark(defaults, self.selection.selected_folder)

    def update_bookmark(self, bookmark_id: str, patch: Bookmark | Mapping[str, Any]) -> GateResult:
        return self._gate.update_bookmark(bookmark_id, patch)

    def delete_bookmark(self, bookmark_id: str) -> GateResult:
        return self._gate.delete_bookmark(bookmark_id)

    def toggle_favorite(self, bookmark_id: str) -> GateResult:
        return self._gate.toggle_favorite(bookmark_id)

    def add_tag(self, bookmark_id: str, tag: str) -> GateResult:
        return self._gate.add_tag(bookmark_id, tag)

    def remove_tag(self, bookmark_id: str, tag: str) -> GateResult:
        return self._gate.remove_tag(bookmark_id, tag)


__all__ = ["Session"]
