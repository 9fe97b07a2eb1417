"""In-memory entity store owning the folder and bookmark collections."""

from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Mapping, Optional

from marktree.tree import ALL_BOOKMARKS, FAVORITES, FolderTree

from .models import Bookmark, Folder

LOGGER = logging.getLogger(__name__)

UNFILED_SCOPES = frozenset({ALL_BOOKMARKS, FAVORITES})


class EntityStore:
    """Single-writer owner of folders and bookmarks.

    Collections are exposed as tuples of frozen models; every change goes
    through the mutation methods below, which bump :attr:`revision`. Validation
    failures (blank names, unknown ids) are no-ops reported through the return
    value rather than raised.
    """

    def __init__(
        self,
        folders: Iterable[Folder] = (),
        bookmarks: Iterable[Bookmark] = (),
    ) -> None:
        self._folders: list[Folder] = list(folders)
        self._bookmarks: list[Bookmark] = list(bookmarks)
        self._revision = 0
        self._tree: FolderTree | None = None
        self._tree_revision = -1

    # Read access ------------------------------------------------------

    @property
    def folders(self) -> tuple[Folder, ...]:
        """Return folders in insertion order."""
        return tuple(self._folders)

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        """Return bookmarks in insertion order."""
        return tuple(self._bookmarks)

    @property
    def revision(self) -> int:
        """Return a counter incremented by every effective mutation."""
        return self._revision

    def tree(self) -> FolderTree:
        """Return the folder tree for the current revision.

        The tree is memoized until the next mutation.
        """
        if self._tree is None or self._tree_revision != self._revision:
            self._tree = FolderTree(self._folders)
            self._tree_revision = self._revision
        return self._tree

    def get_folder(self, folder_id: Optional[str]) -> Optional[Folder]:
        """Return the folder with ``folder_id`` if present."""
        return self.tree().get(folder_id)

    def get_bookmark(self, bookmark_id: str) -> Optional[Bookmark]:
        """Return the bookmark with ``bookmark_id`` if present."""
        index = self._bookmark_index(bookmark_id)
        return None if index is None else self._bookmarks[index]

    # Folder mutations -------------------------------------------------

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[Folder]:
        """Create a folder named ``name`` under ``parent_id``.

        Args:
            name: Display name; surrounding whitespace is stripped.
            parent_id: Parent folder id, or ``None`` for a root folder.

        Returns:
            Folder | None: The new folder, or ``None`` when the name is blank.
        """
        cleaned = name.strip()
        if not cleaned:
            LOGGER.debug("Ignoring folder creation with a blank name.")
            return None

        folder = Folder(
            id=self._new_id("folder", {existing.id for existing in self._folders}),
            name=cleaned,
            parent_id=parent_id,
        )
        self._folders.append(folder)
        self._touch()
        LOGGER.debug("Created folder %s (%s) under %s.", folder.id, folder.name, parent_id)
        return folder

    def rename_folder(self, folder_id: str, new_name: str) -> bool:
        """Rename a folder in place.

        Returns:
            bool: True when the folder exists and the trimmed name is non-empty.
        """
        cleaned = new_name.strip()
        index = self._folder_index(folder_id)
        if index is None or not cleaned:
            LOGGER.debug("Ignoring rename of folder %s.", folder_id)
            return False

        self._folders[index] = self._folders[index].model_copy(update={"name": cleaned})
        self._touch()
        return True

    def move_folder(self, folder_id: str, parent_id: Optional[str]) -> bool:
        """Re-parent a folder, refusing moves that would create a cycle.

        Args:
            folder_id: Folder to move.
            parent_id: New parent id, or ``None`` to make the folder a root.

        Returns:
            bool: True when the move was applied.
        """
        index = self._folder_index(folder_id)
        if index is None:
            return False
        tree = self.tree()
        if parent_id is not None:
            if parent_id not in tree:
                LOGGER.debug("Refusing to move %s under unknown folder %s.", folder_id, parent_id)
                return False
            if parent_id == folder_id or tree.is_descendant(parent_id, folder_id):
                LOGGER.debug("Refusing to move %s beneath itself.", folder_id)
                return False

        self._folders[index] = self._folders[index].model_copy(update={"parent_id": parent_id})
        self._touch()
        return True

    # Bookmark mutations -----------------------------------------------

    def add_bookmark(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        folder_scope: Optional[str] = None,
    ) -> Bookmark:
        """Append a placeholder bookmark filed according to ``folder_scope``.

        Args:
            defaults: Field values overriding the placeholders; ``id`` is ignored.
            folder_scope: Current folder selection. ``"all"``, ``"favorites"`` and
                ``None`` file the bookmark as unfiled; any other value is used
                verbatim as the folder id.

        Returns:
            Bookmark: The stored bookmark.
        """
        fields = dict(defaults or {})
        fields.pop("id", None)
        fields["folder_id"] = None if folder_scope in UNFILED_SCOPES else folder_scope
        fields["id"] = self._new_id("bookmark", {existing.id for existing in self._bookmarks})

        bookmark = Bookmark.model_validate(fields)
        self._bookmarks.append(bookmark)
        self._touch()
        LOGGER.debug("Added bookmark %s to %s.", bookmark.id, bookmark.folder_id)
        return bookmark

    def update_bookmark(self, bookmark_id: str, patch: Bookmark | Mapping[str, Any]) -> bool:
        """Replace the bookmark matching ``bookmark_id`` with a patched copy.

        Args:
            bookmark_id: Identifier of the bookmark to replace.
            patch: Either a full bookmark or a mapping of field names to new values.
                The stored id is always preserved.

        Returns:
            bool: True when a bookmark was replaced.

        Raises:
            pydantic.ValidationError: If the patched values are not valid bookmark fields.
        """
        index = self._bookmark_index(bookmark_id)
        if index is None:
            LOGGER.debug("Ignoring update of unknown bookmark %s.", bookmark_id)
            return False

        changes = patch.model_dump() if isinstance(patch, Bookmark) else dict(patch)
        data = self._bookmarks[index].model_dump()
        data.update(changes)
        data["id"] = bookmark_id
        self._bookmarks[index] = Bookmark.model_validate(data)
        self._touch()
        return True

    def delete_bookmark(self, bookmark_id: str) -> bool:
        """Remove the bookmark matching ``bookmark_id``."""
        index = self._bookmark_index(bookmark_id)
        if index is None:
            return False
        del self._bookmarks[index]
        self._touch()
        return True

    def toggle_favorite(self, bookmark_id: str) -> bool:
        """Flip the favorite flag of a bookmark."""
        index = self._bookmark_index(bookmark_id)
        if index is None:
            return False
        current = self._bookmarks[index]
        self._bookmarks[index] = current.model_copy(update={"favorite": not current.favorite})
        self._touch()
        return True

    def add_tag(self, bookmark_id: str, tag: str) -> bool:
        """Append ``tag`` to a bookmark unless blank or already present."""
        cleaned = tag.strip()
        current = self.get_bookmark(bookmark_id)
        if current is None or not cleaned or cleaned in current.tags:
            return False
        return self.update_bookmark(bookmark_id, {"tags": (*current.tags, cleaned)})

    def remove_tag(self, bookmark_id: str, tag: str) -> bool:
        """Remove ``tag`` from a bookmark if present."""
        current = self.get_bookmark(bookmark_id)
        if current is None or tag not in current.tags:
            return False
        return self.update_bookmark(
            bookmark_id, {"tags": tuple(existing for existing in current.tags if existing != tag)}
        )

    # Internal helpers -------------------------------------------------

    def _touch(self) -> None:
        self._revision += 1

    def _folder_index(self, folder_id: str) -> Optional[int]:
        for index, folder in enumerate(self._folders):
            if folder.id == folder_id:
                return index
        return None

    def _bookmark_index(self, bookmark_id: str) -> Optional[int]:
        for index, bookmark in enumerate(self._bookmarks):
            if bookmark.id == bookmark_id:
                return index
        return None

    @staticmethod
    def _new_id(prefix: str, taken: set[str]) -> str:
        stamp = int(time.time() * 1000)
        candidate = f"{prefix}-{stamp}"
        while candidate in taken:
            stamp += 1
            candidate = f"{prefix}-{stamp}"
        return candidate


__all__ = ["EntityStore", "UNFILED_SCOPES"]
