"""Folder forest queries: children, descendants, display paths and counts."""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

if TYPE_CHECKING:
    from marktree.store.models import Bookmark, Folder

ALL_BOOKMARKS = "all"
FAVORITES = "favorites"

ALL_BOOKMARKS_LABEL = "All Bookmarks"
FAVORITES_LABEL = "Favorites"
UNKNOWN_FOLDER_LABEL = "Unknown Folder"
PATH_SEPARATOR = " > "


class FolderTree:
    """Read-only index over a folder collection.

    The children index is built once on construction, so a tree describes the
    folders it was given and nothing else. Stores hand out a fresh tree after
    every mutation.
    """

    def __init__(self, folders: Iterable["Folder"]) -> None:
        """Index ``folders`` by id and by parent id.

        Args:
            folders: Folder collection in store order.
        """
        self._folders: tuple["Folder", ...] = tuple(folders)
        self._by_id: dict[str, "Folder"] = {}
        self._children: dict[Optional[str], list["Folder"]] = {}
        for folder in self._folders:
            self._by_id.setdefault(folder.id, folder)
            self._children.setdefault(folder.parent_id, []).append(folder)

    @property
    def folders(self) -> tuple["Folder", ...]:
        """Return the indexed folders in store order."""
        return self._folders

    def __len__(self) -> int:
        return len(self._folders)

    def __contains__(self, folder_id: object) -> bool:
        return folder_id in self._by_id

    def get(self, folder_id: Optional[str]) -> Optional["Folder"]:
        """Return the folder with ``folder_id`` or ``None``."""
        if folder_id is None:
            return None
        return self._by_id.get(folder_id)

    def children_of(self, folder_id: Optional[str]) -> list["Folder"]:
        """Return folders whose parent is ``folder_id``, in store order.

        Args:
            folder_id: Parent identifier; ``None`` selects top-level folders.

        Returns:
            list[Folder]: Direct children, unsorted.
        """
        return list(self._children.get(folder_id, ()))

    def descendant_ids(self, folder_id: str) -> list[str]:
        """Return every folder id transitively below ``folder_id``.

        Direct children come first, followed by each child's own descendants in
        child order. The result never contains ``folder_id`` and no id appears
        twice, even when the parent graph is not a proper forest.

        Args:
            folder_id: Folder whose subtree should be collected.

        Returns:
            list[str]: Descendant identifiers.
        """
        seen = {folder_id}
        ordered: list[str] = []
        pending = [folder_id]
        while pending:
            parent = pending.pop()
            fresh = [child.id for child in self._children.get(parent, ()) if child.id not in seen]
            seen.update(fresh)
            ordered.extend(fresh)
            pending.extend(reversed(fresh))
        return ordered

    def ancestors(self, folder_id: str) -> list["Folder"]:
        """Return the chain from ``folder_id`` up to its root, nearest first.

        The chain includes the folder itself. It stops at a missing or dangling
        parent and at the first folder already visited.
        """
        chain: list["Folder"] = []
        visited: set[str] = set()
        current = self.get(folder_id)
        while current is not None and current.id not in visited:
            visited.add(current.id)
            chain.append(current)
            current = self.get(current.parent_id) if current.parent_id else None
        return chain

    def path_name(self, folder_id: Optional[str]) -> str:
        """Return the display path for a folder selection.

        Args:
            folder_id: A folder id, ``"all"``, ``"favorites"`` or ``None``.

        Returns:
            str: ``"All Bookmarks"``, ``"Favorites"``, ``"Unknown Folder"`` or the
            root-first ``" > "`` joined chain of folder names.
        """
        if not folder_id or folder_id == ALL_BOOKMARKS:
            return ALL_BOOKMARKS_LABEL
        if folder_id == FAVORITES:
            return FAVORITES_LABEL
        if folder_id not in self._by_id:
            return UNKNOWN_FOLDER_LABEL
        names = [folder.name for folder in self.ancestors(folder_id)]
        return PATH_SEPARATOR.join(reversed(names))

    def bookmark_count(self, folder_id: str, bookmarks: Iterable["Bookmark"]) -> int:
        """Count bookmarks filed in ``folder_id`` or any of its descendants."""
        scope = {folder_id, *self.descendant_ids(folder_id)}
        return sum(1 for bookmark in bookmarks if bookmark.folder_id in scope)

    def bookmark_counts(self, bookmarks: Iterable["Bookmark"]) -> dict[str, int]:
        """Return recursive bookmark counts for every folder, keyed by id."""
        direct = Counter(bookmark.folder_id for bookmark in bookmarks)
        return {
            folder_id: direct[folder_id]
            + sum(direct[child] for child in self.descendant_ids(folder_id))
            for folder_id in self._by_id
        }

    def is_descendant(self, candidate_id: str, folder_id: str) -> bool:
        """Return True when ``candidate_id`` lies strictly below ``folder_id``."""
        return candidate_id in self.descendant_ids(folder_id)

    def root_folders(self) -> list["Folder"]:
        """Return top-level folders, including those whose parent is missing."""
        return [
            folder
            for folder in self._folders
            if not folder.parent_id or folder.parent_id not in self._by_id
        ]

    def walk(self) -> Iterator[tuple[int, "Folder"]]:
        """Yield ``(depth, folder)`` pairs depth-first from every root.

        Folders caught in a parent cycle have no root and are not yielded.
        """
        visited: set[str] = set()
        stack = [(0, folder) for folder in reversed(self.root_folders())]
        while stack:
            depth, folder = stack.pop()
            if folder.id in visited:
                continue
            visited.add(folder.id)
            yield depth, folder
            for child in reversed(self._children.get(folder.id, ())):
                stack.append((depth + 1, child))

    def folder_options(self, indent: str = "  ") -> list[tuple[str, str]]:
        """Return ``(folder_id, label)`` pairs for an indented folder picker."""
        return [(folder.id, f"{indent * depth}{folder.name}") for depth, folder in self.walk()]


__all__ = [
    "ALL_BOOKMARKS",
    "FAVORITES",
    "ALL_BOOKMARKS_LABEL",
    "FAVORITES_LABEL",
    "UNKNOWN_FOLDER_LABEL",
    "PATH_SEPARATOR",
    "FolderTree",
]
