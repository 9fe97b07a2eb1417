"""Folder tree resolution for Marktree.

The module-level helpers accept the folder collection explicitly and build a
throwaway :class:`FolderTree`; callers issuing many queries against the same
collection should build the tree once (``EntityStore.tree()`` memoizes one).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional

from .resolver import (
    ALL_BOOKMARKS,
    ALL_BOOKMARKS_LABEL,
    FAVORITES,
    FAVORITES_LABEL,
    PATH_SEPARATOR,
    UNKNOWN_FOLDER_LABEL,
    FolderTree,
)

if TYPE_CHECKING:
    from marktree.store.models import Bookmark, Folder


def children_of(folders: Iterable["Folder"], folder_id: Optional[str]) -> list["Folder"]:
    """Return direct children of ``folder_id`` in store order."""
    return FolderTree(folders).children_of(folder_id)


def descendant_ids(folders: Iterable["Folder"], folder_id: str) -> list[str]:
    """Return every folder id below ``folder_id``."""
    return FolderTree(folders).descendant_ids(folder_id)


def path_name(folders: Iterable["Folder"], folder_id: Optional[str]) -> str:
    """Return the display path for ``folder_id``."""
    return FolderTree(folders).path_name(folder_id)


def bookmark_count(
    folders: Iterable["Folder"], bookmarks: Iterable["Bookmark"], folder_id: str
) -> int:
    """Return the recursive bookmark count for ``folder_id``."""
    return FolderTree(folders).bookmark_count(folder_id, bookmarks)


__all__ = [
    "ALL_BOOKMARKS",
    "ALL_BOOKMARKS_LABEL",
    "FAVORITES",
    "FAVORITES_LABEL",
    "PATH_SEPARATOR",
    "UNKNOWN_FOLDER_LABEL",
    "FolderTree",
    "children_of",
    "descendant_ids",
    "path_name",
    "bookmark_count",
]
