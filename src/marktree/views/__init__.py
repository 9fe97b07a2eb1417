"""Bookmark view derivation: selection scopes, filtering and sidebar aggregates."""

from .filters import scope_predicate, search_predicate, subfolders, visible_bookmarks
from .models import (
    AllScope,
    FavoritesScope,
    FolderScope,
    Scope,
    Selection,
    TagScope,
    folder_scope,
)
from .summary import favorites_count, tag_counts

__all__ = [
    "AllScope",
    "FavoritesScope",
    "FolderScope",
    "TagScope",
    "Scope",
    "Selection",
    "folder_scope",
    "scope_predicate",
    "search_predicate",
    "visible_bookmarks",
    "subfolders",
    "tag_counts",
    "favorites_count",
]
