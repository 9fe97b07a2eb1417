"""Derive the visible bookmark list from a selection."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from marktree.config.models import ViewSettings
from marktree.store.models import Bookmark, Folder
from marktree.tree import FolderTree

from .models import AllScope, FavoritesScope, FolderScope, Scope, Selection, TagScope

LOGGER = logging.getLogger(__name__)

BookmarkPredicate = Callable[[Bookmark], bool]


def scope_predicate(
    scope: Scope, tree: FolderTree, *, flatten_subfolders: bool
) -> BookmarkPredicate:
    """Return the predicate selecting bookmarks inside ``scope``.

    Args:
        scope: Active scope variant.
        tree: Folder tree used to resolve descendants.
        flatten_subfolders: Whether folder scopes include descendant folders.

    Returns:
        BookmarkPredicate: Callable returning True for bookmarks in scope.
    """
    if isinstance(scope, TagScope):
        tag = scope.tag
        return lambda bookmark: tag in bookmark.tags
    if isinstance(scope, AllScope):
        return lambda bookmark: True
    if isinstance(scope, FavoritesScope):
        return lambda bookmark: bookmark.favorite
    if isinstance(scope, FolderScope):
        if scope.folder_id not in tree:
            return lambda bookmark: False
        folder_ids = {scope.folder_id}
        if flatten_subfolders:
            folder_ids.update(tree.descendant_ids(scope.folder_id))
        return lambda bookmark: bookmark.folder_id in folder_ids
    return lambda bookmark: True


def search_predicate(query: str) -> BookmarkPredicate:
    """Return a case-insensitive substring predicate over title, url and tags.

    A query that is blank after stripping matches every bookmark.
    """
    needle = query.strip().lower()
    if not needle:
        return lambda bookmark: True

    def _matches(bookmark: Bookmark) -> bool:
        return (
            needle in bookmark.title.lower()
            or needle in bookmark.url.lower()
            or any(needle in tag.lower() for tag in bookmark.tags)
        )

    return _matches


def visible_bookmarks(
    bookmarks: Iterable[Bookmark],
    selection: Selection,
    tree: FolderTree,
    settings: Optional[ViewSettings] = None,
) -> list[Bookmark]:
    """Return the bookmarks visible for ``selection``, preserving input order.

    The scope filter runs first and the search filter second; both must accept a
    bookmark for it to be visible. Unknown folder ids produce an empty list.

    Args:
        bookmarks: All bookmarks in store order.
        selection: Current scope and search text.
        tree: Folder tree for the same store revision as ``bookmarks``.
        settings: View settings; defaults flatten subfolders.

    Returns:
        list[Bookmark]: Visible bookmarks.
    """
    view = settings or ViewSettings()
    in_scope = scope_predicate(selection.scope, tree, flatten_subfolders=view.flatten_subfolders)
    matches_search = search_predicate(selection.search_query)

    scoped = [bookmark for bookmark in bookmarks if in_scope(bookmark)]
    visible = [bookmark for bookmark in scoped if matches_search(bookmark)]
    LOGGER.debug(
        "Scope %s kept %d bookmarks; search %r kept %d.",
        selection.scope.kind,
        len(scoped),
        selection.search_query,
        len(visible),
    )
    return visible


def subfolders(
    selection: Selection,
    tree: FolderTree,
    settings: Optional[ViewSettings] = None,
) -> list[Folder]:
    """Return the folder tiles shown beside a concrete folder selection.

    Tiles only appear when subfolders are not flattened into the list.
    """
    view = settings or ViewSettings()
    if view.flatten_subfolders or not isinstance(selection.scope, FolderScope):
        return []
    return tree.children_of(selection.scope.folder_id)


__all__ = [
    "BookmarkPredicate",
    "scope_predicate",
    "search_predicate",
    "visible_bookmarks",
    "subfolders",
]
