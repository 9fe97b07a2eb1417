"""Sidebar aggregates over the bookmark collection."""

from __future__ import annotations

from typing import Iterable

from marktree.store.models import Bookmark


def tag_counts(bookmarks: Iterable[Bookmark]) -> dict[str, int]:
    """Return each tag with the number of bookmarks carrying it.

    Tags appear in the order they are first seen.
    """
    counts: dict[str, int] = {}
    for bookmark in bookmarks:
        for tag in bookmark.tags:
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def favorites_count(bookmarks: Iterable[Bookmark]) -> int:
    """Return the number of favorited bookmarks."""
    return sum(1 for bookmark in bookmarks if bookmark.favorite)


__all__ = ["tag_counts", "favorites_count"]
