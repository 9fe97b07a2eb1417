"""Selection state models for bookmark views."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from marktree.tree import ALL_BOOKMARKS, FAVORITES


class ScopeModel(BaseModel):
    """Shared configuration for scope variants."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class AllScope(ScopeModel):
    """Every bookmark."""

    kind: Literal["all"] = "all"


class FavoritesScope(ScopeModel):
    """Favorited bookmarks only."""

    kind: Literal["favorites"] = "favorites"


class FolderScope(ScopeModel):
    """Bookmarks filed in one folder (and, when flattening, its descendants).

    Attributes:
        folder_id: Selected folder identifier.
    """

    kind: Literal["folder"] = "folder"
    folder_id: str


class TagScope(ScopeModel):
    """Bookmarks carrying one tag, regardless of folder.

    Attributes:
        tag: Selected tag, matched case-sensitively.
    """

    kind: Literal["tag"] = "tag"
    tag: str


Scope = Annotated[
    Union[AllScope, FavoritesScope, FolderScope, TagScope],
    Field(discriminator="kind"),
]


def folder_scope(selected_folder: Optional[str]) -> Union[AllScope, FavoritesScope, FolderScope]:
    """Map a folder selection value onto a scope variant.

    ``None`` and ``"all"`` select everything, ``"favorites"`` selects favorites
    and any other value selects that folder id.
    """
    if not selected_folder or selected_folder == ALL_BOOKMARKS:
        return AllScope()
    if selected_folder == FAVORITES:
        return FavoritesScope()
    return FolderScope(folder_id=selected_folder)


class Selection(BaseModel):
    """Current view selection: one scope plus a free-text query.

    Folder and tag selection are mutually exclusive by construction since the
    scope holds exactly one variant.

    Attributes:
        scope: Active folder, favorites, tag or all-bookmarks scope.
        search_query: Raw search text as typed.
    """

    model_config = ConfigDict(frozen=True)

    scope: Scope = Field(default_factory=AllScope)
    search_query: str = ""

    @classmethod
    def from_fields(
        cls,
        selected_folder: Optional[str] = None,
        selected_tag: Optional[str] = None,
        search_query: str = "",
    ) -> "Selection":
        """Build a selection from separate folder and tag fields.

        A non-empty ``selected_tag`` takes precedence and the folder is ignored.
        """
        scope: Scope
        if selected_tag:
            scope = TagScope(tag=selected_tag)
        else:
            scope = folder_scope(selected_folder)
        return cls(scope=scope, search_query=search_query)

    def with_folder(self, selected_folder: Optional[str]) -> "Selection":
        """Return a copy scoped to ``selected_folder``; any tag is cleared."""
        return self.model_copy(update={"scope": folder_scope(selected_folder)})

    def with_tag(self, tag: Optional[str]) -> "Selection":
        """Return a copy scoped to ``tag``; any folder is cleared.

        Clearing the tag (``None`` or empty) falls back to all bookmarks.
        """
        scope: Scope = TagScope(tag=tag) if tag else AllScope()
        return self.model_copy(update={"scope": scope})

    def with_search(self, search_query: str) -> "Selection":
        """Return a copy with a new search query."""
        return self.model_copy(update={"search_query": search_query})

    @property
    def selected_folder(self) -> Optional[str]:
        """Return the folder selection value, or ``None`` while a tag is selected."""
        scope = self.scope
        if isinstance(scope, FolderScope):
            return scope.folder_id
        if isinstance(scope, FavoritesScope):
            return FAVORITES
        if isinstance(scope, AllScope):
            return ALL_BOOKMARKS
        return None

    @property
    def selected_tag(self) -> Optional[str]:
        """Return the selected tag, if any."""
        return self.scope.tag if isinstance(self.scope, TagScope) else None


__all__ = [
    "AllScope",
    "FavoritesScope",
    "FolderScope",
    "TagScope",
    "Scope",
    "Selection",
    "folder_scope",
]
