"""Entity models for folders and bookmarks."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EntityModel(BaseModel):
    """Shared configuration for stored entities.

    Entities are frozen; the store swaps whole instances on mutation. Unknown
    fields are rejected. Field names are snake_case in Python and camelCase on
    disk.
    """

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel
    )


class Folder(EntityModel):
    """A node of the folder forest.

    Attributes:
        id: Unique folder identifier.
        name: Display name.
        parent_id: Identifier of the parent folder, or ``None`` for a root.
        icon: Optional icon name used by renderers.
    """

    id: str
    name: str
    parent_id: Optional[str] = None
    icon: Optional[str] = None


class Bookmark(EntityModel):
    """A saved link.

    Attributes:
        id: Unique bookmark identifier.
        title: Display title.
        url: Target URL.
        description: Free-form notes.
        thumbnail: Preview image URL, possibly empty.
        tags: Ordered, duplicate-free tag names.
        folder_id: Containing folder, or ``None`` when unfiled.
        favorite: Whether the bookmark is starred.
        date_added: ISO-8601 creation timestamp.
    """

    id: str
    title: str = "New Bookmark"
    url: str = "https://example.com"
    description: str = "Add a description"
    thumbnail: str = ""
    tags: Tuple[str, ...] = ()
    folder_id: Optional[str] = None
    favorite: bool = False
    date_added: str = Field(default_factory=utc_timestamp)

    @field_validator("tags", mode="after")
    @classmethod
    def _dedupe_tags(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(value))


__all__ = ["EntityModel", "Folder", "Bookmark", "utc_timestamp"]
