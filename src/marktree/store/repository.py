"""JSON persistence for the bookmark store."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from importlib import resources
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError, model_validator

from .entities import EntityStore
from .errors import MissingStoreError, StoreError
from .models import Bookmark, Folder

LOGGER = logging.getLogger(__name__)

SAMPLE_DATA_PACKAGE = "marktree.data"
SAMPLE_DATA_FILE = "sample.json"


class StoreSnapshot(BaseModel):
    """Serialized form of an entity store."""

    folders: List[Folder] = Field(default_factory=list)
    bookmarks: List[Bookmark] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "StoreSnapshot":
        for label, items in (("folder", self.folders), ("bookmark", self.bookmarks)):
            seen: set[str] = set()
            for item in items:
                if item.id in seen:
                    raise ValueError(f"duplicate {label} id {item.id!r}")
                seen.add(item.id)
        return self


class StoreRepository:
    """Load and save entity stores as JSON snapshots."""

    def load(self, path: Path) -> EntityStore:
        """Load the store persisted at ``path``.

        Args:
            path: JSON snapshot location.

        Returns:
            EntityStore: Store populated from the snapshot.

        Raises:
            MissingStoreError: If no snapshot exists.
            StoreError: If the snapshot cannot be parsed or validated.
        """
        if not path.exists():
            raise MissingStoreError(f"No bookmark store found at {path}")
        snapshot = self._parse(path.read_text(encoding="utf-8"), source=str(path))
        LOGGER.debug(
            "Loaded %d folders and %d bookmarks from %s.",
            len(snapshot.folders),
            len(snapshot.bookmarks),
            path,
        )
        return EntityStore(snapshot.folders, snapshot.bookmarks)

    def save(self, path: Path, store: EntityStore) -> None:
        """Persist ``store`` to ``path``, creating parent directories."""
        snapshot = StoreSnapshot(folders=list(store.folders), bookmarks=list(store.bookmarks))
        payload = snapshot.model_dump(mode="json", by_alias=True)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def load_or_seed(self, path: Path, *, seed_sample: bool = True) -> EntityStore:
        """Load ``path`` or return a fresh store when it does not exist yet.

        Args:
            path: JSON snapshot location.
            seed_sample: Whether a fresh store starts with the bundled sample data.

        Returns:
            EntityStore: Loaded or freshly created store (not saved).
        """
        try:
            return self.load(path)
        except MissingStoreError:
            if not seed_sample:
                return EntityStore()
            LOGGER.info("Seeding new bookmark store at %s with sample data.", path)
            return self.sample_store()

    def sample_store(self) -> EntityStore:
        """Return a store populated with the bundled sample data."""
        text = resources.files(SAMPLE_DATA_PACKAGE).joinpath(SAMPLE_DATA_FILE).read_text(
            encoding="utf-8"
        )
        snapshot = self._parse(text, source=SAMPLE_DATA_FILE)
        return EntityStore(snapshot.folders, snapshot.bookmarks)

    def _parse(self, text: str, *, source: str) -> StoreSnapshot:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Invalid bookmark store data in {source}: {exc}") from exc
        try:
            return StoreSnapshot.model_validate(data)
        except ValidationError as exc:
            raise StoreError(f"Invalid bookmark store data in {source}: {exc}") from exc


__all__ = ["StoreRepository", "StoreSnapshot"]
