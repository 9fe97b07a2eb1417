"""Entity store and persistence for Marktree."""

from .entities import UNFILED_SCOPES, EntityStore
from .errors import MissingStoreError, StoreError
from .models import Bookmark, Folder
from .repository import StoreRepository, StoreSnapshot

__all__ = [
    "EntityStore",
    "UNFILED_SCOPES",
    "Bookmark",
    "Folder",
    "StoreRepository",
    "StoreSnapshot",
    "StoreError",
    "MissingStoreError",
]
