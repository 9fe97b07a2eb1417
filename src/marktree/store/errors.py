"""Store persistence errors."""


class StoreError(Exception):
    """Base exception for bookmark store persistence."""


class MissingStoreError(StoreError):
    """Raised when no persisted store exists at the requested path."""
