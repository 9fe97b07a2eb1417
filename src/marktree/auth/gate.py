"""Authorization gate wrapping every store mutation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from marktree.store import Bookmark, EntityStore

LOGGER = logging.getLogger(__name__)

DEFAULT_MIN_KEY_LENGTH = 8

AuthSource = Union[bool, Callable[[], bool]]


@dataclass(slots=True, frozen=True)
class GateResult:
    """Outcome of a gated mutation.

    Attributes:
        allowed: False when the mutation was rejected for lack of authentication.
        value: Whatever the wrapped operation returned, or ``None`` when rejected.
    """

    allowed: bool
    value: Any = None

    @property
    def rejected(self) -> bool:
        """Return True when callers should prompt for credentials."""
        return not self.allowed


REJECTED = GateResult(allowed=False)


def is_valid_api_key(api_key: Optional[str], min_length: int = DEFAULT_MIN_KEY_LENGTH) -> bool:
    """Return True when ``api_key`` is long enough to count as authenticated."""
    return bool(api_key) and len(api_key.strip()) >= min_length


def guarded(operation: Callable[[], Any], is_authenticated: bool) -> GateResult:
    """Run ``operation`` only when ``is_authenticated`` is true.

    Args:
        operation: Zero-argument callable performing the mutation.
        is_authenticated: Externally supplied authentication flag.

    Returns:
        GateResult: The operation's return value, or the rejected signal with the
        data left untouched.
    """
    if not is_authenticated:
        LOGGER.info("Mutation rejected: authentication required.")
        return REJECTED
    return GateResult(allowed=True, value=operation())


class MutationGate:
    """Expose the store's mutations behind a single authentication check.

    ``is_authenticated`` may be a flag or a callable consulted on every call, so
    a gate can follow credentials that change while it is alive.
    """

    def __init__(self, store: EntityStore, is_authenticated: AuthSource) -> None:
        self._store = store
        self._is_authenticated = is_authenticated

    @property
    def store(self) -> EntityStore:
        """Return the wrapped store."""
        return self._store

    @property
    def authenticated(self) -> bool:
        """Return the current authentication state."""
        source = self._is_authenticated
        return bool(source()) if callable(source) else bool(source)

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> GateResult:
        return self._run(lambda: self._store.create_folder(name, parent_id))

    def rename_folder(self, folder_id: str, new_name: str) -> GateResult:
        return self._run(lambda: self._store.rename_folder(folder_id, new_name))

    def move_folder(self, folder_id: str, parent_id: Optional[str]) -> GateResult:
        return self._run(lambda: self._store.move_folder(folder_id, parent_id))

    def add_bookmark(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        folder_scope: Optional[str] = None,
    ) -> GateResult:
        return self._run(lambda: self._store.add_bookmark(defaults, folder_scope))

    def update_bookmark(self, bookmark_id: str, patch: Bookmark | Mapping[str, Any]) -> GateResult:
        return self._run(lambda: self._store.update_bookmark(bookmark_id, patch))

    def delete_bookmark(self, bookmark_id: str) -> GateResult:
        return self._run(lambda: self._store.delete_bookmark(bookmark_id))

    def toggle_favorite(self, bookmark_id: str) -> GateResult:
        return self._run(lambda: self._store.toggle_favorite(bookmark_id))

    def add_tag(self, bookmark_id: str, tag: str) -> GateResult:
        return self._run(lambda: self._store.add_tag(bookmark_id, tag))

    def remove_tag(self, bookmark_id: str, tag: str) -> GateResult:
        return self._run(lambda: self._store.remove_tag(bookmark_id, tag))

    def _run(self, operation: Callable[[], Any]) -> GateResult:
        return guarded(operation, self.authenticated)


__all__ = [
    "DEFAULT_MIN_KEY_LENGTH",
    "GateResult",
    "REJECTED",
    "MutationGate",
    "guarded",
    "is_valid_api_key",
]
