"""Authentication checks gating store mutations."""

from .gate import (
    DEFAULT_MIN_KEY_LENGTH,
    REJECTED,
    AuthSource,
    GateResult,
    MutationGate,
    guarded,
    is_valid_api_key,
)

__all__ = [
    "AuthSource",
    "DEFAULT_MIN_KEY_LENGTH",
    "GateResult",
    "REJECTED",
    "MutationGate",
    "guarded",
    "is_valid_api_key",
]
