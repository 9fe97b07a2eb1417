"""Exceptions raised by the configuration layer."""


class ConfigError(Exception):
    """Raised when Marktree configuration cannot be read, merged or validated."""
