"""Configuration management for Marktree."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    AuthSettings,
    CLIOptions,
    LoggingSettings,
    MarktreeConfig,
    StoreSettings,
    ViewSettings,
)
from .resolver import (
    assign_path,
    env_overrides_from,
    flatten_for_env,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.marktree/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # Marktree configuration file
    # Manage with `marktree config set KEY --value VALUE` or edit by hand.
    """
)


class ConfigManager:
    """Load and persist configuration data, applying precedence rules."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = False,
    ) -> MarktreeConfig:
        """Load configuration from disk, environment and CLI overrides.

        Args:
            cli_overrides: Dotted-key overrides that take precedence over all layers.
            include_env: Whether ``MARKTREE__`` environment variables are applied.
            ensure_file: Whether a default file is written when none exists.

        Returns:
            MarktreeConfig: The effective configuration.

        Raises:
            ConfigError: If the file cannot be parsed or values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=MarktreeConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_overrides_from(self._env) if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return raw overrides stored on disk."""
        return self._read_file()

    def set_value(self, key: str, value: Any) -> MarktreeConfig:
        """Persist a single dotted ``key`` after validating the resulting config.

        Returns:
            MarktreeConfig: Configuration resolved from the updated file alone.

        Raises:
            ConfigError: If the key is empty or the value fails validation.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must specify a dotted path such as 'view.flatten_subfolders'.")

        file_data = self._read_file()
        assign_path(file_data, segments, value, source_name="file")
        resolved = resolve_with_precedence(defaults=MarktreeConfig(), file_overrides=file_data)
        self.save(file_data)
        return resolved

    def save(self, config: MarktreeConfig | Mapping[str, Any]) -> None:
        """Persist configuration data to disk."""
        if isinstance(config, MarktreeConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Create a configuration file with defaults if one does not exist."""
        if not self._config_path.exists():
            self._write_file(MarktreeConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = yaml.safe_dump(dict(data), sort_keys=False)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{serialized}", encoding="utf-8"
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "MarktreeConfig",
    "ViewSettings",
    "AuthSettings",
    "StoreSettings",
    "LoggingSettings",
    "CLIOptions",
    "resolve_with_precedence",
    "flatten_for_env",
    "ConfigError",
]
