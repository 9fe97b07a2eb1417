"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import MarktreeConfig

ENV_PREFIX = "MARKTREE__"


def resolve_with_precedence(
    *,
    defaults: MarktreeConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> MarktreeConfig:
    """Merge configuration layers: defaults, then file, environment and CLI.

    Args:
        defaults: Baseline configuration model.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values derived from ``MARKTREE__`` variables.
        cli_overrides: Dotted-key values supplied on the command line.

    Returns:
        MarktreeConfig: Validated configuration after all layers are applied.

    Raises:
        ConfigError: If a layer is malformed or the merged values are invalid.
    """
    merged: dict[str, Any] = defaults.model_dump(mode="python")
    layers = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    for name, layer in layers:
        if layer is None:
            continue
        merged = _deep_merge(merged, expand_dotted(layer, source_name=name))

    try:
        return MarktreeConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(source: Mapping[str, Any], *, source_name: str = "cli") -> dict[str, Any]:
    """Expand ``{"view.flatten_subfolders": False}`` style keys into nested mappings.

    Args:
        source: Mapping whose keys may contain dots.
        source_name: Layer name used in error messages.

    Returns:
        dict[str, Any]: Nested mapping.

    Raises:
        ConfigError: If keys are not strings or paths conflict with scalar values.
    """
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    nested: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, source_name=source_name)
        assign_path(nested, key.split("."), value, source_name=source_name)
    return nested


def assign_path(
    target: dict[str, Any],
    path: list[str],
    value: Any,
    *,
    source_name: str = "cli",
) -> None:
    """Assign ``value`` at ``path`` inside ``target``, creating mappings as needed.

    Raises:
        ConfigError: If an intermediate segment already holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} "
                "conflicts with existing value."
            )
        node = child
    leaf = path[-1]
    if isinstance(value, dict) and isinstance(node.get(leaf), dict):
        node[leaf] = _deep_merge(node[leaf], value)
    else:
        node[leaf] = value


def env_overrides_from(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``MARKTREE__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``false`` and ``12`` keep their types.
    """
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign_path(overrides, segments, value, source_name="environment")
    return overrides


def flatten_for_env(config: MarktreeConfig) -> Dict[str, str]:
    """Render the config as ``MARKTREE__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}
    for path, value in _leaves(config.model_dump(mode="python"), []):
        env_key = ENV_PREFIX + "__".join(part.upper() for part in path)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[env_key] = "null"
        elif isinstance(value, bool):
            flat[env_key] = "true" if value else "false"
        else:
            flat[env_key] = str(value)
    return flat


def _leaves(data: Mapping[str, Any], prefix: list[str]) -> Iterable[tuple[list[str], Any]]:
    for key, value in data.items():
        if isinstance(value, dict):
            yield from _leaves(value, prefix + [str(key)])
        else:
            yield prefix + [str(key)], value


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "expand_dotted",
    "assign_path",
    "env_overrides_from",
    "flatten_for_env",
]
