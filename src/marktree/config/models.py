"""Configuration models describing Marktree settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MarktreeBaseModel(BaseModel):
    """Shared configuration for Marktree Pydantic settings models."""

    model_config = ConfigDict(extra="forbid")


class ViewSettings(MarktreeBaseModel):
    """Options that shape how bookmark views are derived and displayed.

    Attributes:
        flatten_subfolders: Whether selecting a folder also lists the bookmarks of
            every descendant folder.
        view_mode: Preferred presentation of bookmark listings.
        dark_mode: Whether consumers should render a dark theme.
        show_sidebar: Whether consumers should render the folder sidebar.
    """

    flatten_subfolders: bool = True
    view_mode: Literal["grid", "list"] = "grid"
    dark_mode: bool = False
    show_sidebar: bool = True


class AuthSettings(MarktreeBaseModel):
    """Credentials that unlock mutating operations.

    Attributes:
        api_key: Key presented by the user; mutations are refused without it.
        min_key_length: Minimum stripped key length treated as authenticated.
    """

    api_key: Optional[str] = None
    min_key_length: int = Field(default=8, ge=1)


class StoreSettings(MarktreeBaseModel):
    """Location of the persisted bookmark collection.

    Attributes:
        path: JSON file holding folders and bookmarks.
        seed_sample: Whether a missing store is seeded with the bundled sample data.
    """

    path: str = "~/.marktree/bookmarks.json"
    seed_sample: bool = True


class LoggingSettings(MarktreeBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path; enables a rotating file handler.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 5


class CLIOptions(MarktreeBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class MarktreeConfig(MarktreeBaseModel):
    """Top-level configuration struct for Marktree.

    Attributes:
        view: Bookmark view settings.
        auth: Authentication settings.
        store: Persistence settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    view: ViewSettings = Field(default_factory=ViewSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "MarktreeBaseModel",
    "ViewSettings",
    "AuthSettings",
    "StoreSettings",
    "LoggingSettings",
    "CLIOptions",
    "MarktreeConfig",
]
