"""Logging setup for the Marktree CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from marktree.config.models import LoggingSettings

_HANDLER_MARKER = "_marktree_handler"


def configure_logging(settings: LoggingSettings, *, no_color: bool = False) -> None:
    """Install console (and optional rotating file) handlers on the root logger.

    Handlers installed by a previous call are replaced; handlers owned by other
    code are left alone.

    Args:
        settings: Logging section of the effective configuration.
        no_color: Disable rich markup in console output.
    """
    level = getattr(logging, settings.level.upper(), logging.WARNING)
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root.removeHandler(handler)
            handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    _install(root, console_handler, level)

    if settings.file:
        path = Path(settings.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        _install(root, file_handler, level)


def _install(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)


__all__ = ["configure_logging"]
