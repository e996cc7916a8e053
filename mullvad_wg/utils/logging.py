"""Logging utilities."""

from __future__ import annotations

import logging
import logging.handlers

from rich.logging import RichHandler

from ..core.app_paths import LOG_DIR

ROOT_LOGGER_NAME = "mullvad_wg"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG)
    if any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers):
        return root
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            LOG_DIR / "mullvad-wg.log", maxBytes=2 * 1024 * 1024, backupCount=3
        )
    except OSError:
        # Read-only home or sandbox; keep the records in the process only.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def enable_console_logging(level: int = logging.DEBUG) -> None:
    """Mirror log records to stderr for ``--verbose`` runs."""
    root = _configure_root()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    handler = RichHandler(show_path=False, rich_tracebacks=False)
    handler.setLevel(level)
    root.addHandler(handler)
