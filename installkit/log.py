"""Logging setup for the installer and the engine output channel."""

import logging
import sys
from pathlib import Path

import click

INSTALLER_LOGGER = "installkit"
ENGINE_LOGGER = "installkit.engine"
LOG_FILE = "installkit.log"
LOG_FORMAT = "[%(levelname)5s %(asctime)s %(name)s] %(message)s"

LEVEL_COLORS = {
    logging.DEBUG: "cyan",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}

_logging = logging.getLogger(__name__)

# Handlers installed on the installer logger, by kind ("file", "console").
_handlers: dict[str, logging.Handler] = {}


class ColorFormatter(logging.Formatter):
    """Formatter colouring the level name with click.style."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno)
        original = record.levelname
        if color:
            record.levelname = click.style(f"{original:>5}", fg=color, bold=True)
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _install(kind: str, handler: logging.Handler) -> None:
    _remove(kind)
    logging.getLogger(INSTALLER_LOGGER).addHandler(handler)
    _handlers[kind] = handler


def _remove(kind: str) -> None:
    handler = _handlers.pop(kind, None)
    if handler is not None:
        logging.getLogger(INSTALLER_LOGGER).removeHandler(handler)
        handler.close()


def setup_logging(log_dir: Path | None, level: str = "info") -> logging.Logger:
    """Configure the installer logger to write into ``log_dir``.

    An unwritable log directory only produces a warning.
    """
    logger = logging.getLogger(INSTALLER_LOGGER)
    logger.setLevel(logging.DEBUG)
    teardown_logging()

    if log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_dir / LOG_FILE, encoding="utf-8")
        except OSError as e:
            _logging.warning(f"Cannot write log file in {log_dir}: {e}")
        else:
            handler.setLevel(_level(level))
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            _install("file", handler)

    return logger


def add_console_handler(level: str = "info", colors: bool = True) -> logging.Handler:
    """Also display the log on stdout (--verbose)."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_level(level))
    formatter_cls = ColorFormatter if colors else logging.Formatter
    handler.setFormatter(formatter_cls(LOG_FORMAT))
    _install("console", handler)
    return handler


def teardown_logging() -> None:
    """Remove every handler installed by this module."""
    for kind in list(_handlers):
        _remove(kind)


__all__ = [
    "INSTALLER_LOGGER",
    "ENGINE_LOGGER",
    "setup_logging",
    "add_console_handler",
    "teardown_logging",
]
