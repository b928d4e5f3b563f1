"""
Structured logger used across skill_ninja.

Modules create one with ``logger = get_logger(__name__)`` and attach context
with ``data={...}`` rather than formatting it into the message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.logging import RichHandler

from skill_ninja.ui.console import log_console

if TYPE_CHECKING:
    from skill_ninja.config import Settings

ROOT_LOGGER_NAME = "skill_ninja"


class Logger:
    """Thin wrapper over ``logging.Logger`` that renders a ``data`` mapping."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._logger = logging.getLogger(name)

    @staticmethod
    def _format(message: str, data: dict[str, Any] | None) -> str:
        if not data:
            return message
        pairs = " ".join(f"{key}={value}" for key, value in data.items())
        return f"{message} [{pairs}]"

    def _log(
        self,
        level: int,
        message: str,
        data: dict[str, Any] | None,
        exc_info: bool = False,
    ) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(
                level,
                self._format(message, data),
                exc_info=exc_info,
                extra={"data": data or {}},
                stacklevel=3,
            )

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(logging.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(logging.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(logging.WARNING, message, data)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(logging.ERROR, message, data)

    def exception(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._log(logging.ERROR, message, data, exc_info=True)


_loggers: dict[str, Logger] = {}


def get_logger(name: str) -> Logger:
    if name not in _loggers:
        _loggers[name] = Logger(name)
    return _loggers[name]


def configure_logging(settings: Settings | None = None) -> None:
    """Install a rich handler on the package logger. Safe to call repeatedly."""
    level_name = settings.logger.level if settings else "warning"
    show_path = settings.logger.show_path if settings else False

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level_name.upper(), logging.WARNING))
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(
        RichHandler(
            console=log_console,
            show_path=show_path,
            rich_tracebacks=True,
            markup=False,
        )
    )

    # Keep third party libraries quiet unless debugging
    if level_name != "debug":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
