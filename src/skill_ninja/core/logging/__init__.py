"""Logging helpers: ``get_logger`` for modules, ``configure_logging`` for entry points."""

from skill_ninja.core.logging.logger import Logger, configure_logging, get_logger

__all__ = ["Logger", "configure_logging", "get_logger"]
