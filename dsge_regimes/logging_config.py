"""
Logging for the dsge_regimes package.

Every module logs through ``get_logger(<module>)``, a child of the
``dsge_regimes`` logger. Store writes on a `RegimeModel` are logged at DEBUG,
subspec initialization at INFO and configuration warnings at WARNING.
Nothing is printed until an application calls `configure_logging`.
"""

import logging
import sys
from typing import Dict, Iterable, Optional, Union

PACKAGE_LOGGER = 'dsge_regimes'

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
# no timestamps, for display_regimes.py
CLI_FORMAT = '%(levelname)-7s %(name)s: %(message)s'

_VERBOSITY = [logging.WARNING, logging.INFO, logging.DEBUG]

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())
logging.getLogger(PACKAGE_LOGGER).setLevel(logging.WARNING)


def level_for(level: Union[int, str]) -> int:
    """Numeric logging level from an int or a name such as ``'debug'``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown logging level {level!r}")
    return value


def verbosity_level(count: int) -> int:
    """Level for a repeated ``-v`` flag: none shows warnings, ``-v`` subspecs, ``-vv`` every store write."""
    return _VERBOSITY[min(max(count, 0), len(_VERBOSITY) - 1)]


def configure_logging(level: Union[int, str] = logging.INFO,
                      format_str: Optional[str] = None,
                      handlers: Union[Dict[str, logging.Handler], Iterable[logging.Handler], None] = None):
    """
    Send package log records to `handlers` (default: stderr) and stop them
    reaching the root logger. Handlers attached by an earlier call are removed.

    Args:
        level: logging level or its name
        format_str: record format (default: ``DEFAULT_FORMAT``)
        handlers: handlers, or a name-to-handler mapping
    """
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.handlers.clear()
    pkg_logger.setLevel(level_for(level))

    if isinstance(handlers, dict):
        handlers = list(handlers.values())
    handlers = list(handlers or [logging.StreamHandler(sys.stderr)])

    formatter = logging.Formatter(format_str or DEFAULT_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    pkg_logger.debug(f"Logging at {logging.getLevelName(pkg_logger.level)} "
                     f"to {len(handlers)} handler(s)")


def get_logger(name: str) -> logging.Logger:
    """Logger ``dsge_regimes.<name>`` for a package module."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


__all__ = ["configure_logging", "get_logger", "level_for", "verbosity_level",
           "DEFAULT_FORMAT", "CLI_FORMAT", "PACKAGE_LOGGER"]
