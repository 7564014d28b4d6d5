"""Logging helpers shared by every folio module."""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the ``folio`` namespace."""
    return logging.getLogger(name)


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging once for CLI runs.

    Args:
        level: Level name (``"INFO"``) or number. Defaults to WARNING.
    """
    if level is None:
        level = logging.WARNING
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("folio").setLevel(level)
