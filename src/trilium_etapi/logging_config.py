"""Logging configuration for the Trilium ETAPI client."""

import sys
from typing import TextIO

from loguru import logger

_FORMAT = "{level.icon} {message}"
_VERBOSE_FORMAT = "{level.icon} {name}:{function} {message}"


def configure_logging(*, verbose: bool = False, sink: TextIO | None = None) -> None:
    """Send loguru output to ``sink`` (stderr by default); DEBUG adds the call site."""
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format=_VERBOSE_FORMAT if verbose else _FORMAT,
    )
