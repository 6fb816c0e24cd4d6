"""Human-readable log output for command line runs."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
ROOT_LOGGER_NAME = "resolver_sync"


def configure_logging(verbose: bool = False, stream: TextIO | None = None) -> logging.Logger:
    """Attach one stream handler to the package logger; repeated calls replace it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger
