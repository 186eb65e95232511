"""Logging configuration for swarm-client."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(log_path: Path, *, verbose: bool = False) -> None:
    """Configure the package logger with a rotating file handler, plus stderr when verbose.

    Idempotent: skips if handlers are already attached.
    """
    root = logging.getLogger("swarm_client")
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if verbose:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    root.setLevel(logging.DEBUG)
    root.propagate = False
