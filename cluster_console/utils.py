"""
Shared helpers.
"""
import logging
import sys

from cluster_console.core import config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger writing to stderr at the configured level."""
    root = logging.getLogger("cluster_console")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(config.LOG_LEVEL)
    return logging.getLogger(name)
