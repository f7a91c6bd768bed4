"""
Logging — one place that configures the root logger.

Every module asks for its logger through `get_logger(__name__)`; entity
scoped lines carry a `[Store: <id>]` or `[Order: <id>]` prefix.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"

_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure console logging for the whole process.

    Safe to call more than once: the last call's level wins and handlers
    are replaced rather than duplicated.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce verbosity from external libraries
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ("setup_logging", "get_logger", "LOG_FORMAT")
