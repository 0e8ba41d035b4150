# chatrooms/core/logging.py

import logging
import os
import sys


DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Logs one line per broadcast, so it gets its own knob
FANOUT_LOGGER = "chatrooms.services.connection_manager"


def _level(env_var: str, default: str) -> int:
    return getattr(logging, os.getenv(env_var, default).upper(), getattr(logging, default))


def setup_logging() -> None:
    """
    Route the chat service's logs to stdout.

    LOG_LEVEL sets the root level (INFO by default). Room, identity and
    message events are logged at INFO by their services. FANOUT_LOG_LEVEL
    (defaults to LOG_LEVEL) covers the per-event broadcast lines from the
    connection manager, which are the loudest thing on a busy room.
    """
    level = _level("LOG_LEVEL", "INFO")
    fanout_level = _level("FANOUT_LOG_LEVEL", logging.getLevelName(level))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    logging.getLogger(FANOUT_LOGGER).setLevel(fanout_level)

    # Uvicorn may have installed its handler already
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        root_logger.addHandler(handler)

    # Frame-level chatter from the WebSocket transport
    logging.getLogger("websockets").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the root configured by setup_logging()."""
    return logging.getLogger(name)
