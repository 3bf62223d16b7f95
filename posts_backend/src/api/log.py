"""
Logging setup and event helpers.

Events emitted by the service:

    app_start            application process starting
    store_connected      post store connected
    store_disconnected   post store disconnected
    post_created         post persisted (id, tag count)
    post_updated         post merged (id, updated field names)
    post_deleted         delete issued for an id
    request_rejected     client error (validation, identifier, page, not found)
    store_failed         store call raised; request answered with 500

Post titles and bodies are never logged; only ids, counts and field names.
"""
from __future__ import annotations

import logging
import sys

EVENT_APP_START = "app_start"
EVENT_STORE_CONNECTED = "store_connected"
EVENT_STORE_DISCONNECTED = "store_disconnected"
EVENT_POST_CREATED = "post_created"
EVENT_POST_UPDATED = "post_updated"
EVENT_POST_DELETED = "post_deleted"
EVENT_REQUEST_REJECTED = "request_rejected"
EVENT_STORE_FAILED = "store_failed"

_HANDLER_ATTR = "_posts_backend"


# PUBLIC_INTERFACE
def setup_logging(level: int = logging.INFO) -> None:
    """Attach a single stdout handler to the root logger. Safe to call repeatedly."""
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


# PUBLIC_INTERFACE
def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    *,
    exc_info: object = None,
    **kwargs: object,
) -> None:
    """Emit `event_name: key=value ...` at the given level name."""
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    log_fn(message, exc_info=exc_info)
