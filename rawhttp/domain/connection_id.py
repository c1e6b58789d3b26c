"""Per-connection log context kept in a context variable."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

LOGGER_ROOT = "rawhttp"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def generate_connection_id() -> str:
    """Return a short random identifier for an accepted connection."""
    return uuid.uuid4().hex[:12]


def get_connection_id() -> Optional[str]:
    """Retrieve the connection ID bound to the current thread context."""
    return _connection_id_var.get()


def set_connection_id(connection_id: str) -> None:
    """Bind a connection ID to the current thread context."""
    _connection_id_var.set(connection_id)


def clear_connection_id() -> None:
    """Drop the connection ID from the current thread context."""
    _connection_id_var.set(None)


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter stamping connection_id and component onto every record."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})

        connection_id = get_connection_id()
        extra["connection_id"] = connection_id if connection_id is not None else "-"

        logger_name = self.logger.name
        prefix = f"{LOGGER_ROOT}."
        extra["component"] = (
            logger_name[len(prefix) :] if logger_name.startswith(prefix) else logger_name
        )
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ConnectionLoggerAdapter:
    """Return an adapter for the ``rawhttp.<name>`` logger."""
    return ConnectionLoggerAdapter(logging.getLogger(f"{LOGGER_ROOT}.{name}"), {})
