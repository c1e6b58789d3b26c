"""Process-wide logging for rawhttp: one handler, JSON lines by default.

Every record carries the connection id of the worker that emitted it and
the component (logger name below ``rawhttp``). Structured extras passed
through ``extra=`` are copied into the JSON document when their key is
one of the known field names below; unknown keys are ignored.
"""

import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Optional

from rawhttp.domain.connection_id import LOGGER_ROOT, ConnectionLoggerAdapter

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(connection_id)s %(component)s: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
ROTATE_AT_BYTES = 10 * 1024 * 1024
ROTATED_FILES = 5

REQUEST_FIELDS = (
    "client",
    "method",
    "route",
    "path",
    "status_code",
    "bytes_in",
    "bytes_out",
    "size",
)
FAILURE_FIELDS = ("error_type", "error", "reason", "signal")
SERVER_FIELDS = (
    "host",
    "port",
    "directory",
    "log_destination",
    "log_level",
    "read_buffer_size",
    "confine_paths",
    "honor_content_length",
    "grace_seconds",
    "remaining_workers",
)
KNOWN_FIELDS = REQUEST_FIELDS + FAILURE_FIELDS + SERVER_FIELDS

# Only exception text can echo raw request headers back into the log.
SCRUBBED_FIELDS = frozenset({"error", "reason"})

CREDENTIAL_HEADER = re.compile(
    r"(?im)^([ \t]*(?:proxy-)?authorization|[ \t]*(?:set-)?cookie)"
    r"([ \t]*:[ \t]*)[^\r\n]+$"
)
CREDENTIAL_SCHEME = re.compile(r"\b(Bearer|Basic|Digest)[ \t]+[^\s,]+")
REDACTED = "[REDACTED]"


def scrub_header_values(text: str) -> str:
    """Mask credential header values and auth scheme tokens inside ``text``.

    Header names stay visible so the log still says what was sent.
    """
    text = CREDENTIAL_HEADER.sub(r"\1\2" + REDACTED, text)
    return CREDENTIAL_SCHEME.sub(r"\1 " + REDACTED, text)


def _render_field(key: str, value: Any) -> Any:
    if isinstance(value, Path):
        return value.as_posix()
    if key in SCRUBBED_FIELDS and isinstance(value, str):
        return scrub_header_values(value)
    return value


class ConnectionIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Give records logged outside a worker the placeholder id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "connection_id"):
            record.connection_id = "-"
        if not hasattr(record, "component"):
            record.component = record.name
        return True


class JsonFormatter(logging.Formatter):
    """One sorted JSON object per record."""

    def __init__(
        self,
        datefmt: Optional[str] = DATE_FORMAT,
        fields: Iterable[str] = KNOWN_FIELDS,
    ) -> None:
        super().__init__(datefmt=datefmt)
        self.fields = tuple(fields)

    def format(self, record: logging.LogRecord) -> str:
        document = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "connection_id": getattr(record, "connection_id", "-"),
            "component": getattr(record, "component", record.name),
            "message": record.getMessage(),
        }
        event = getattr(record, "event", None)
        if event is not None:
            document["event"] = event
        document.update(
            (key, _render_field(key, getattr(record, key)))
            for key in self.fields
            if hasattr(record, key)
        )
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, sort_keys=True, default=str)


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _open_handler(destination: Optional[str]) -> logging.Handler:
    if not destination or destination.lower() == "stdout":
        return logging.StreamHandler(sys.stdout)
    log_file = Path(destination)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_file, maxBytes=ROTATE_AT_BYTES, backupCount=ROTATED_FILES
    )


def configure_logging(
    level: str = "INFO", destination: Optional[str] = None, use_json: bool = True
) -> ConnectionLoggerAdapter:
    """Install a single handler on the ``rawhttp`` logger and return an adapter.

    ``destination`` is ``stdout`` (the default) or a file path, which is
    rotated at 10 MiB. Calling this again replaces the previous handler.
    """
    numeric_level = _parse_level(level)
    handler = _open_handler(destination)
    handler.setLevel(numeric_level)
    handler.addFilter(ConnectionIdFilter())
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, DATE_FORMAT))

    logger = logging.getLogger(LOGGER_ROOT)
    for previous in list(logger.handlers):
        logger.removeHandler(previous)
        previous.close()
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    logger.propagate = False
    return ConnectionLoggerAdapter(logger, {})
