"""Tests for logging configuration helpers."""

import json
import logging
from pathlib import Path

import pytest

from rawhttp.bootstrap.logging_setup import (
    ConnectionIdFilter,
    JsonFormatter,
    configure_logging,
    scrub_header_values,
)
from rawhttp.domain.connection_id import (
    clear_connection_id,
    get_connection_id,
    get_logger,
    set_connection_id,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo configure_logging side effects on the shared logger."""
    logger = logging.getLogger("rawhttp")
    level, handlers = logger.level, list(logger.handlers)
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="rawhttp.transport.worker",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg="format test",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_configure_logging_stream_handler():
    adapter = configure_logging("DEBUG", "stdout")

    assert adapter.logger.name == "rawhttp"
    assert adapter.logger.level == logging.DEBUG
    assert len(adapter.logger.handlers) == 1
    assert isinstance(adapter.logger.handlers[0].formatter, JsonFormatter)


def test_configure_logging_file_destination(tmp_path: Path):
    destination = tmp_path / "logs" / "server.log"
    adapter = configure_logging("WARNING", destination.as_posix())

    handler = adapter.logger.handlers[0]
    assert handler.baseFilename == destination.as_posix()

    get_logger("server").warning("file log test", extra={"event": "file_sink_check"})
    handler.flush()

    entry = json.loads(destination.read_text().strip())
    assert entry["message"] == "file log test"
    assert entry["component"] == "server"
    assert entry["event"] == "file_sink_check"


def test_configure_logging_plain_text_format():
    adapter = configure_logging("INFO", "stdout", use_json=False)
    formatter = adapter.logger.handlers[0].formatter
    assert not isinstance(formatter, JsonFormatter)


def test_json_formatter_emits_known_extras():
    formatted = JsonFormatter().format(
        _record(connection_id="abc123", component="transport.worker", status_code=200)
    )
    data = json.loads(formatted)
    assert data["connection_id"] == "abc123"
    assert data["component"] == "transport.worker"
    assert data["status_code"] == 200
    assert list(data) == sorted(data)


def test_json_formatter_masks_credential_header_values_in_errors():
    data = json.loads(
        JsonFormatter().format(
            _record(error="bad line\r\nAuthorization: Bearer abc.def\r\nHost: x")
        )
    )
    assert "abc.def" not in data["error"]
    assert "Authorization: [REDACTED]" in data["error"]
    assert "Host: x" in data["error"]


def test_json_formatter_keeps_file_names_that_look_sensitive():
    data = json.loads(
        JsonFormatter().format(
            _record(path=Path("/srv/files/token.txt"), route="/files/password.txt")
        )
    )
    assert data["path"] == "/srv/files/token.txt"
    assert data["route"] == "/files/password.txt"


def test_json_formatter_ignores_unknown_extras():
    data = json.loads(JsonFormatter().format(_record(user_agent="curl/8.0")))
    assert "user_agent" not in data


def test_scrub_header_values_masks_auth_scheme_tokens():
    assert scrub_header_values("got Basic dXNlcjpwYXNz, retrying") == (
        "got Basic [REDACTED], retrying"
    )
    assert scrub_header_values("Cookie: session=1") == "Cookie: [REDACTED]"


def test_scrub_header_values_passes_plain_values():
    assert scrub_header_values("GET /echo/token") == "GET /echo/token"
    assert scrub_header_values("") == ""


def test_connection_id_filter_inserts_placeholder_when_missing():
    record = _record()
    assert ConnectionIdFilter().filter(record)
    assert record.connection_id == "-"
    assert record.component == "rawhttp.transport.worker"


def test_adapter_stamps_connection_id(caplog):
    caplog.set_level(logging.INFO, logger="rawhttp.transport.worker")
    set_connection_id("conn-1")
    try:
        get_logger("transport.worker").info("stamped")
    finally:
        clear_connection_id()

    record = caplog.records[-1]
    assert record.connection_id == "conn-1"
    assert record.component == "transport.worker"
    assert get_connection_id() is None
