"""File download and upload handlers."""

import logging

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.file_paths import ForbiddenPath, resolve_file_path
from rawhttp.domain.http_types import HttpRequest, HttpResponse
from rawhttp.domain.response_builders import (
    created_response,
    forbidden_response,
    not_found_response,
    octet_stream_response,
)
from rawhttp.lifecycle.state import CancellationToken

FILE_LOGGER = get_logger("handlers.file")


def handle_file_download(
    request: HttpRequest,
    params: dict[str, str],
    config: ServerConfig,
    token: CancellationToken,
) -> HttpResponse:
    """Return the whole file as application/octet-stream, or 404."""
    filename = params["name"]
    try:
        resolved_path = resolve_file_path(
            config.directory, filename, config.confine_paths
        )
    except ForbiddenPath:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={"event": "forbidden_path", "path": filename, "method": request.method},
        )
        return forbidden_response()

    if not resolved_path.is_file():
        FILE_LOGGER.info(
            "File not found",
            extra={"event": "file_not_found", "path": resolved_path},
        )
        return not_found_response()

    token.raise_if_cancelled()
    payload = resolved_path.read_bytes()
    FILE_LOGGER.info(
        "File read operation complete",
        extra={
            "event": "file_read_complete",
            "path": resolved_path,
            "bytes_out": len(payload),
        },
    )
    return octet_stream_response(payload)


def handle_file_upload(
    request: HttpRequest,
    params: dict[str, str],
    config: ServerConfig,
    token: CancellationToken,
) -> HttpResponse:
    """Write the request body to the named file and echo it back with 201."""
    filename = params["name"]
    try:
        resolved_path = resolve_file_path(
            config.directory, filename, config.confine_paths
        )
    except ForbiddenPath:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={"event": "forbidden_path", "path": filename, "method": request.method},
        )
        return forbidden_response()

    payload = request.body.encode()
    if FILE_LOGGER.logger.isEnabledFor(logging.DEBUG):
        FILE_LOGGER.debug(
            "File write started",
            extra={"event": "file_write_started", "path": resolved_path, "bytes_in": len(payload)},
        )
    token.raise_if_cancelled()
    # No lock: a concurrent download of the same name may see a partial write.
    resolved_path.write_bytes(payload)
    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "path": resolved_path,
            "bytes_in": len(payload),
        },
    )
    return created_response(payload)
