"""Worker thread logic for handling one client connection."""

import logging
import socket
import threading
from typing import Optional

from rawhttp.domain.connection_id import (
    clear_connection_id,
    generate_connection_id,
    get_logger,
    set_connection_id,
)
from rawhttp.domain.http_types import (
    HttpResponse,
    MalformedRequest,
    MissingHeader,
    RequestEntityTooLarge,
)
from rawhttp.domain.response_builders import (
    bad_request_response,
    entity_too_large_response,
)
from rawhttp.lifecycle.state import OperationCancelled
from rawhttp.pipeline.io import (
    decode_request,
    read_request_bytes,
    request_was_truncated,
    send_response,
)
from rawhttp.pipeline.parser import parse_request
from rawhttp.pipeline.router import route_request
from rawhttp.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")


def _build_response(
    client_socket: socket.socket, context: WorkerContext, client_addr_str: str
) -> Optional[HttpResponse]:
    """Run read, parse and route; None means the peer sent nothing."""
    token = context.lifecycle.token
    try:
        raw_request = read_request_bytes(client_socket, context.config, token)
        if not raw_request:
            if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                WORKER_LOGGER.debug(
                    "Client closed without sending a request",
                    extra={"event": "client_disconnected", "client": client_addr_str},
                )
            return None
        truncated = request_was_truncated(raw_request, context.config)
        request = parse_request(decode_request(raw_request, truncated))
        WORKER_LOGGER.debug(
            "Request parsed",
            extra={
                "event": "request_parsed",
                "method": request.method,
                "route": request.path,
                "bytes_in": len(raw_request),
            },
        )
        return route_request(request, context.config, token)
    except MissingHeader as error:
        WORKER_LOGGER.warning(
            "Required header missing",
            extra={
                "event": "missing_header",
                "client": client_addr_str,
                "error": error.header_name,
            },
        )
        return bad_request_response()
    except MalformedRequest as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
                "error": str(error),
            },
        )
        return bad_request_response()
    except RequestEntityTooLarge:
        WORKER_LOGGER.warning(
            "Request body size exceeded limit",
            extra={"event": "body_size_exceeded", "client": client_addr_str},
        )
        return entity_too_large_response()


def _close_socket(client_socket: socket.socket) -> None:
    try:
        client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    client_socket.close()


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> None:
    """Serve exactly one request on the connection, then close it."""
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    set_connection_id(generate_connection_id())

    try:
        client_socket.settimeout(context.config.poll_interval)
        response = _build_response(client_socket, context, client_addr_str)
        if response is not None:
            send_response(client_socket, response, context.lifecycle.token)
            WORKER_LOGGER.info(
                "Request complete",
                extra={
                    "event": "request_complete",
                    "client": client_addr_str,
                    "status_code": response.status.value,
                },
            )
    except OperationCancelled:
        WORKER_LOGGER.info(
            "Connection cancelled by shutdown",
            extra={"event": "connection_cancelled", "client": client_addr_str},
        )
    except OSError as error:
        WORKER_LOGGER.error(
            "Error handling client connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket)
        context.lifecycle.cleanup_worker(threading.current_thread())
        WORKER_LOGGER.debug(
            "Socket closed",
            extra={"event": "socket_closed", "client": client_addr_str},
        )
        clear_connection_id()
