"""System handlers for health check, echo, and user-agent reflection."""

import logging

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.http_types import HttpRequest, HttpResponse
from rawhttp.domain.response_builders import empty_response, text_response
from rawhttp.lifecycle.state import CancellationToken

SYSTEM_LOGGER = get_logger("handlers.system")
COMPRESSION_LOGGER = get_logger("compression")


def handle_health_check(
    request: HttpRequest,
    _params: dict[str, str],
    _config: ServerConfig,
    _token: CancellationToken,
) -> HttpResponse:
    """Handle GET / with an empty 200."""
    return empty_response(request)


def handle_echo(
    request: HttpRequest,
    params: dict[str, str],
    _config: ServerConfig,
    _token: CancellationToken,
) -> HttpResponse:
    """Handle GET /echo/<msg> by returning the segment verbatim."""
    content = params["message"]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "size": len(content)},
        )
    return text_response(content, request, COMPRESSION_LOGGER)


def handle_user_agent(
    request: HttpRequest,
    _params: dict[str, str],
    _config: ServerConfig,
    _token: CancellationToken,
) -> HttpResponse:
    """Handle GET /user-agent; a missing header raises MissingHeader."""
    agent = request.require_header("User-Agent")
    return text_response(agent, request, COMPRESSION_LOGGER)
