"""Request routing over a fixed, ordered route table."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.http_types import HttpRequest, HttpResponse
from rawhttp.domain.response_builders import not_found_response
from rawhttp.handlers.file_handlers import handle_file_download, handle_file_upload
from rawhttp.handlers.system_handlers import (
    handle_echo,
    handle_health_check,
    handle_user_agent,
)
from rawhttp.lifecycle.state import CancellationToken

ROUTER_LOGGER = get_logger("pipeline.router")

Handler = Callable[
    [HttpRequest, dict[str, str], ServerConfig, CancellationToken], HttpResponse
]


class RouteKind(Enum):
    """Every outcome of routing, including the single fallback."""

    HEALTH_CHECK = "health_check"
    ECHO = "echo"
    USER_AGENT = "user_agent"
    FILE_DOWNLOAD = "file_download"
    FILE_UPLOAD = "file_upload"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Route:
    """A method plus a segment pattern; ``{name}`` captures one segment."""

    method: str
    pattern: tuple[str, ...]
    kind: RouteKind

    def match(self, method: str, segments: tuple[str, ...]) -> Optional[dict[str, str]]:
        """Return captured parameters when the route applies, else None."""
        if method != self.method or len(segments) != len(self.pattern):
            return None
        params: dict[str, str] = {}
        for expected, actual in zip(self.pattern, segments):
            if expected.startswith("{") and expected.endswith("}"):
                params[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return params


@dataclass(frozen=True)
class RouteMatch:
    kind: RouteKind
    params: dict[str, str] = field(default_factory=dict)


ROUTE_TABLE: tuple[Route, ...] = (
    Route("GET", (), RouteKind.HEALTH_CHECK),
    Route("GET", ("echo", "{message}"), RouteKind.ECHO),
    Route("GET", ("user-agent",), RouteKind.USER_AGENT),
    Route("GET", ("files", "{name}"), RouteKind.FILE_DOWNLOAD),
    Route("POST", ("files", "{name}"), RouteKind.FILE_UPLOAD),
)


def _not_found(
    _request: HttpRequest,
    _params: dict[str, str],
    _config: ServerConfig,
    _token: CancellationToken,
) -> HttpResponse:
    return not_found_response()


HANDLERS: dict[RouteKind, Handler] = {
    RouteKind.HEALTH_CHECK: handle_health_check,
    RouteKind.ECHO: handle_echo,
    RouteKind.USER_AGENT: handle_user_agent,
    RouteKind.FILE_DOWNLOAD: handle_file_download,
    RouteKind.FILE_UPLOAD: handle_file_upload,
    RouteKind.NOT_FOUND: _not_found,
}


def match_route(method: str, segments: tuple[str, ...]) -> RouteMatch:
    """Return the first matching route, or the NOT_FOUND fallback."""
    for route in ROUTE_TABLE:
        params = route.match(method, segments)
        if params is not None:
            return RouteMatch(route.kind, params)
    return RouteMatch(RouteKind.NOT_FOUND)


def route_request(
    request: HttpRequest, config: ServerConfig, token: CancellationToken
) -> HttpResponse:
    """Route the request to its handler and return the handler's response."""
    route_match = match_route(request.method, request.path_segments)
    if route_match.kind is RouteKind.NOT_FOUND:
        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.path,
                "method": request.method,
            },
        )
    elif ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched",
            extra={"event": "route_matched", "route": route_match.kind.value},
        )
    return HANDLERS[route_match.kind](request, route_match.params, config, token)
