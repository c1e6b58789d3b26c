"""Unit tests for the route table and dispatch."""

import logging
from http import HTTPStatus

import pytest

from rawhttp.domain.http_types import HttpRequest
from rawhttp.pipeline.router import (
    HANDLERS,
    ROUTE_TABLE,
    RouteKind,
    match_route,
    route_request,
)


@pytest.mark.parametrize(
    ("method", "segments", "kind", "params"),
    [
        ("GET", (), RouteKind.HEALTH_CHECK, {}),
        ("GET", ("echo", "abc"), RouteKind.ECHO, {"message": "abc"}),
        ("GET", ("user-agent",), RouteKind.USER_AGENT, {}),
        ("GET", ("files", "a.txt"), RouteKind.FILE_DOWNLOAD, {"name": "a.txt"}),
        ("POST", ("files", "a.txt"), RouteKind.FILE_UPLOAD, {"name": "a.txt"}),
        ("GET", ("echo",), RouteKind.NOT_FOUND, {}),
        ("GET", ("echo", "a", "b"), RouteKind.NOT_FOUND, {}),
        ("GET", ("files",), RouteKind.NOT_FOUND, {}),
        ("GET", ("nope",), RouteKind.NOT_FOUND, {}),
        ("POST", (), RouteKind.NOT_FOUND, {}),
        ("POST", ("echo", "abc"), RouteKind.NOT_FOUND, {}),
        ("DELETE", ("files", "a.txt"), RouteKind.NOT_FOUND, {}),
        ("get", (), RouteKind.NOT_FOUND, {}),
    ],
)
def test_match_route(method, segments, kind, params):
    route_match = match_route(method, segments)
    assert route_match.kind is kind
    assert route_match.params == params


def test_every_route_kind_has_a_handler():
    assert set(HANDLERS) == set(RouteKind)
    assert {route.kind for route in ROUTE_TABLE} == set(RouteKind) - {RouteKind.NOT_FOUND}


def test_route_request_dispatches_to_handler(config, token):
    request = HttpRequest("GET", ("echo", "hi"), {})
    response = route_request(request, config, token)
    assert response.status is HTTPStatus.OK
    assert response.body == b"hi"


def test_route_request_logs_unmatched_route(config, token, caplog):
    caplog.set_level(logging.INFO, logger="rawhttp.pipeline.router")
    request = HttpRequest("GET", ("nope",), {})

    response = route_request(request, config, token)

    assert response.status is HTTPStatus.NOT_FOUND
    assert response.body == b""
    assert any(
        getattr(record, "event", None) == "route_not_found"
        and getattr(record, "route", None) == "/nope"
        for record in caplog.records
    )
