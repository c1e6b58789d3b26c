"""Integration tests for concurrent connection handling."""

from __future__ import annotations

import concurrent.futures
import socket
from typing import TYPE_CHECKING

import pytest

from tests.utils.http import read_http_response, send_raw_request

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.utils.server import ServerProcessInfo


def test_simultaneous_echo_requests_get_their_own_bodies(
    server_process: "ServerProcessInfo",
) -> None:
    host, port = server_process["host"], server_process["port"]

    def echo(index: int) -> bytes:
        payload = f"GET /echo/message-{index} HTTP/1.1\r\n\r\n".encode()
        return send_raw_request(host, port, payload).body

    with concurrent.futures.ThreadPoolExecutor(max_workers=16) as pool:
        bodies = list(pool.map(echo, range(32)))

    assert bodies == [f"message-{index}".encode() for index in range(32)]


def test_idle_connection_does_not_block_others(
    server_process: "ServerProcessInfo",
) -> None:
    host, port = server_process["host"], server_process["port"]
    with socket.create_connection((host, port), timeout=5) as idle:
        response = send_raw_request(host, port, b"GET /echo/free HTTP/1.1\r\n\r\n")
        assert response.body == b"free"

        idle.sendall(b"GET /echo/late HTTP/1.1\r\n\r\n")
        assert read_http_response(idle).body == b"late"
