"""Integration tests for optional reader and file-path behaviour."""

from __future__ import annotations

import socket
import time
from pathlib import Path
from typing import Generator

import pytest

from tests.utils.server import ServerProcessInfo, launch_server
from tests.utils.http import read_http_response, send_raw_request

pytestmark = pytest.mark.integration


@pytest.fixture(name="hardened_server")
def _hardened_server(tmp_path: Path) -> Generator[ServerProcessInfo, None, None]:
    served = tmp_path / "served"
    served.mkdir()
    yield from launch_server(
        served,
        ["--honor-content-length", "--max-body-bytes", "32", "--confine-paths"],
    )


def test_body_split_across_writes_is_reassembled(
    hardened_server: ServerProcessInfo,
) -> None:
    host, port = hardened_server["host"], hardened_server["port"]
    with socket.create_connection((host, port), timeout=5) as sock:
        sock.sendall(b"POST /files/split.txt HTTP/1.1\r\nContent-Length: 10\r\n\r\nhello")
        time.sleep(0.2)
        sock.sendall(b"world")
        response = read_http_response(sock)

    assert response.status_code == 201
    assert (hardened_server["directory"] / "split.txt").read_bytes() == b"helloworld"


def test_declared_body_over_limit_is_rejected(
    hardened_server: ServerProcessInfo,
) -> None:
    response = send_raw_request(
        hardened_server["host"],
        hardened_server["port"],
        b"POST /files/big.txt HTTP/1.1\r\nContent-Length: 64\r\n\r\n",
    )
    assert response.status_code == 413


def test_parent_reference_is_forbidden_when_confined(
    hardened_server: ServerProcessInfo,
) -> None:
    response = send_raw_request(
        hardened_server["host"],
        hardened_server["port"],
        b"POST /files/.. HTTP/1.1\r\nContent-Length: 1\r\n\r\nx",
    )
    assert response.status_code == 403
