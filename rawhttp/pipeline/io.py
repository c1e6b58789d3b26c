"""Socket reads and writes for a single connection."""

import codecs
import socket
from typing import Optional

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.http_types import (
    HttpResponse,
    MalformedRequest,
    RequestEntityTooLarge,
)
from rawhttp.lifecycle.state import CancellationToken
from rawhttp.pipeline.encoder import encode_response

IO_LOGGER = get_logger("io")

HEADER_DELIMITER = b"\r\n\r\n"


def recv_cancellable(
    client_socket: socket.socket, size: int, token: CancellationToken
) -> bytes:
    """Receive up to ``size`` bytes, re-checking the token on every timeout."""
    while True:
        try:
            return client_socket.recv(size)
        except socket.timeout:
            token.raise_if_cancelled()


def send_cancellable(
    client_socket: socket.socket, payload: bytes, token: CancellationToken
) -> None:
    """Send every byte of ``payload``, re-checking the token on every timeout."""
    view = memoryview(payload)
    sent = 0
    while sent < len(view):
        try:
            sent += client_socket.send(view[sent:])
        except socket.timeout:
            token.raise_if_cancelled()


def declared_content_length(header_block: bytes) -> Optional[int]:
    """Return the Content-Length declared in a raw header block, if any."""
    for line in header_block.decode("latin-1").split("\r\n")[1:]:
        name, separator, value = line.partition(":")
        if not separator or name.strip().lower() != "content-length":
            continue
        try:
            length = int(value.strip())
        except ValueError as exc:
            raise MalformedRequest("Invalid Content-Length") from exc
        if length < 0:
            raise MalformedRequest("Negative Content-Length")
        return length
    return None


def _read_declared_body(
    client_socket: socket.socket,
    data: bytes,
    config: ServerConfig,
    token: CancellationToken,
) -> bytes:
    header_end = data.find(HEADER_DELIMITER)
    if header_end < 0:
        return data
    content_length = declared_content_length(data[:header_end])
    if content_length is None:
        return data
    if content_length > config.max_body_bytes:
        raise RequestEntityTooLarge

    body_start = header_end + len(HEADER_DELIMITER)
    expected_total = body_start + content_length
    while len(data) < expected_total:
        chunk = recv_cancellable(
            client_socket,
            min(config.read_buffer_size, expected_total - len(data)),
            token,
        )
        if not chunk:
            break
        data += chunk
    return data[:expected_total]


def read_request_bytes(
    client_socket: socket.socket, config: ServerConfig, token: CancellationToken
) -> bytes:
    """Read the raw request.

    By default this is exactly one receive of ``read_buffer_size`` bytes;
    anything the client sent beyond that is never read. With
    ``honor_content_length`` the body is read up to its declared length.
    """
    data = recv_cancellable(client_socket, config.read_buffer_size, token)
    if data and config.honor_content_length:
        data = _read_declared_body(client_socket, data, config, token)
    return data


def request_was_truncated(data: bytes, config: ServerConfig) -> bool:
    """True when the single fixed-size read may have cut the request short."""
    return not config.honor_content_length and len(data) >= config.read_buffer_size


def decode_request(data: bytes, truncated: bool = False) -> str:
    """Decode request bytes as UTF-8, reporting bad input as malformed.

    When ``truncated`` is set the read buffer filled up, so a multi-byte
    character split at the end is dropped instead of rejected. Invalid
    bytes anywhere else still make the request malformed.
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        return decoder.decode(data, final=not truncated)
    except UnicodeDecodeError as exc:
        raise MalformedRequest("Request is not valid UTF-8") from exc


def send_response(
    client_socket: socket.socket, response: HttpResponse, token: CancellationToken
) -> int:
    """Encode and send the response; return the number of bytes written."""
    payload = encode_response(response)
    send_cancellable(client_socket, payload, token)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status_code": response.status.value,
            "bytes_out": len(payload),
        },
    )
    return len(payload)
