"""Pure HTTP response builders."""

import gzip
from http import HTTPStatus
from typing import Optional, Tuple

from rawhttp.domain.http_types import HttpRequest, HttpResponse

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


def accepts_gzip(accept_encoding: Optional[str]) -> bool:
    """Return True when the Accept-Encoding value includes gzip with q>0."""
    for token in (accept_encoding or "").split(","):
        value = token.strip()
        if not value:
            continue
        algorithm, _, params = value.partition(";")
        if algorithm.strip().lower() != "gzip":
            continue
        quality = 1.0
        if params:
            for param in params.split(";"):
                key, _, raw_value = param.strip().partition("=")
                if key.strip().lower() == "q" and raw_value:
                    try:
                        quality = float(raw_value)
                    except ValueError:
                        quality = 0.0
                    break
        if quality > 0:
            return True
    return False


def request_accepts_gzip(request: HttpRequest) -> bool:
    """Check the request's Accept-Encoding header for gzip support."""
    return accepts_gzip(request.header("Accept-Encoding"))


def compress_if_gzip_supported(
    payload: bytes, request: HttpRequest, compression_logger
) -> Tuple[bytes, dict[str, str]]:
    """Compress the payload when the request advertises gzip support."""
    if not request_accepts_gzip(request):
        return payload, {}
    compressed = gzip.compress(payload)
    compression_logger.debug(
        "Compressed payload",
        extra={"event": "payload_compressed", "size": len(payload), "bytes_out": len(compressed)},
    )
    return compressed, {"Content-Encoding": "gzip"}


def empty_response(request: HttpRequest) -> HttpResponse:
    """Return a 200 OK response with no body.

    An empty body is never compressed, but the encoding header still
    follows the client's advertised support.
    """
    headers = {"Content-Encoding": "gzip"} if request_accepts_gzip(request) else {}
    return HttpResponse(HTTPStatus.OK, headers)


def text_response(
    message: str, request: HttpRequest, compression_logger
) -> HttpResponse:
    """Return a text/plain response, compressing when appropriate."""
    payload, encoding_headers = compress_if_gzip_supported(
        message.encode(), request, compression_logger
    )
    headers = {"Content-Type": TEXT_PLAIN, **encoding_headers}
    return HttpResponse(HTTPStatus.OK, headers, payload)


def octet_stream_response(payload: bytes) -> HttpResponse:
    """Return raw file bytes as application/octet-stream."""
    return HttpResponse(HTTPStatus.OK, {"Content-Type": OCTET_STREAM}, payload)


def created_response(payload: bytes) -> HttpResponse:
    """Return a 201 response echoing the stored payload."""
    return HttpResponse(HTTPStatus.CREATED, {}, payload)


def not_found_response() -> HttpResponse:
    """Return a 404 response with an empty body."""
    return HttpResponse(HTTPStatus.NOT_FOUND)


def bad_request_response() -> HttpResponse:
    """Return a 400 response with an empty body."""
    return HttpResponse(HTTPStatus.BAD_REQUEST)


def forbidden_response() -> HttpResponse:
    """Return a 403 response for paths escaping the served directory."""
    return HttpResponse(HTTPStatus.FORBIDDEN)


def entity_too_large_response() -> HttpResponse:
    """Return a 413 response for oversized declared bodies."""
    return HttpResponse(HTTPStatus.REQUEST_ENTITY_TOO_LARGE)
