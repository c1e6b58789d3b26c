"""Serialization of HttpResponse objects to wire bytes."""

from rawhttp.domain.http_types import HttpResponse

CRLF = "\r\n"
_FRAMING_HEADERS = {"content-length", "connection"}


def encode_response(response: HttpResponse) -> bytes:
    """Serialize status line, headers and body.

    Content-Length is always derived from the final body, after any
    compression a handler applied, and every response closes the
    connection.
    """
    headers = {
        name: value
        for name, value in response.headers.items()
        if name.lower() not in _FRAMING_HEADERS
    }
    headers["Content-Length"] = str(len(response.body))
    headers["Connection"] = "close"

    header_lines = [response.status_line]
    header_lines.extend(f"{name}: {value}" for name, value in headers.items())
    header_block = (CRLF.join(header_lines) + CRLF + CRLF).encode()
    return header_block + response.body
