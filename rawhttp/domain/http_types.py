"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional

HTTP_VERSION = "HTTP/1.1"


class MalformedRequest(ValueError):
    """Raised when request bytes cannot be turned into a consistent request."""


class MissingHeader(MalformedRequest):
    """Raised when a handler requires a header the client did not send."""

    def __init__(self, header_name: str) -> None:
        super().__init__(f"Missing required header: {header_name}")
        self.header_name = header_name


class RequestEntityTooLarge(Exception):
    """Raised when a declared request body exceeds the configured limit."""


@dataclass(frozen=True)
class HttpRequest:
    """Represents a parsed HTTP request."""

    method: str
    path_segments: tuple[str, ...]
    headers: dict[str, str]
    body: str = ""
    version: str = HTTP_VERSION

    @property
    def path(self) -> str:
        """Normalized request path rebuilt from its segments."""
        return "/" + "/".join(self.path_segments)

    def header(self, name: str) -> Optional[str]:
        """Look up a header value, preferring an exact-case match."""
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def require_header(self, name: str) -> str:
        """Return a header value or raise MissingHeader."""
        value = self.header(name)
        if value is None:
            raise MissingHeader(name)
        return value


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client."""

    status: HTTPStatus
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.status.value} {self.status.phrase}"
