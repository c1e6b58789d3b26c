"""Hand-written parser turning decoded request text into an HttpRequest.

The accepted grammar is a deliberate subset of HTTP/1.1:

* the first line is ``METHOD SP PATH [SP VERSION]``;
* header lines are ``Name: Value`` up to the first blank line;
* everything after the blank line is the body, with line breaks removed.

Any violation raises MalformedRequest before a request object exists, so
the router never sees a half-parsed request.
"""

import re
from typing import Iterable

from rawhttp.domain.http_types import HTTP_VERSION, HttpRequest, MalformedRequest

LINE_BREAK = re.compile(r"\r\n|\r|\n")
HEADER_SEPARATOR = ": "


def split_path(target: str) -> tuple[str, ...]:
    """Split a request target on '/' dropping empty segments."""
    return tuple(segment for segment in target.split("/") if segment)


def parse_request_line(request_line: str) -> tuple[str, tuple[str, ...], str]:
    """Return method, path segments and protocol version."""
    tokens = request_line.split(" ")
    if len(tokens) < 2 or not tokens[0] or not tokens[1]:
        raise MalformedRequest("Invalid request line")
    method, target = tokens[0], tokens[1]
    version = tokens[2].strip() if len(tokens) > 2 and tokens[2].strip() else HTTP_VERSION
    return method, split_path(target), version


def parse_headers(lines: Iterable[str]) -> dict[str, str]:
    """Split header lines on the first ': '; later duplicates overwrite."""
    parsed: dict[str, str] = {}
    for line in lines:
        if HEADER_SEPARATOR not in line:
            raise MalformedRequest(f"Invalid header line: {line!r}")
        name, value = line.split(HEADER_SEPARATOR, 1)
        name = name.strip()
        if not name:
            raise MalformedRequest("Empty header name")
        parsed[name] = value.strip()
    return parsed


def parse_request(text: str) -> HttpRequest:
    """Parse decoded request text into a fully populated HttpRequest."""
    if not text.replace("\x00", "").strip():
        raise MalformedRequest("Empty request")

    lines = LINE_BREAK.split(text)
    method, path_segments, version = parse_request_line(lines[0])

    header_lines: list[str] = []
    body_parts: list[str] = []
    in_body = False
    for line in lines[1:]:
        if in_body:
            body_parts.append(line.replace("\x00", ""))
        elif not line.strip():
            in_body = True
        else:
            header_lines.append(line)

    return HttpRequest(
        method=method,
        path_segments=path_segments,
        headers=parse_headers(header_lines),
        body="".join(body_parts),
        version=version,
    )
