"""ICAP server responses as read by the client."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .consts import (
    CRLF,
    HTTP_VERSION,
    ICAP_VERSION,
    LF,
    PREVIEW_HEADER,
    SCHEME_HTTP_REQ,
    SCHEME_HTTP_RESP,
    SCHEME_ICAP,
)
from .errors import ERR_INVALID_TCP_MSG, IcapError
from .httpmsg import Headers, HttpRequest, HttpResponse, parse_request, parse_response
from .parser import get_header_val, get_status_with_code, is_request_line

_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+\Z")


@dataclass
class Response:
    """Status, headers and encapsulated HTTP messages of an ICAP response."""

    status_code: int = 0
    status: str = ""
    preview_bytes: int = 0
    headers: Headers = field(default_factory=Headers)
    content_request: HttpRequest | None = None
    content_response: HttpResponse | None = None


def read_response(data: bytes | str) -> Response:
    """Parse a raw ICAP response message."""
    text = data.decode("latin-1") if isinstance(data, (bytes, bytearray)) else data
    lines = _LINE_RE.findall(text)
    response = Response()
    scheme = ""
    http_msg = ""

    for index, line in enumerate(lines):
        last = index == len(lines) - 1

        if is_request_line(line):
            words = line.split(" ")
            if len(words) < 3:
                raise IcapError(ERR_INVALID_TCP_MSG + ":" + line)
            if words[0] == ICAP_VERSION:
                scheme = SCHEME_ICAP
                try:
                    response.status_code, response.status = get_status_with_code(
                        words[1], " ".join(words[2:])
                    )
                except ValueError as exc:
                    raise IcapError(str(exc)) from exc
                continue
            if words[0] == HTTP_VERSION:
                scheme = SCHEME_HTTP_RESP
                http_msg = ""
            if words[2].strip() == HTTP_VERSION:
                scheme = SCHEME_HTTP_REQ
                http_msg = ""

        if scheme == SCHEME_ICAP:
            if line in (LF, CRLF):
                continue
            name, value = get_header_val(line)
            if name == PREVIEW_HEADER:
                try:
                    response.preview_bytes = int(value)
                except ValueError:
                    response.preview_bytes = 0
            response.headers.add(name, value)

        if scheme == SCHEME_HTTP_REQ:
            http_msg += line.strip() + CRLF
            if line == CRLF or last:
                try:
                    response.content_request = parse_request(http_msg)
                except ValueError as exc:
                    raise IcapError(str(exc)) from exc
                continue

        if scheme == SCHEME_HTTP_RESP:
            http_msg += line.strip() + CRLF
            if line == CRLF or last:
                try:
                    response.content_response = parse_response(http_msg, response.content_request)
                except ValueError as exc:
                    raise IcapError(str(exc)) from exc
                continue

    return response