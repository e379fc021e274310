"""ICAP client requests: building, validating and serialising them."""

from __future__ import annotations

import socket
from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .consts import (
    ALLOW_HEADER,
    DOUBLE_CRLF,
    ENCAPSULATED_HEADER,
    ICAP_VERSION,
    CRLF,
    METHOD_REQMOD,
    METHOD_RESPMOD,
    PREVIEW_HEADER,
    REGISTERED_METHODS,
    SCHEME_ICAP,
)
from .errors import (
    ERR_INVALID_HOST,
    ERR_INVALID_SCHEME,
    ERR_METHOD_NOT_REGISTERED,
    ERR_REQMOD_WITH_NO_REQ,
    ERR_REQMOD_WITH_RESP,
    ERR_RESPMOD_WITH_NO_RESP,
    IcapError,
)
from .httpmsg import Headers, HttpRequest, HttpResponse
from .parser import (
    add_full_body_in_preview_indicator,
    add_hexa_body_byte_notations,
    body_already_chunked,
    merge_header_and_body,
    parse_preview_body_bytes,
    replace_request_uri_with_actual_url,
    set_encapsulated_header_value,
    split_body_and_header,
)


def _split_url(url: str):
    try:
        return urlsplit(url)
    except ValueError as exc:
        raise IcapError(str(exc)) from exc


@dataclass
class Request:
    """An ICAP request made by the client."""

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    http_request: HttpRequest | None = None
    http_response: HttpResponse | None = None
    chunk_length: int = 0
    preview_bytes: int = 0
    preview_set: bool = False
    body_fitted_in_preview: bool = False
    remaining_preview_bytes: bytes | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    @property
    def hostname(self) -> str:
        """Host name of the ICAP server."""
        return _split_url(self.url).hostname or ""

    @property
    def port(self) -> int | None:
        """Port of the ICAP server, or None when the URL names none."""
        try:
            return _split_url(self.url).port
        except ValueError as exc:
            raise IcapError(str(exc)) from exc

    def validate(self) -> None:
        """Raise IcapError if the method, URL or HTTP messages are not acceptable."""
        if self.method not in REGISTERED_METHODS:
            raise IcapError(ERR_METHOD_NOT_REGISTERED)
        parts = _split_url(self.url)
        if parts.scheme != SCHEME_ICAP:
            raise IcapError(ERR_INVALID_SCHEME)
        if not parts.netloc:
            raise IcapError(ERR_INVALID_HOST)
        if self.method == METHOD_REQMOD and self.http_request is None:
            raise IcapError(ERR_REQMOD_WITH_NO_REQ)
        if self.method == METHOD_REQMOD and self.http_response is not None:
            raise IcapError(ERR_REQMOD_WITH_RESP)
        if self.method == METHOD_RESPMOD and self.http_response is None:
            raise IcapError(ERR_RESPMOD_WITH_NO_RESP)

    def set_preview(self, max_bytes: int) -> None:
        """Send at most ``max_bytes`` of the body as preview and set the Preview header."""
        body = b""
        if self.method == METHOD_REQMOD:
            if self.http_request is None:
                return
            body = self.http_request.body
        elif self.method == METHOD_RESPMOD:
            if self.http_response is None:
                return
            body = self.http_response.body

        preview = len(body)
        if preview > 0:
            self.body_fitted_in_preview = True
        if preview > max_bytes:
            if max_bytes < 0:
                raise ValueError("preview size cannot be negative")
            preview = max_bytes
            self.body_fitted_in_preview = False
            self.remaining_preview_bytes = body[max_bytes:]

        self.headers.set(PREVIEW_HEADER, str(preview))
        self.preview_bytes = preview
        self.preview_set = True

    def set_default_request_headers(self) -> None:
        """Add Allow: 204 and a Host header when they are missing."""
        if ALLOW_HEADER not in self.headers:
            self.headers.add(ALLOW_HEADER, "204")
        if "Host" not in self.headers:
            self.headers.add("Host", socket.gethostname())

    def extend_header(self, headers: Mapping) -> None:
        """Merge further headers into the request; a Preview header sets the preview."""
        extra = headers if isinstance(headers, Headers) else Headers(headers)
        for name, values in extra.items():
            key = name.lower()
            if key == PREVIEW_HEADER.lower() and self.preview_set:
                continue
            if key == ENCAPSULATED_HEADER.lower():
                continue
            for value in values:
                if key == PREVIEW_HEADER.lower():
                    try:
                        size = int(value)
                    except ValueError as exc:
                        raise IcapError(f"invalid preview value: {value!r}") from exc
                    self.set_preview(size)
                    continue
                self.headers.add(name, value)


def new_request(
    method: str,
    url: str,
    http_request: HttpRequest | None = None,
    http_response: HttpResponse | None = None,
) -> Request:
    """Create and validate an ICAP request."""
    _split_url(url)
    request = Request(
        method=method.upper(),
        url=url,
        http_request=http_request,
        http_response=http_response,
    )
    request.validate()
    return request


def _chunk_body(text: str) -> str:
    if body_already_chunked(text):
        return text
    parts = split_body_and_header(text)
    if parts is None:
        return text
    header, body = parts
    return merge_header_and_body(header, add_hexa_body_byte_notations(body))


def dump_request(request: Request) -> bytes:
    """Return the request in its ICAP/1.0 wire form."""
    head = f"{request.method} {request.url} {ICAP_VERSION}{CRLF}"
    for name, values in request.headers.items():
        if name.lower() == ENCAPSULATED_HEADER.lower():
            continue
        head += "".join(f"{name}: {value}{CRLF}" for value in values)

    http_req = ""
    if request.http_request is not None:
        http_req = request.http_request.dump_out().decode("latin-1")
        http_req = replace_request_uri_with_actual_url(
            http_req, request.http_request.escaped_path(), request.http_request.url
        )
        if request.method == METHOD_REQMOD:
            if request.preview_set:
                http_req = parse_preview_body_bytes(http_req, request.preview_bytes)
            http_req = _chunk_body(http_req)
        if http_req:
            while not http_req.endswith(DOUBLE_CRLF):
                http_req += CRLF

    http_resp = ""
    if request.http_response is not None:
        http_resp = request.http_response.dump().decode("latin-1")
        if request.preview_set:
            http_resp = parse_preview_body_bytes(http_resp, request.preview_bytes)
        http_resp = _chunk_body(http_resp)
        if http_resp and not http_resp.endswith(DOUBLE_CRLF):
            http_resp += CRLF

    explicit = request.headers.get(ENCAPSULATED_HEADER)
    if explicit:
        encapsulated = explicit
    else:
        filled = set_encapsulated_header_value(request.method + "%s", http_req, http_resp)
        encapsulated = filled[len(request.method):]
    head += f"{ENCAPSULATED_HEADER}: {encapsulated}{CRLF}{CRLF}"

    if http_resp and request.preview_set and request.body_fitted_in_preview:
        http_resp = add_full_body_in_preview_indicator(http_resp)
    if request.method == METHOD_REQMOD and request.preview_set and request.body_fitted_in_preview:
        http_req = add_full_body_in_preview_indicator(http_req)

    return (head + http_req + http_resp).encode("latin-1")