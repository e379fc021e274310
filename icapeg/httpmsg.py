"""HTTP messages carried inside ICAP requests and responses."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from http import HTTPStatus
from urllib.parse import urlsplit

from .consts import DEFAULT_USER_AGENT

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
_REQUEST_SKIPPED = frozenset({"host", "user-agent", "content-length", "transfer-encoding", "trailer"})
_RESPONSE_SKIPPED = frozenset({"content-length", "transfer-encoding", "trailer"})


class Headers(MutableMapping[str, list[str]]):
    """Case-insensitive multi-valued header map that keeps the first spelling of each name."""

    def __init__(self, data: Mapping[str, Iterable[str] | str] | Iterable[tuple[str, str]] | None = None):
        self._items: dict[str, tuple[str, list[str]]] = {}
        if data is None:
            return
        pairs = data.items() if isinstance(data, Mapping) else data
        for name, value in pairs:
            if isinstance(value, str):
                self.add(name, value)
            else:
                for item in value:
                    self.add(name, item)

    def __getitem__(self, name: str) -> list[str]:
        return self._items[name.lower()][1]

    def __setitem__(self, name: str, values: Iterable[str]) -> None:
        key = name.lower()
        spelling = self._items[key][0] if key in self._items else name
        self._items[key] = (spelling, list(values))

    def __delitem__(self, name: str) -> None:
        key = name.lower()
        if key not in self._items:
            raise KeyError(name)
        self._items.pop(key)

    def __iter__(self) -> Iterator[str]:
        return (spelling for spelling, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def add(self, name: str, value: str) -> None:
        """Append a value to the header, creating it if needed."""
        key = name.lower()
        if key in self._items:
            self._items[key][1].append(value)
        else:
            self._items[key] = (name, [value])

    def set(self, name: str, value: str) -> None:
        """Replace all values of the header with a single value."""
        self[name] = [value]

    def get(self, name: str) -> str:  # type: ignore[override]
        """Return the first value of the header, or an empty string."""
        entry = self._items.get(name.lower())
        if not entry or not entry[1]:
            return ""
        return entry[1][0]

    def get_all(self, name: str) -> list[str]:
        """Return a copy of every value of the header."""
        entry = self._items.get(name.lower())
        return list(entry[1]) if entry else []

    def copy(self) -> Headers:
        return Headers(self.items())


def _as_headers(value: Headers | Mapping | None) -> Headers:
    return value if isinstance(value, Headers) else Headers(value)


def _header_block(lines: list[str]) -> bytes:
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


@dataclass
class HttpRequest:
    """An HTTP request as sent by a client."""

    method: str = "GET"
    url: str = ""
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    host: str = ""
    request_uri: str = ""

    def __post_init__(self) -> None:
        self.headers = _as_headers(self.headers)
        if not self.host:
            self.host = urlsplit(self.url).netloc or self.headers.get("Host")

    def escaped_path(self) -> str:
        """The path part of the URL, as written."""
        return urlsplit(self.url).path

    def _target(self) -> str:
        parts = urlsplit(self.url)
        target = parts.path or "/"
        if parts.query:
            target += "?" + parts.query
        return target

    def dump_out(self) -> bytes:
        """Return the request as it is written on the wire by a client."""
        lines = [f"{self.method} {self._target()} HTTP/1.1", f"Host: {self.host or self.headers.get('Host')}"]
        user_agent = self.headers.get("User-Agent") if "User-Agent" in self.headers else DEFAULT_USER_AGENT
        if user_agent:
            lines.append(f"User-Agent: {user_agent}")
        if self.body or self.method.upper() in _BODY_METHODS:
            lines.append(f"Content-Length: {len(self.body)}")
        for name in sorted(self.headers):
            if name.lower() in _REQUEST_SKIPPED:
                continue
            lines.extend(f"{name}: {value}" for value in self.headers[name])
        if (
            not self.headers.get("Accept-Encoding")
            and not self.headers.get("Range")
            and self.method.upper() != "HEAD"
        ):
            lines.append("Accept-Encoding: gzip")
        return _header_block(lines) + self.body


@dataclass
class HttpResponse:
    """An HTTP response as returned by a server."""

    status_code: int = 200
    reason: str = ""
    proto: str = "HTTP/1.1"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    request: HttpRequest | None = None

    def __post_init__(self) -> None:
        self.headers = _as_headers(self.headers)

    @property
    def status(self) -> str:
        return f"{self.status_code} {self._reason()}"

    def _reason(self) -> str:
        if self.reason:
            return self.reason
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return f"status code {self.status_code}"

    def dump(self) -> bytes:
        """Return the response as it is written on the wire."""
        lines = [f"{self.proto} {self.status_code} {self._reason()}"]
        if self.body or "Content-Length" in self.headers:
            lines.append(f"Content-Length: {len(self.body)}")
        for name in sorted(self.headers):
            if name.lower() in _RESPONSE_SKIPPED:
                continue
            lines.extend(f"{name}: {value}" for value in self.headers[name])
        return _header_block(lines) + self.body


@dataclass
class HttpMsg:
    """An HTTP request and response passed around together."""

    request: HttpRequest | None = None
    response: HttpResponse | None = None


def _split_message(data: bytes | str) -> tuple[str, Headers, bytes]:
    raw = data.encode("latin-1") if isinstance(data, str) else bytes(data)
    end = raw.find(b"\r\n\r\n")
    sep_len = 4
    if end < 0:
        end = raw.find(b"\n\n")
        sep_len = 2
    if end < 0:
        head, body = raw, b""
    else:
        head, body = raw[:end], raw[end + sep_len:]
    lines = [line.rstrip(b"\r").decode("latin-1") for line in head.split(b"\n")]
    lines = [line for line in lines if line.strip()]
    if not lines:
        raise ValueError("empty HTTP message")
    headers = Headers()
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"malformed HTTP header line: {line!r}")
        headers.add(name.strip(), value.strip())
    return lines[0].strip(), headers, body


def _decode_chunked(data: bytes) -> bytes:
    out = bytearray()
    pos = 0
    while True:
        end = data.find(b"\r\n", pos)
        if end < 0:
            raise ValueError("malformed chunked body")
        size_text = data[pos:end].split(b";", 1)[0].strip()
        try:
            size = int(size_text, 16)
        except ValueError:
            raise ValueError(f"invalid chunk size: {size_text!r}") from None
        if size == 0:
            return bytes(out)
        start = end + 2
        chunk = data[start:start + size]
        if len(chunk) < size:
            raise ValueError("truncated chunked body")
        out += chunk
        pos = start + size + 2


def _read_body(headers: Headers, body: bytes) -> bytes:
    if headers.get("Transfer-Encoding").lower() == "chunked":
        return _decode_chunked(body)
    length = headers.get("Content-Length")
    if length.isdigit():
        return body[: int(length)]
    return body


def parse_request(data: bytes | str) -> HttpRequest:
    """Parse a wire-format HTTP request."""
    start, headers, body = _split_message(data)
    parts = start.split()
    if len(parts) != 3 or not parts[2].startswith("HTTP/"):
        raise ValueError(f"malformed HTTP request line: {start!r}")
    method, target, _ = parts
    host = headers.get("Host")
    if "://" in target:
        url = target
    elif host:
        url = f"http://{host}{target}"
    else:
        url = target
    return HttpRequest(
        method=method,
        url=url,
        headers=headers,
        body=_read_body(headers, body),
        host=host or urlsplit(url).netloc,
        request_uri=target,
    )


def parse_response(data: bytes | str, request: HttpRequest | None = None) -> HttpResponse:
    """Parse a wire-format HTTP response, attaching the request it answers."""
    start, headers, body = _split_message(data)
    parts = start.split(" ", 2)
    if len(parts) < 2 or not parts[0].startswith("HTTP/"):
        raise ValueError(f"malformed HTTP status line: {start!r}")
    code = parts[1].strip()
    if len(code) != 3 or not code.isdigit():
        raise ValueError(f"malformed HTTP status code: {code!r}")
    return HttpResponse(
        status_code=int(code),
        reason=parts[2].strip() if len(parts) == 3 else "",
        proto=parts[0],
        headers=headers,
        body=_read_body(headers, body),
        request=request,
    )