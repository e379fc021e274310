"""Helpers that build and take apart ICAP wire messages.

Wire text is handled as ``str`` with one character per byte, so string
lengths and offsets equal byte lengths and offsets.
"""

from __future__ import annotations

import re

from .consts import (
    BODY_END_INDICATOR,
    CRLF,
    DOUBLE_CRLF,
    FULL_BODY_END_INDICATOR_PREVIEW_MODE,
    HTTP_VERSION,
    ICAP_VERSION,
    METHOD_OPTIONS,
    METHOD_REQMOD,
    METHOD_RESPMOD,
)

_DOUBLE_CRLF_RE = re.compile(re.escape(DOUBLE_CRLF))
_CHUNKED_END_RE = re.compile(r"\r\n0(\r\n)+\Z")
_INTEGER_RE = re.compile(r"[+-]?\d+")


def get_status_with_code(code: str, text: str) -> tuple[int, str]:
    """Return the status code and the trimmed status text."""
    if not _INTEGER_RE.fullmatch(code):
        raise ValueError(f"invalid status code: {code!r}")
    return int(code), text.strip()


def get_header_val(line: str) -> tuple[str, str]:
    """Split a header line into its name and trimmed value."""
    name, sep, value = line.partition(":")
    return name, value.strip() if sep else ""


def is_request_line(line: str) -> bool:
    """Tell whether a line is the first line of an ICAP or HTTP message."""
    return ICAP_VERSION in line or HTTP_VERSION in line


def _block_ends(text: str) -> list[int]:
    return [match.end() for match in _DOUBLE_CRLF_RE.finditer(text)]


def set_encapsulated_header_value(icap_req: str, http_req: str, http_resp: str) -> str:
    """Fill the ``%s`` placeholder of the ICAP head with the Encapsulated value."""
    value = " "

    if icap_req.startswith(METHOD_OPTIONS):
        value += "null-body=0" if not http_req and not http_resp else "opt-body=0"

    if icap_req.startswith((METHOD_REQMOD, METHOD_RESPMOD)):
        req_ends = _block_ends(http_req)
        req_ends_at = 0
        if req_ends:
            value += "req-hdr=0"
            req_ends_at = req_ends[0]
            if len(req_ends) > 1:
                value += f", req-body={req_ends[0]}"
                req_ends_at = req_ends[1]
            elif not http_resp:
                value += f", null-body={req_ends[0]}"
            if http_resp:
                value += ", "

        resp_ends = _block_ends(http_resp)
        if resp_ends:
            value += f"res-hdr={req_ends_at}"
            kind = "res-body" if len(resp_ends) > 1 else "null-body"
            value += f", {kind}={req_ends_at + resp_ends[0]}"

    return icap_req.replace("%s", value, 1)


def replace_request_uri_with_actual_url(text: str, uri: str, url: str) -> str:
    """Replace the first occurrence of the request URI with the full URL."""
    return text.replace(uri or "/", url, 1)


def add_full_body_in_preview_indicator(text: str) -> str:
    """Mark that the whole body fitted in the preview."""
    return text.removesuffix(DOUBLE_CRLF) + FULL_BODY_END_INDICATOR_PREVIEW_MODE


def split_body_and_header(text: str) -> tuple[str, str] | None:
    """Split an HTTP message into head and body, or None if there is no body."""
    header, sep, body = text.partition(DOUBLE_CRLF)
    if not sep or not body:
        return None
    return header, body


def body_already_chunked(text: str) -> bool:
    """Tell whether the body of an HTTP message is already chunk-encoded."""
    parts = split_body_and_header(text)
    if parts is None:
        return False
    return _CHUNKED_END_RE.search(parts[1]) is not None


def parse_preview_body_bytes(text: str, preview_bytes: int) -> str:
    """Keep only the first ``preview_bytes`` of the message body."""
    parts = split_body_and_header(text)
    if parts is None:
        return text
    header, body = parts
    return header + DOUBLE_CRLF + body[:preview_bytes]


def add_hexa_body_byte_notations(body: str) -> str:
    """Wrap a body as a single chunk followed by the terminating chunk."""
    return f"{len(body):x}{CRLF}{body}{BODY_END_INDICATOR}"


def merge_header_and_body(header: str, body: str) -> str:
    """Join a message head and body."""
    return header + DOUBLE_CRLF + body


def chunk_body_by_bytes(data: bytes, chunk_length: int) -> bytes:
    """Split data into chunks of ``chunk_length`` bytes, each prefixed with its size."""
    if chunk_length <= 0:
        raise ValueError("chunk length must be positive")
    out = bytearray()
    for start in range(0, len(data), chunk_length):
        chunk = data[start:start + chunk_length]
        out += f"{len(chunk):x}\r\n".encode("ascii") + chunk
    out += BODY_END_INDICATOR.encode("ascii")
    return bytes(out)