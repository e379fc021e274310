import pytest

from icapeg.consts import DEFAULT_USER_AGENT
from icapeg.httpmsg import (
    Headers,
    HttpMsg,
    HttpRequest,
    HttpResponse,
    parse_request,
    parse_response,
)


def test_headers_are_case_insensitive():
    headers = Headers()
    headers.add("Content-Type", "plain/text")
    assert headers.get("content-type") == "plain/text"
    assert "CONTENT-TYPE" in headers
    assert list(headers) == ["Content-Type"]


def test_headers_add_keeps_all_values_in_order():
    headers = Headers()
    headers.add("Address", "some_address1")
    headers.add("address", "some_address2")
    assert headers.get_all("Address") == ["some_address1", "some_address2"]
    assert headers.get("Address") == "some_address1"


def test_headers_set_replaces_values():
    headers = Headers({"Allow": ["204", "205"]})
    headers.set("allow", "206")
    assert headers.get_all("Allow") == ["206"]
    assert len(headers) == 1


def test_headers_missing_name():
    headers = Headers()
    assert headers.get("Missing") == ""
    assert headers.get_all("Missing") == []
    with pytest.raises(KeyError):
        headers["Missing"]


def test_headers_delete():
    headers = Headers({"Name": "some_name"})
    del headers["NAME"]
    assert "Name" not in headers


def test_escaped_path():
    assert HttpRequest(url="http://someurl.com").escaped_path() == ""
    assert HttpRequest(url="http://someurl.com/a/b").escaped_path() == "/a/b"


def test_request_host_from_url():
    req = HttpRequest(url="http://someurl.com/x")
    assert req.host == "someurl.com"


def test_dump_out_get_without_body():
    req = HttpRequest(method="GET", url="http://someurl.com")
    expected = (
        "GET / HTTP/1.1\r\n"
        "Host: someurl.com\r\n"
        f"User-Agent: {DEFAULT_USER_AGENT}\r\n"
        "Accept-Encoding: gzip\r\n\r\n"
    ).encode()
    assert req.dump_out() == expected


def test_dump_out_post_carries_content_length_and_body():
    req = HttpRequest(method="POST", url="http://someurl.com", body=b"Hello World")
    dumped = req.dump_out()
    assert b"Content-Length: 11\r\n" in dumped
    assert dumped.endswith(b"\r\n\r\nHello World")


def test_request_round_trip():
    req = HttpRequest(
        method="POST",
        url="http://example.com/a?b=1",
        headers=Headers({"X-Test": "1"}),
        body=b"data",
    )
    parsed = parse_request(req.dump_out())
    assert parsed.method == "POST"
    assert parsed.url == "http://example.com/a?b=1"
    assert parsed.request_uri == "/a?b=1"
    assert parsed.host == "example.com"
    assert parsed.headers.get("X-Test") == "1"
    assert parsed.body == b"data"


def test_response_dump_matches_wire_format():
    resp = HttpResponse(
        status_code=200,
        reason="OK",
        proto="HTTP/1.0",
        headers=Headers({"Content-Type": ["plain/text"], "Content-Length": ["11"]}),
        body=b"Hello World",
    )
    assert resp.dump() == (
        b"HTTP/1.0 200 OK\r\n"
        b"Content-Length: 11\r\n"
        b"Content-Type: plain/text\r\n\r\n"
        b"Hello World"
    )


def test_response_reason_defaults_to_standard_phrase():
    resp = HttpResponse(status_code=404)
    assert resp.dump().startswith(b"HTTP/1.1 404 Not Found\r\n")


def test_response_round_trip_keeps_request():
    req = HttpRequest(url="http://someurl.com")
    resp = HttpResponse(status_code=200, reason="OK", headers=Headers({"ETag": "abc"}), body=b"payload")
    parsed = parse_response(resp.dump(), req)
    assert parsed.status_code == 200
    assert parsed.reason == "OK"
    assert parsed.status == "200 OK"
    assert parsed.headers.get("ETag") == "abc"
    assert parsed.body == b"payload"
    assert parsed.request is req


def test_parse_response_chunked_body():
    data = b"HTTP/1.1 200 OK\r\nTransfer-Encoding: chunked\r\n\r\n5\r\nHello\r\n0\r\n\r\n"
    assert parse_response(data).body == b"Hello"


def test_parse_request_rejects_garbage():
    with pytest.raises(ValueError):
        parse_request(b"garbage\r\n\r\n")


def test_parse_response_rejects_bad_status_code():
    with pytest.raises(ValueError):
        parse_response(b"HTTP/1.1 abc OK\r\n\r\n")


def test_http_msg_holds_both_messages():
    req = HttpRequest(url="http://someurl.com")
    resp = HttpResponse(request=req)
    msg = HttpMsg(request=req, response=resp)
    assert msg.request is req
    assert msg.response is resp
    assert HttpMsg().request is None