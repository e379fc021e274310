# icapeg

A pure-Python toolkit for ICAP (RFC 3507) messages. It can do three things:

- build `OPTIONS`, `REQMOD` and `RESPMOD` requests in their exact wire form
- parse the responses an ICAP server sends back
- load and validate the TOML configuration for the services an ICAP server
  offers

## Installation

```
pip install .
```

The package has no runtime dependencies. To run the tests, install the
`test` extra and run pytest:

```
pip install ".[test]"
pytest
```

## HTTP messages

`icapeg.httpmsg` holds the HTTP messages that travel inside ICAP messages.

- `Headers` is a case-insensitive map in which a header can have several
  values. It remembers how each name was first spelled.
  - `add` appends a value to a header.
  - `set` replaces all of a header's values with one value.
  - `get` returns the first value, or `""` if there is none.
  - `get_all` returns a list of every value.
- `HttpRequest` has the fields `method`, `url`, `headers`, `body`, `host` and
  `request_uri`.
  - `dump_out()` returns the request as a client writes it on the wire.
  - If no `User-Agent` is given, the default `icapeg-http-client` is used.
- `HttpResponse` has the fields `status_code`, `reason`, `proto`, `headers`,
  `body` and `request`. `dump()` returns its wire form.
- `parse_request(data)` and `parse_response(data, request)` read wire-format
  messages. Both understand `Content-Length` and chunked bodies. On malformed
  input they raise `ValueError`.
- `HttpMsg` pairs a request with a response.

## Building ICAP requests

```python
from icapeg.httpmsg import HttpRequest, HttpResponse
from icapeg.request import dump_request, new_request

options = new_request("OPTIONS", "icap://127.0.0.1:1344/respmod", None, None)
print(dump_request(options))
# b'OPTIONS icap://127.0.0.1:1344/respmod ICAP/1.0\r\nEncapsulated:  null-body=0\r\n\r\n'

http_req = HttpRequest(method="GET", url="http://example.com/sample.pdf")
http_resp = HttpResponse(
    status_code=200,
    headers={"Content-Type": "text/plain"},
    body=b"Hello World",
)
req = new_request("RESPMOD", "icap://127.0.0.1:1344/respmod", http_req, http_resp)
req.set_default_request_headers()
req.set_preview(4)
wire = dump_request(req)
```

`new_request(method, url, http_request, http_response)` makes the method
upper case, then validates the request. It raises `icapeg.errors.IcapError`
in these cases:

- the method is unknown
- the URL's scheme is not `icap`
- the URL has no host
- a `REQMOD` has no HTTP request
- a `REQMOD` carries an HTTP response
- a `RESPMOD` has no HTTP response

A `Request` has these methods:

- `validate()` runs the same checks again.
- `set_preview(max_bytes)` sends at most `max_bytes` of the body as a preview.
  - It sets the `Preview` header.
  - It keeps the part of the body that did not fit in
    `remaining_preview_bytes`.
  - It records in `body_fitted_in_preview` whether the whole body fitted.
- `set_default_request_headers()` adds `Allow: 204` and a `Host` header with
  the local host name, if either is missing.
- `extend_header(headers)` merges further headers into the request.
  - It ignores `Encapsulated`.
  - A `Preview` value calls `set_preview`, unless a preview is already set.

`dump_request(request)` returns the request as bytes in its wire form:

- The HTTP bodies are chunk-encoded.
- The `Encapsulated` offsets are computed, unless the request already has an
  explicit `Encapsulated` header.
- When the whole body fitted in the preview, the body is ended with `0; ieof`.

## Reading ICAP responses

```python
from icapeg.response import read_response

resp = read_response(
    b"ICAP/1.0 200 OK\r\n"
    b"Methods: RESPMOD\r\n"
    b"Preview: 24\r\n"
    b"Encapsulated: null-body=0\r\n\r\n"
)
print(resp.status_code, resp.status, resp.preview_bytes)  # 200 OK 24
print(resp.headers.get_all("Methods"))                    # ['RESPMOD']
```

`read_response` takes bytes or text and returns a `Response` with these
fields:

- `status_code` and `status`
- `preview_bytes`
- `headers`
- `content_request` and `content_response`, the encapsulated HTTP messages,
  if the response has any

A malformed status line raises `IcapError`.

## Lower-level helpers

`icapeg.parser` provides the string helpers that the modules above are built
on. They include:

- `set_encapsulated_header_value`
- `add_hexa_body_byte_notations`
- `parse_preview_body_bytes`
- `body_already_chunked`
- `split_body_and_header`
- `chunk_body_by_bytes`

`icapeg.consts` holds the protocol constants, such as methods, header names
and status codes.

## Service configuration

To read the configuration, use one of these:

- `icapeg.config.load_config(path)` reads a TOML file. The default path is
  `config.toml`.
- `parse_config(data)` takes TOML text, bytes or an already parsed mapping.

Both return an `AppConfig`. Its `services_instances` maps each service name
to a `ServiceInfo`. A sample configuration:

```toml
[app]
port = 1344
log_level = "debug"
write_logs_to_console = true
debugging_headers = true
services = ["echo"]

[echo]
vendor = "echo"
service_caption = "echo service"
service_tag = "ECHO"
req_mode = true
resp_mode = true
shadow_service = false
preview_enabled = true
preview_bytes = "1024"
max_filesize = 0
bypass_extensions = []
process_extensions = ["*"]
reject_extensions = []
```

An invalid configuration raises `icapeg.config.ConfigError`. Each of these
counts as invalid:

- a service listed in `services` has no section
- both modes of a service are disabled
- `max_filesize` is negative
- the TOML cannot be parsed
- an extension appears in more than one list
- `"*"` is not the only entry of exactly one extension list

`validate_extensions(service_name, bypass, process, reject)` runs the
extension checks on their own.

## What this package does not do

- It opens no network connections. `dump_request` gives you the bytes to
  send, and `read_response` parses the bytes you receive. The socket is up to
  you, including timeouts and the `100 Continue` exchange for bodies larger
  than the preview.
- It contains no ICAP server. The configuration module only validates and
  describes services; nothing here serves them.