"""Protocol constants shared by the ICAP server and client code."""

# ICAP protocol modes
ICAP_MODE_RESP = "RESPMOD"
ICAP_MODE_OPTIONS = "OPTIONS"
ICAP_MODE_REQ = "REQMOD"

# Sample severities
SAMPLE_SEVERITY_OK = "ok"
SAMPLE_SEVERITY_MALICIOUS = "malicious"

# Common values
UNKNOWN = "unknown"
ANY = "*"
NO_MODIFICATION_STATUS_CODE = 204
BAD_REQUEST_STATUS_CODE = 400
OK_STATUS_CODE = 200
INTERNAL_SERVER_ERR_STATUS_CODE = 500
CONTINUE = 100
REQUEST_TIMEOUT_STATUS_CODE = 408
METHOD_NOT_ALLOWED_FOR_SERVICE_CODE = 405
ICAP_SERVICE_NOT_FOUND_CODE = 404
HEADER_ENCAPSULATED = "Encapsulated"
ICAP_PREFIX = "icap_"
NO_VENDOR = "none"
CONTENT_LENGTH = "Content-Length"
CONTENT_TYPE = "Content-Type"
HTML_CONTENT_TYPE = "text/html"
PROCESS_EXTS = "process"
REJECT_EXTS = "reject"
BYPASS_EXTS = "bypass"
BLOCK_PAGE_PATH = "block-page.html"

# ICAP request methods understood by the client
METHOD_OPTIONS = "OPTIONS"
METHOD_RESPMOD = "RESPMOD"
METHOD_REQMOD = "REQMOD"

REGISTERED_METHODS = frozenset({METHOD_OPTIONS, METHOD_RESPMOD, METHOD_REQMOD})

# Wire-level constants
SCHEME_ICAP = "icap"
ICAP_VERSION = "ICAP/1.0"
HTTP_VERSION = "HTTP/1.1"
SCHEME_HTTP_REQ = "http_request"
SCHEME_HTTP_RESP = "http_response"
CRLF = "\r\n"
DOUBLE_CRLF = "\r\n\r\n"
LF = "\n"
BODY_END_INDICATOR = CRLF + "0" + CRLF
FULL_BODY_END_INDICATOR_PREVIEW_MODE = "; ieof" + DOUBLE_CRLF
ICAP_100_CONTINUE_MSG = "ICAP/1.0 100 Continue" + DOUBLE_CRLF
ICAP_204_NO_MODS_MSG = "ICAP/1.0 204 No modifications"
DEFAULT_CHUNK_LENGTH = 512
DEFAULT_TIMEOUT = 15.0  # seconds

DEFAULT_USER_AGENT = "icapeg-http-client"

# Common ICAP headers
PREVIEW_HEADER = "Preview"
METHODS_HEADER = "Methods"
ALLOW_HEADER = "Allow"
ENCAPSULATED_HEADER = "Encapsulated"
TRANSFER_PREVIEW_HEADER = "Transfer-Preview"
SERVICE_HEADER = "Service"
ISTAG_HEADER = "ISTag"
OPT_BODY_TYPE_HEADER = "Opt-body-type"
MAX_CONNECTIONS_HEADER = "Max-Connections"
OPTIONS_TTL_HEADER = "Options-TTL"
SERVICE_ID_HEADER = "Service-ID"
TRANSFER_IGNORE_HEADER = "Transfer-Ignore"
TRANSFER_COMPLETE_HEADER = "Transfer-Complete"