"""Errors raised by the ICAP client."""

ERR_INVALID_SCHEME = "the url scheme must be icap://"
ERR_METHOD_NOT_REGISTERED = "the requested method is not registered"
ERR_INVALID_HOST = "the requested host is invalid"
ERR_CONNECTION_NOT_OPEN = "no open connection to close"
ERR_INVALID_TCP_MSG = "invalid tcp message"
ERR_REQMOD_WITH_NO_REQ = "http request cannot be nil for method REQMOD"
ERR_REQMOD_WITH_RESP = "http response must be nil for method REQMOD"
ERR_RESPMOD_WITH_NO_RESP = "http response cannot be nil for method RESPMOD"


class IcapError(Exception):
    """A failure of an ICAP client operation."""