"""
OCI registry error classes.

UnexpectedStatusError is the single error kind produced when a registry
answers with a status the caller did not expect. It is built from the
response by new_unexpected_status_error, which reads a bounded snapshot of
the body and pulls the human-readable message out of a distribution-spec
error payload when there is one.
"""
from __future__ import annotations

import logging
from typing import Container, Optional

import httpx
from pydantic import ValidationError

from .models import ErrorResponse

logger = logging.getLogger(__name__)

# Hard cap on the body snapshot kept on an error (64KB)
MAX_ERROR_BODY_BYTES = 64000

_FIELDS = frozenset({
    "status",
    "status_code",
    "body",
    "request_url",
    "request_method",
    "message",
})


class OciError(Exception):
    """Base class for all errors raised by oci_remotes."""
    pass


class OciTransportError(OciError):
    """
    Network failure talking to a registry.

    Raised when the request never produced a response (connection refused,
    DNS failure, timeouts after retries).
    """
    pass


class UnexpectedStatusError(OciError):
    """
    A registry API request returned with an unexpected HTTP status.

    Attributes:
        status: Status line, e.g. "404 Not Found"
        status_code: Numeric HTTP status code
        body: At most 64,000 bytes of the response body
        request_url: URL of the originating request, "" if unknown
        request_method: Method of the originating request
        message: Last non-empty message from the error payload, "" if none

    Fields are read-only once constructed.
    """

    def __init__(self, status: str, status_code: int, body: bytes = b"",
                 request_url: str = "", request_method: str = "", message: str = ""):
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "status_code", status_code)
        object.__setattr__(self, "body", bytes(body))
        object.__setattr__(self, "request_url", request_url)
        object.__setattr__(self, "request_method", request_method)
        object.__setattr__(self, "message", message)
        super().__init__(str(self))

    def __str__(self) -> str:
        return (f"unexpected status({self.status}) from {self.request_method} "
                f"request to {self.request_url}: {self.message}")

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(status={self.status!r}, status_code={self.status_code!r}, "
                f"request_method={self.request_method!r}, request_url={self.request_url!r}, "
                f"message={self.message!r}, body=<{len(self.body)} bytes>)")

    def __setattr__(self, name, value):
        if name in _FIELDS:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__setattr__(name, value)

    def __delattr__(self, name):
        if name in _FIELDS:
            raise AttributeError(f"{type(self).__name__}.{name} is read-only")
        super().__delattr__(name)

    def __reduce__(self):
        return (type(self), (self.status, self.status_code, self.body,
                             self.request_url, self.request_method, self.message))


def _read_limited(response: httpx.Response, limit: int) -> bytes:
    """Read at most ``limit`` bytes of the body, keeping whatever arrived before a failure."""
    buf = bytearray()
    if limit <= 0:
        return b""
    try:
        for chunk in response.iter_bytes():
            buf.extend(chunk[:limit - len(buf)])
            if len(buf) >= limit:
                break
    except (httpx.StreamError, httpx.RequestError):
        # closed, consumed or broken stream: keep what was read
        pass
    return bytes(buf)


def _status_line(response: httpx.Response) -> str:
    reason = response.reason_phrase
    return f"{response.status_code} {reason}" if reason else str(response.status_code)


def new_unexpected_status_error(response: httpx.Response, *,
                                log: Optional[logging.Logger] = None,
                                limit: int = MAX_ERROR_BODY_BYTES) -> UnexpectedStatusError:
    """
    Create an UnexpectedStatusError from an HTTP response.

    Never raises. A missing or unreadable body, a body that is not a
    distribution-spec error payload, and a missing request all degrade to
    empty fields. A payload that fails to decode is reported once at DEBUG
    level on ``log`` (this module's logger by default).

    Args:
        response: Response that carried the unexpected status
        log: Diagnostic sink for decode failures
        limit: Maximum number of body bytes kept, capped at 64,000

    Returns:
        Fully populated UnexpectedStatusError, ready to raise
    """
    sink = log or logger
    body = _read_limited(response, min(limit, MAX_ERROR_BODY_BYTES))

    message = ""
    if body:
        try:
            message = ErrorResponse.model_validate_json(body).last_message()
        except ValidationError as e:
            sink.debug(f"Unmarshal response body failed: {e}")

    # Response.request raises RuntimeError when no request is attached
    try:
        request = response.request
    except RuntimeError:
        request = None

    request_method = ""
    request_url = ""
    if request is not None:
        request_method = getattr(request, "method", "") or ""
        url = getattr(request, "url", None)
        if url is not None:
            request_url = str(url)

    return UnexpectedStatusError(
        status=_status_line(response),
        status_code=response.status_code,
        body=body,
        request_url=request_url,
        request_method=request_method,
        message=message,
    )


def raise_for_unexpected_status(response: httpx.Response, expected: Container[int], *,
                                log: Optional[logging.Logger] = None) -> httpx.Response:
    """
    Return ``response`` if its status is expected, else raise.

    Raises:
        UnexpectedStatusError: If response.status_code is not in ``expected``
    """
    if response.status_code in expected:
        return response
    raise new_unexpected_status_error(response, log=log)


__all__ = [
    "MAX_ERROR_BODY_BYTES",
    "OciError",
    "OciTransportError",
    "UnexpectedStatusError",
    "new_unexpected_status_error",
    "raise_for_unexpected_status",
]
