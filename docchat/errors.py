"""Error taxonomy shared by the gateway, the client and the question flow.

Every upstream failure is re-raised as one of these kinds. The upstream
payload, when there is one, travels in ``details`` and is meant for logs;
``message`` is short and safe to show to a user.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Stable identifiers for error kinds, used on the wire."""

    INVALID_INPUT = "invalid_input"
    UNSUPPORTED_TYPE = "unsupported_type"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    UPSTREAM_ERROR = "upstream_error"
    GENERATION_FAILED = "generation_failed"
    INTERNAL_ERROR = "internal_error"


class GatewayError(Exception):
    """Base class for all normalized errors.

    Attributes:
        message: User-readable description.
        details: Optional diagnostic payload (upstream body, validation errors).
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON error body returned by the gateway."""
        body: dict[str, Any] = {"error": self.message, "kind": self.kind.value}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(GatewayError):
    """Missing or malformed request fields, or an oversized upload."""

    kind = ErrorKind.INVALID_INPUT
    status_code = 400


class CycleInProgress(InvalidInput):
    """A question was submitted while another one is still being answered."""


class UnsupportedType(GatewayError):
    """Upload MIME type is not accepted."""

    kind = ErrorKind.UNSUPPORTED_TYPE
    status_code = 400


class UpstreamTimeout(GatewayError):
    kind = ErrorKind.UPSTREAM_TIMEOUT
    status_code = 504


class UpstreamError(GatewayError):
    """Upstream answered with a non-2xx status or an unusable body."""

    kind = ErrorKind.UPSTREAM_ERROR
    status_code = 502


class GenerationFailed(GatewayError):
    """The language model call failed, for whatever reason."""

    kind = ErrorKind.GENERATION_FAILED
    status_code = 502


class InternalError(GatewayError):
    kind = ErrorKind.INTERNAL_ERROR
    status_code = 500


_ERRORS_BY_KIND: dict[ErrorKind, type[GatewayError]] = {
    ErrorKind.INVALID_INPUT: InvalidInput,
    ErrorKind.UNSUPPORTED_TYPE: UnsupportedType,
    ErrorKind.UPSTREAM_TIMEOUT: UpstreamTimeout,
    ErrorKind.UPSTREAM_ERROR: UpstreamError,
    ErrorKind.GENERATION_FAILED: GenerationFailed,
    ErrorKind.INTERNAL_ERROR: InternalError,
}


def error_for_kind(kind: str | None, status_code: int) -> type[GatewayError]:
    """Pick the error class for a gateway error body.

    Uses the ``kind`` field when it is known, otherwise falls back to the
    HTTP status code.

    Args:
        kind: Value of the ``kind`` field, if present.
        status_code: HTTP status of the response.

    Returns:
        The matching GatewayError subclass.
    """
    if kind is not None:
        try:
            return _ERRORS_BY_KIND[ErrorKind(kind)]
        except ValueError:
            pass

    if status_code == 504:
        return UpstreamTimeout
    if 400 <= status_code < 500:
        return InvalidInput
    if status_code in (502, 503):
        return UpstreamError
    return InternalError
