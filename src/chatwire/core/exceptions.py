"""core.exceptions

Centralised exception hierarchy for *chatwire*.

Each error carries an `http_status` attribute so that upper layers (REST API
controllers, FastAPI exception handlers, etc.) can translate exceptions to
appropriate HTTP responses, and a `retryable` flag telling callers whether
repeating the same call may succeed.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping


# ---------------------------------------------------------------------------
# Base class with HTTP status information
# ---------------------------------------------------------------------------


class ChatWireError(Exception):
    """Base class for all *chatwire* domain errors."""

    #: Default HTTP status if not overridden by subclass.
    http_status: ClassVar[HTTPStatus] = HTTPStatus.INTERNAL_SERVER_ERROR
    #: Whether the same call may succeed if repeated unchanged.
    retryable: ClassVar[bool] = False

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__name__)

    def to_json(self) -> dict[str, dict[str, str]]:
        """Unified error body."""
        return {'error': {'type': self.__class__.__name__, 'message': str(self)}}


# ---------------------------------------------------------------------------
# Client setup
# ---------------------------------------------------------------------------


class ConfigError(ChatWireError):
    """Bad client setup: empty credential, invalid option, unsupported model."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST  # 400


class ModelNotSupportedError(ConfigError):
    """Raised when the model registry has no entry for a model id."""


class StreamingUnsupportedError(ChatWireError):
    """Streaming requested against a model or wire format that cannot stream."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST  # 400

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or 'Streaming not supported')


# ---------------------------------------------------------------------------
# Transport / provider outcomes
# ---------------------------------------------------------------------------


class NetworkError(ChatWireError):
    """Transport-level failure (connect, read, timeout)."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_GATEWAY  # 502
    retryable: ClassVar[bool] = True


class RateLimitedError(ChatWireError):
    """Provider answered 429."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.TOO_MANY_REQUESTS  # 429
    retryable: ClassVar[bool] = True


class UnauthenticatedError(ChatWireError):
    """Provider rejected the credential (401)."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.UNAUTHORIZED  # 401


class ContextLengthExceededError(ChatWireError):
    """Request too large for the model's context window."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.REQUEST_ENTITY_TOO_LARGE  # 413


class RemoteError(ChatWireError):
    """Any other non-2xx answer. Keeps the status and body for the caller."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_GATEWAY  # 502

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f'HTTP {status}: {body}')


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class ParseError(ChatWireError):
    """Unrecognised response shape or structured content that fails validation."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_GATEWAY  # 502


class RetryLimitExceededError(ChatWireError):
    """Raised by `with_retry` once every attempt failed with a retryable error."""

    http_status: ClassVar[HTTPStatus] = HTTPStatus.GATEWAY_TIMEOUT  # 504


HTTP_STATUS_MAP: Mapping[type[ChatWireError], HTTPStatus] = {
    cls: cls.http_status
    for cls in (
        ConfigError,
        ModelNotSupportedError,
        StreamingUnsupportedError,
        NetworkError,
        RateLimitedError,
        UnauthenticatedError,
        ContextLengthExceededError,
        RemoteError,
        ParseError,
        RetryLimitExceededError,
    )
}
