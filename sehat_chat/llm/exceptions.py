"""
Error types for chat endpoint operations.

Every failure a chat turn can hit is one of these:
- Rate limiting (HTTP 429) with optional retry guidance
- Payment required (HTTP 402)
- Any other non-success status or structured error body
- Network-level failures while connecting or reading the stream

Malformed stream frames are not errors; the stream decoder recovers from them.
"""

from __future__ import annotations


class LLMError(Exception):
    """Base chat endpoint error with response context."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data or {}


class RateLimitError(LLMError):
    """Rate limit error with retry information."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class PaymentRequiredError(LLMError):
    """The endpoint's workspace has run out of credits."""
    pass


class EndpointError(LLMError):
    """Non-success status or structured error body from the endpoint."""
    pass


class TransportFailure(LLMError):
    """Network-level failure while sending the request or reading the stream."""
    pass
