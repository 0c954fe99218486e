"""
Chat endpoint integration.

This package provides:
- An httpx client that streams the endpoint's raw response bytes
- Status-code mapping to typed errors
- Incremental decoding of the streamed event frames
"""

from __future__ import annotations

from .client import ChatClient
from .exceptions import (
    EndpointError,
    LLMError,
    PaymentRequiredError,
    RateLimitError,
    TransportFailure,
)

__all__ = [
    # Client
    "ChatClient",
    # Exceptions
    "EndpointError",
    "LLMError",
    "PaymentRequiredError",
    "RateLimitError",
    "TransportFailure",
]
