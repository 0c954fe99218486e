"""
HTTP client for the streaming chat endpoint.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from .exceptions import (
    EndpointError,
    LLMError,
    PaymentRequiredError,
    RateLimitError,
    TransportFailure,
)

HTTP_PAYMENT_REQUIRED = 402
HTTP_TOO_MANY_REQUESTS = 429


class ChatClient:
    """Sends a conversation to the chat endpoint and streams back raw bytes."""

    def __init__(
        self,
        config: dict[str, Any],
        api_key: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Validate required configuration parameters
        required_keys = [
            "url", "connect_timeout", "read_timeout", "write_timeout",
            "pool_timeout",
        ]
        for key in required_keys:
            if key not in config:
                raise ValueError(
                    f"Required endpoint configuration parameter '{key}' not found. "
                    "All endpoint parameters must be explicitly configured."
                )

        self.config: dict[str, Any] = config
        self.url: str = config["url"]
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(
                connect=config["connect_timeout"],
                read=config["read_timeout"],
                write=config["write_timeout"],
                pool=config["pool_timeout"],
            ),
            transport=transport,
        )

    async def stream_chat(
        self, messages: list[dict[str, str]], language: str
    ) -> AsyncGenerator[bytes]:
        """
        POST the conversation and yield the response body chunk by chunk.

        Chunks are passed through exactly as the transport delivers them.

        Raises:
            RateLimitError: Endpoint answered 429.
            PaymentRequiredError: Endpoint answered 402.
            EndpointError: Any other non-success status.
            TransportFailure: Network failure while connecting or reading.
        """
        payload = {"messages": messages, "language": language}

        try:
            async with self.client.stream("POST", self.url, json=payload) as response:
                if not response.is_success:
                    await response.aread()
                    raise self._error_for(response)

                async for chunk in response.aiter_bytes():
                    yield chunk

        except httpx.HTTPError as e:
            raise TransportFailure(f"HTTP error: {e!s}") from e

    def _error_for(self, response: httpx.Response) -> LLMError:
        """Map a non-success response to the matching error type."""
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = {}
        if not isinstance(body, dict):
            body = {}

        status = response.status_code
        message = str(body.get("error") or f"Chat endpoint returned status {status}")
        if status == HTTP_TOO_MANY_REQUESTS:
            return RateLimitError(
                message,
                retry_after=_parse_retry_after(response.headers.get("retry-after")),
                status_code=status,
                response_data=body,
            )
        if status == HTTP_PAYMENT_REQUIRED:
            return PaymentRequiredError(message, status_code=status, response_data=body)
        return EndpointError(message, status_code=status, response_data=body)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
