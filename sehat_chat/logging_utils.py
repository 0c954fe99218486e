"""
Centralized logging and error handling utilities for the chat client.

This module provides helpers to standardize logging and error reporting
across a chat turn, so every failure ends up as the same kind of log record
and the same kind of user-facing notice.

Features:
- Structured logging with contextual information
- Error classification into user-facing notice categories
- Performance timing for chat operations
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog

from .content import NoticeKind
from .llm.exceptions import (
    EndpointError,
    PaymentRequiredError,
    RateLimitError,
    TransportFailure,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


class ChatErrorHandler:
    """Maps chat failures to notice categories with structured logging."""

    @staticmethod
    def classify_error(error: Exception) -> tuple[NoticeKind, str]:
        """
        Classify an error and return the notice to show and a log category.

        Args:
            error: The exception to classify

        Returns:
            Tuple of (notice_kind, error_category)
        """
        if isinstance(error, RateLimitError):
            return NoticeKind.RATE_LIMITED, "rate_limited"
        if isinstance(error, PaymentRequiredError):
            return NoticeKind.PAYMENT_REQUIRED, "payment_required"
        if isinstance(error, EndpointError):
            return NoticeKind.ERROR, "endpoint_error"
        if isinstance(error, TimeoutError | httpx.TimeoutException):
            return NoticeKind.ERROR, "timeout_error"
        if isinstance(error, TransportFailure):
            if isinstance(error.__cause__, httpx.TimeoutException):
                return NoticeKind.ERROR, "timeout_error"
            return NoticeKind.ERROR, "transport_failure"
        if isinstance(error, httpx.HTTPError | ConnectionError | OSError):
            return NoticeKind.ERROR, "transport_failure"
        return NoticeKind.ERROR, "unknown_error"

    @staticmethod
    def log_error(
        error: Exception,
        operation: str,
        context: dict[str, Any] | None = None,
    ) -> NoticeKind:
        """
        Log a classified error with context and return its notice kind.

        Args:
            error: Original exception
            operation: Description of the operation that failed
            context: Additional context for logging

        Returns:
            The notice category the user should see
        """
        notice_kind, error_category = ChatErrorHandler.classify_error(error)
        status_code = getattr(error, "status_code", None)

        logger.warning(
            "Chat turn failed",
            operation=operation,
            error_type=type(error).__name__,
            error_category=error_category,
            status_code=status_code,
            error_message=str(error),
            **(context or {}),
        )
        return notice_kind


@asynccontextmanager
async def operation_context(
    operation: str,
    *,
    context: dict[str, Any] | None = None,
    log_timing: bool = True,
    handled: tuple[type[Exception], ...] = (),
):
    """
    Async context manager for operation logging and error handling.

    Args:
        operation: Description of the operation
        context: Additional context for logging
        log_timing: Whether to log operation timing
        handled: Exception types the caller logs itself; re-raised without a record

    Yields:
        Bound logger for the operation
    """
    operation_logger = logger.bind(
        operation=operation,
        **(context or {}),
    )

    operation_logger.info("Operation started")
    start_time = time.perf_counter() if log_timing else None

    try:
        yield operation_logger

        # Log success
        log_data: dict[str, Any] = {}
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            log_data["duration_ms"] = duration

        operation_logger.info("Operation completed successfully", **log_data)

    except handled:
        raise
    except Exception as e:
        # Log failure
        error_log_data: dict[str, Any] = {
            "error_type": type(e).__name__,
            "error_message": str(e),
        }
        if log_timing and start_time is not None:
            duration = round((time.perf_counter() - start_time) * 1000, 2)
            error_log_data["duration_ms"] = duration

        operation_logger.error("Operation failed", **error_log_data)
        raise
