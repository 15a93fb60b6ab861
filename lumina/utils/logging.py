"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- Helper functions for admission and stock-claim logging

Usage:
    from lumina.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    logger.info("Guest verified", extra={"guest_id": "..."})
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def configure_logging(level: int = logging.INFO) -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; existing handlers are replaced.

    Args:
        level: Root log level
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def log_admission_event(
    logger: logging.Logger,
    event: str,
    *,
    session_id: str | None = None,
    guest_id: str | None = None,
    state: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log an admission state-machine event with structured context.

    Args:
        logger: Logger instance
        event: Event name (e.g., "verify", "vote", "issue")
        session_id: Admission session ID if available
        guest_id: Guest directory ID if available
        state: Session state after the event
        result: Outcome (success, rejected, rate_limited, error)
        error: Error code or message if the event failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"event": event}

    if session_id:
        context["session_id"] = session_id
    if guest_id:
        context["guest_id"] = guest_id
    if state:
        context["state"] = state
    if result:
        context["result"] = result
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Admission event: {event}"]
    for key, value in context.items():
        if key != "event":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if result == "error":
        logger.error(message, extra=context)
    elif error:
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)


def log_claim_operation(
    logger: logging.Logger,
    tier_id: str,
    *,
    new_stock: int | None = None,
    session_id: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a stock claim attempt against a ticket tier.

    Args:
        logger: Logger instance
        tier_id: Tier the claim targeted
        new_stock: Stock returned by the claim (-1 when exhausted)
        session_id: Admission session ID if available
        error: Error message if the datastore call failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"tier_id": tier_id}

    if new_stock is not None:
        context["new_stock"] = new_stock
    if session_id:
        context["session_id"] = session_id
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Stock claim: {tier_id}"]
    if new_stock is not None:
        msg_parts.append("result=exhausted" if new_stock < 0 else f"stock={new_stock}")
    if session_id:
        msg_parts.append(f"session={session_id}")
    if error:
        msg_parts.append(f"error={error}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    elif new_stock is not None and new_stock < 0:
        logger.warning(message, extra=context)
    else:
        logger.info(message, extra=context)
