"""Structured logging and OpenTelemetry spans for bintest.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helpers around cargo builds
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "bintest"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for bintest."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for bintest.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


@contextmanager
def build_operation(
    operation: str,
    *,
    argv: list[str] | None = None,
    executable: str | None = None,
    workspace: bool | None = None,
) -> Iterator[Span]:
    """Create a span for a cargo operation with structured logging.

    Args:
        operation: Operation name (e.g., "build").
        argv: Full cargo command line.
        executable: Single binary being built, if any.
        workspace: Whether the whole workspace is built.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with build_operation("build", argv=["cargo", "build"]):
        ...     run_build()
    """
    tracer = get_tracer()
    logger = get_logger()

    attrs: dict[str, Any] = {"cargo.operation": operation}
    if argv:
        attrs["cargo.argv"] = " ".join(argv)
    if executable:
        attrs["cargo.executable"] = executable
    if workspace is not None:
        attrs["cargo.workspace"] = workspace

    name = f"cargo.{operation}"
    with tracer.start_as_current_span(name, kind=SpanKind.INTERNAL, attributes=attrs) as s:
        logger.debug(f"{operation}_started", **attrs)
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
            logger.info(f"{operation}_completed", **attrs)
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            logger.error(f"{operation}_failed", error=str(exc), **attrs)
            raise
