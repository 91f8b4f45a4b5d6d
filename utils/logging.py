"""
Centralized logging configuration for the expense tracker backend.

This module provides consistent logging setup across all Lambda functions
with proper formatting, log levels, and structured logging capabilities.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_ATTRIBUTES = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured JSON logs for better CloudWatch parsing.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add any extra fields from the log record
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRIBUTES:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logger(
    name: str, level: Optional[str] = None, structured: bool = True
) -> logging.Logger:
    """
    Set up a logger with consistent configuration.

    Args:
        name: Logger name (typically __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to
            the LOG_LEVEL environment variable, then INFO
        structured: Whether to use structured JSON logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper()))

    handler = logging.StreamHandler(sys.stdout)

    if structured:
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def resolver_context(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Identify an AppSync invocation for log records."""
    info = event.get("info") or {}
    identity = event.get("identity") or {}
    return {
        "request_id": getattr(context, "aws_request_id", "unknown"),
        "function_name": getattr(context, "function_name", "unknown"),
        "parent_type": info.get("parentTypeName"),
        "field_name": info.get("fieldName"),
        "caller_sub": identity.get("sub")
        or (identity.get("resolverContext") or {}).get("sub"),
    }


def log_resolver_event(
    logger: logging.Logger, event: Dict[str, Any], context: Any
) -> None:
    """
    Log AppSync resolver invocation details in a structured way.

    Argument values are not logged; only their names are.

    Args:
        logger: Logger instance
        event: AppSync direct Lambda resolver event
        context: Lambda context
    """
    arguments = event.get("arguments") or {}
    logger.info(
        "Resolver invocation started",
        extra={
            **resolver_context(event, context),
            "function_version": getattr(context, "function_version", "unknown"),
            "remaining_time_ms": getattr(
                context, "get_remaining_time_in_millis", lambda: 0
            )(),
            "argument_names": sorted(arguments.keys()),
        },
    )


def log_resolver_result(
    logger: logging.Logger,
    result: Any,
    execution_time_ms: Optional[float] = None,
) -> None:
    """
    Log resolver result details.

    Args:
        logger: Logger instance
        result: Value returned to AppSync
        execution_time_ms: Execution time in milliseconds
    """
    if isinstance(result, list):
        result_size = len(result)
    else:
        result_size = 0 if result is None else 1

    logger.info(
        "Resolver invocation completed",
        extra={
            "execution_time_ms": execution_time_ms,
            "result_type": type(result).__name__,
            "result_size": result_size,
        },
    )


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log errors with additional context.

    Args:
        logger: Logger instance
        error: Exception that occurred
        context: Additional context information
    """
    extra = {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }

    if context:
        extra.update(context)

    logger.error(f"Error occurred: {str(error)}", extra=extra, exc_info=True)
