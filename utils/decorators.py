"""
Decorators for AppSync Lambda resolver handlers.

This module provides decorators that add consistent logging, error handling,
identity checks and argument extraction to resolver functions.
"""

import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

from .errors import ExpenseTrackerError, ForbiddenError, UnauthorizedError
from .logging import (log_error, log_resolver_event, log_resolver_result,
                      resolver_context, setup_logger)
from .validation import parse_input


def appsync_resolver(
    logger_name: Optional[str] = None,
    log_event: bool = True,
    log_result: bool = True,
    structured_logging: bool = True,
) -> Callable:
    """
    Decorator for AppSync resolver handlers that provides:
    - Consistent logging setup
    - Automatic event/result logging
    - Error logging with invocation context
    - Execution time tracking

    Exceptions are re-raised after logging: AppSync turns a raised exception
    into a GraphQL error with the class name as ``errorType``.

    Args:
        logger_name: Logger name (defaults to function module name)
        log_event: Whether to log incoming events
        log_result: Whether to log results
        structured_logging: Whether to use structured JSON logging

    Returns:
        Decorated function
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Any:
            logger = setup_logger(
                logger_name or func.__module__, structured=structured_logging
            )

            start_time = time.time()

            try:
                if log_event:
                    log_resolver_event(logger, event, context)

                result = func(event, context)

                if log_result:
                    execution_time = (time.time() - start_time) * 1000
                    log_resolver_result(logger, result, execution_time)

                return result

            except ExpenseTrackerError as e:
                logger.warning(
                    f"Resolver rejected request: {e.message}",
                    extra={
                        **resolver_context(event, context),
                        "error_code": e.error_code,
                        "error_type": type(e).__name__,
                    },
                )
                raise

            except Exception as e:
                execution_time = (time.time() - start_time) * 1000
                log_error(
                    logger,
                    e,
                    {
                        **resolver_context(event, context),
                        "execution_time_ms": execution_time,
                    },
                )
                raise

        return wrapper

    return decorator


def require_identity(func: Callable) -> Callable:
    """
    Decorator that ensures the request carries a caller identity.

    The identity is set by AppSync from the Cognito token or from the Lambda
    authorizer's resolver context, and is stored on ``event["auth"]``.

    Raises:
        UnauthorizedError: when the event has no identity
    """

    @wraps(func)
    def wrapper(event: Dict[str, Any], context: Any) -> Any:
        from services.identity import identity_from_event

        identity = identity_from_event(event)
        if identity is None:
            logger = setup_logger(__name__)
            logger.info(
                "Authorization failed - no caller identity found",
                extra={"event_keys": list(event.keys())},
            )
            raise UnauthorizedError()

        event["auth"] = {"user_id": identity.sub, "email": identity.email}
        return func(event, context)

    return wrapper


def extract_arguments(model: type, key: Optional[str] = None) -> Callable:
    """
    Decorator that validates resolver arguments against a model.

    Args:
        model: Pydantic model for the arguments
        key: Argument holding the input object (e.g. ``"input"``); the whole
            ``arguments`` map is validated when omitted

    Returns:
        Decorated function; the validated model is stored on ``event["args"]``
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(event: Dict[str, Any], context: Any) -> Any:
            arguments = event.get("arguments") or {}
            raw = arguments.get(key) if key else arguments
            event["args"] = parse_input(model, raw)
            return func(event, context)

        return wrapper

    return decorator


def ensure_owner(event: Dict[str, Any], user_id: str) -> None:
    """
    Reject callers acting on another user's data.

    Raises:
        ForbiddenError: when ``user_id`` is not the caller's subject
    """
    if event["auth"]["user_id"] != user_id:
        raise ForbiddenError("Access denied: You can only access your own data")
