"""
Utils package for shared utilities and cross-cutting concerns.

This package contains decorators, logging utilities, error types, input
validation and result formatters used across the application.
"""

from .decorators import (appsync_resolver, ensure_owner, extract_arguments,
                         require_identity)
from .errors import (ExpenseNotFoundError, ExpenseTrackerError,
                     ForbiddenError, InputValidationError,
                     NoFieldsToUpdateError, UnauthorizedError)
from .logging import (log_error, log_resolver_event, log_resolver_result,
                      setup_logger)
from .responses import APIJSONEncoder, graphql_list, graphql_result
from .validation import parse_input

__all__ = [
    # Decorators
    "appsync_resolver",
    "require_identity",
    "extract_arguments",
    "ensure_owner",
    # Errors
    "ExpenseTrackerError",
    "InputValidationError",
    "NoFieldsToUpdateError",
    "ExpenseNotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    # Logging
    "setup_logger",
    "log_resolver_event",
    "log_resolver_result",
    "log_error",
    # Responses
    "APIJSONEncoder",
    "graphql_result",
    "graphql_list",
    # Validation
    "parse_input",
]
