"""
Error types raised by stores and resolvers.

AppSync reports a failed Lambda resolver with the exception class name as
``errorType`` and ``str(exc)`` as ``errorMessage``, so each error carries a
stable message and an application error code.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import ValidationError


class ExpenseTrackerError(Exception):
    """Base class for expected, caller-facing errors."""

    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputValidationError(ExpenseTrackerError):
    """Input failed schema validation. ``errors`` lists every violation."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        super().__init__(
            f"Validation error: {json.dumps(errors)}", {"validation_errors": errors}
        )

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "InputValidationError":
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "input",
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        return cls(errors)


class NoFieldsToUpdateError(ExpenseTrackerError):
    error_code = "VALIDATION_ERROR"

    def __init__(self):
        super().__init__("No fields to update")


class ExpenseNotFoundError(ExpenseTrackerError):
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, user_id: str, expense_id: str):
        super().__init__(
            f"Expense '{expense_id}' not found",
            {"userId": user_id, "expenseId": expense_id},
        )


class UnauthorizedError(ExpenseTrackerError):
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message)


class ForbiddenError(ExpenseTrackerError):
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)
