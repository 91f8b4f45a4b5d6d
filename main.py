"""
Single entry point for the expense tracker GraphQL API.

AppSync can point every resolver at this function; it dispatches on the
parent type and field name of the resolver event to the field's handler.
"""

from handlers import expenses, users
from utils.logging import setup_logger

logger = setup_logger(__name__)

RESOLVERS = {
    ("Mutation", "createExpense"): expenses.create_expense,
    ("Mutation", "updateExpense"): expenses.update_expense,
    ("Mutation", "deleteExpense"): expenses.delete_expense,
    ("Query", "getExpense"): expenses.get_expense,
    ("Query", "expensesByMonth"): expenses.expenses_by_month,
    ("Query", "expensesByDate"): expenses.expenses_by_date,
    ("Query", "allExpensesByMonth"): expenses.all_expenses_by_month,
    ("Query", "getUserProfile"): users.get_user_profile,
    ("Mutation", "updateUserProfile"): users.update_user_profile,
}


class UnknownFieldError(Exception):
    """The event names a field this API does not resolve."""


def graphql_router(event, context):
    """
    Route an AppSync resolver event to its handler.

    Args:
        event: AppSync direct Lambda resolver event
        context: Lambda context object

    Returns:
        Whatever the field's handler returns

    Raises:
        UnknownFieldError: when no handler is registered for the field
    """
    info = event.get("info") or {}
    field = (info.get("parentTypeName"), info.get("fieldName"))

    resolver = RESOLVERS.get(field)
    if resolver is None:
        logger.error("No resolver registered", extra={"field": ".".join(map(str, field))})
        raise UnknownFieldError(f"No resolver for {field[0]}.{field[1]}")

    return resolver(event, context)
