"""
Expense resolvers for the expense tracker GraphQL API.

Each resolver validates its arguments, checks that the caller owns the
expenses it names, and performs one store operation:
- Mutation.createExpense / updateExpense / deleteExpense
- Query.getExpense / expensesByMonth / expensesByDate / allExpensesByMonth
"""

from models.expense import (ExpenseCreate, ExpenseKey, ExpenseUpdate,
                            MonthQuery, UserDateQuery, UserMonthQuery)
from services.stores import get_expense_store
from utils.decorators import (appsync_resolver, ensure_owner,
                              extract_arguments, require_identity)
from utils.responses import graphql_list, graphql_result


@appsync_resolver()
@require_identity
@extract_arguments(ExpenseCreate, "input")
def create_expense(event, context):
    """
    Create a new expense for the caller.

    Mutation.createExpense(input: CreateExpenseInput!): Expense!

    The server assigns expenseId, monthKey and createdAt.

    Args:
        event: AppSync resolver event with the expense input
        context: Lambda context object

    Returns:
        The stored expense
    """
    expense_input = event["args"]
    ensure_owner(event, expense_input.user_id)

    return graphql_result(get_expense_store().create(expense_input))


@appsync_resolver()
@require_identity
@extract_arguments(ExpenseUpdate, "input")
def update_expense(event, context):
    """
    Update some fields of an existing expense.

    Mutation.updateExpense(input: UpdateExpenseInput!): Expense!
    """
    update = event["args"]
    ensure_owner(event, update.user_id)

    return graphql_result(get_expense_store().update(update))


@appsync_resolver()
@require_identity
@extract_arguments(ExpenseKey, "input")
def delete_expense(event, context):
    """
    Delete an expense. Deleting an expense that does not exist succeeds.

    Mutation.deleteExpense(input: DeleteExpenseInput!): Boolean!
    """
    key = event["args"]
    ensure_owner(event, key.user_id)

    return get_expense_store().delete(key.user_id, key.expense_id)


@appsync_resolver()
@require_identity
@extract_arguments(ExpenseKey)
def get_expense(event, context):
    """
    Get a specific expense, or null when it does not exist.

    Query.getExpense(userId: ID!, expenseId: ID!): Expense
    """
    key = event["args"]
    ensure_owner(event, key.user_id)

    return graphql_result(get_expense_store().get(key.user_id, key.expense_id))


@appsync_resolver()
@require_identity
@extract_arguments(UserMonthQuery)
def expenses_by_month(event, context):
    """
    List the caller's expenses for a month, oldest first, with the owner's profile.

    Query.expensesByMonth(userId: ID!, month: String!): [Expense!]!
    """
    query = event["args"]
    ensure_owner(event, query.user_id)

    return graphql_list(
        get_expense_store().list_by_user_month(query.user_id, query.month)
    )


@appsync_resolver()
@require_identity
@extract_arguments(UserDateQuery)
def expenses_by_date(event, context):
    """Query.expensesByDate(userId: ID!, date: String!): [Expense!]!"""
    query = event["args"]
    ensure_owner(event, query.user_id)

    return graphql_list(get_expense_store().find_by_user_date(query.user_id, query.date))


@appsync_resolver()
@require_identity
@extract_arguments(MonthQuery)
def all_expenses_by_month(event, context):
    """
    List every user's expenses for a month, oldest first, each with its
    owner's profile. Open to any signed-in caller.

    Query.allExpensesByMonth(month: String!): [Expense!]!
    """
    return graphql_list(get_expense_store().list_all_by_month(event["args"].month))
