"""
Models package for data structures and database entities.

This package contains Pydantic models for input validation, GraphQL
records and DynamoDB item representations.
"""

from .dynamodb import DynamoDBItem, ExpenseItem, UserItem
from .expense import (ExpenseBase, ExpenseCreate, ExpenseKey, ExpenseUpdate,
                      MonthQuery, UserDateQuery, UserMonthQuery,
                      derive_index_fields)
from .users import UserKey, UserProfile, UserProfileUpdate

__all__ = [
    "DynamoDBItem",
    "ExpenseItem",
    "UserItem",
    "ExpenseBase",
    "ExpenseCreate",
    "ExpenseUpdate",
    "ExpenseKey",
    "MonthQuery",
    "UserMonthQuery",
    "UserDateQuery",
    "derive_index_fields",
    "UserProfile",
    "UserProfileUpdate",
    "UserKey",
]
