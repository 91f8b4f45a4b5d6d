"""
Handlers package for AppSync Lambda resolvers.

This package contains one resolver per GraphQL field for expense and user
profile operations.
"""

from . import expenses, users

__all__ = ["expenses", "users"]
