"""
Services package for data access and external integrations.

This package contains the DynamoDB-backed stores, configuration loading
and identity handling.
"""

from .expenses import ExpenseStore
from .identity import CallerIdentity, CognitoTokenVerifier, identity_from_event
from .users import UserProfileStore

__all__ = [
    "ExpenseStore",
    "UserProfileStore",
    "CallerIdentity",
    "CognitoTokenVerifier",
    "identity_from_event",
]
