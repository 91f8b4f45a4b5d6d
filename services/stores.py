"""
Per-container store instances for the resolver handlers.

Stores are built on first use and reused across warm invocations.
"""

from functools import lru_cache

from services.expenses import ExpenseStore
from services.parameter_store import config
from services.users import UserProfileStore


@lru_cache(maxsize=1)
def get_profile_store() -> UserProfileStore:
    return UserProfileStore(config.load_table_config())


@lru_cache(maxsize=1)
def get_expense_store() -> ExpenseStore:
    return ExpenseStore(config.load_table_config(), profiles=get_profile_store())


def reset_stores() -> None:
    """Drop cached stores so the next call rebuilds them."""
    get_expense_store.cache_clear()
    get_profile_store.cache_clear()
