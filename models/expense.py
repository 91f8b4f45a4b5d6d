"""Expense model objects and derived index keys for the expense tracker."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.dynamodb import (ExpenseItem, format_timestamp, parse_timestamp,
                             utc_now)
from models.users import UserProfile

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
DATE_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$"
CURRENCY_PATTERN = r"^[A-Za-z]{3}$"

# Attributes an update may change, in the order they are written
MUTABLE_FIELDS = ("amount_minor", "currency", "category", "note", "occurred_at")


def compute_month_key(occurred_at: datetime) -> str:
    """UTC year-month bucket of a timestamp, e.g. ``2025-10``."""
    return occurred_at.astimezone(timezone.utc).strftime("%Y-%m")


def to_utc(occurred_at: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware timestamp to UTC; years 1 and 9999 can overflow."""
    if occurred_at is None:
        return None
    try:
        return occurred_at.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError("timestamp is out of range once converted to UTC") from e


def generate_expense_id(occurred_at: datetime) -> str:
    """Build ``<UTC date>#<uuid4>`` so same-day expenses share a key prefix."""
    date_prefix = occurred_at.astimezone(timezone.utc).strftime("%Y-%m-%d")
    return f"{date_prefix}#{uuid.uuid4()}"


def derive_index_fields(user_id: str, occurred_at: datetime) -> Dict[str, str]:
    """
    Compute every attribute that depends on ``occurredAt``.

    This is the only place the month bucket and the GSI1 keys are derived;
    create, update and the backfill all write its result as one unit.

    Args:
        user_id: Owner of the expense
        occurred_at: Timezone-aware occurrence timestamp

    Returns:
        Attribute map with occurredAt, monthKey, GSI1PK and GSI1SK
    """
    occurred = format_timestamp(occurred_at)
    month_key = compute_month_key(occurred_at)
    return {
        "occurredAt": occurred,
        "monthKey": month_key,
        "GSI1PK": f"{user_id}#{month_key}",
        "GSI1SK": occurred,
    }


class ExpenseBase(BaseModel):
    """A stored expense as returned to GraphQL callers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    expense_id: str
    user_id: str
    amount_minor: int
    currency: str
    category: str
    note: Optional[str] = None
    occurred_at: str
    month_key: str
    created_at: str
    user: Optional[UserProfile] = None

    def to_dynamodb_item(self) -> ExpenseItem:
        """Convert to DynamoDB item format, re-deriving the index fields."""
        return ExpenseItem(
            userId=self.user_id,
            expenseId=self.expense_id,
            amountMinor=self.amount_minor,
            currency=self.currency,
            category=self.category,
            note=self.note,
            createdAt=self.created_at,
            **derive_index_fields(self.user_id, parse_timestamp(self.occurred_at)),
        )

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> Optional["ExpenseBase"]:
        """Create an ExpenseBase instance from a DynamoDB item."""
        if not item:
            return None
        # GSI1PK/GSI1SK are storage details and are dropped here
        return cls.model_validate(item)

    def to_graphql(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExpenseCreate(BaseModel):
    """Model for creating new expenses - excludes server-assigned fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    amount_minor: int = Field(..., gt=0, strict=True)
    currency: str = Field(..., pattern=CURRENCY_PATTERN)
    category: str = Field(..., min_length=1)
    note: Optional[str] = None
    occurred_at: AwareDatetime

    @field_validator("currency")
    @classmethod
    def currency_must_be_upper_case(cls, v):
        return v.upper() if v is not None else v

    @field_validator("occurred_at")
    @classmethod
    def occurred_at_must_fit_in_utc(cls, v):
        return to_utc(v)

    def to_expense(self) -> ExpenseBase:
        """Assign the expense ID, month bucket and creation time."""
        index = derive_index_fields(self.user_id, self.occurred_at)
        return ExpenseBase(
            expense_id=generate_expense_id(self.occurred_at),
            user_id=self.user_id,
            amount_minor=self.amount_minor,
            currency=self.currency,
            category=self.category,
            note=self.note,
            occurred_at=index["occurredAt"],
            month_key=index["monthKey"],
            created_at=utc_now(),
        )


class ExpenseUpdate(BaseModel):
    """Model for partial updates. Fields left out (or null) are not touched."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    expense_id: str = Field(..., min_length=1)
    amount_minor: Optional[int] = Field(None, gt=0, strict=True)
    currency: Optional[str] = Field(None, pattern=CURRENCY_PATTERN)
    category: Optional[str] = Field(None, min_length=1)
    note: Optional[str] = None
    occurred_at: Optional[AwareDatetime] = None

    @field_validator("currency")
    @classmethod
    def currency_must_be_upper_case(cls, v):
        return v.upper() if v is not None else v

    @field_validator("occurred_at")
    @classmethod
    def occurred_at_must_fit_in_utc(cls, v):
        return to_utc(v)

    def changes(self) -> Dict[str, Any]:
        """
        Attribute values to SET, keyed by DynamoDB attribute name.

        Supplying occurredAt brings monthKey, GSI1PK and GSI1SK along with it.
        """
        attributes: Dict[str, Any] = {}
        for field in MUTABLE_FIELDS:
            value = getattr(self, field)
            if value is None:
                continue
            if field == "occurred_at":
                attributes.update(derive_index_fields(self.user_id, value))
            else:
                attributes[to_camel(field)] = value
        return attributes


class ExpenseKey(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    expense_id: str = Field(..., min_length=1)


class MonthQuery(BaseModel):
    month: str = Field(..., pattern=MONTH_PATTERN)


class UserMonthQuery(MonthQuery):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)


class UserDateQuery(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=DATE_PATTERN)
