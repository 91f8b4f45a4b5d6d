"""DynamoDB data models for the expense tracker."""

from datetime import datetime, timezone

from pydantic import BaseModel


class DynamoDBItem(BaseModel):
    """Base class for all DynamoDB items."""

    userId: str


class ExpenseItem(DynamoDBItem):
    """Represents an expense item in the expenses table."""

    userId: str  # partition key
    expenseId: str  # sort key, {YYYY-MM-DD}#{uuid}
    amountMinor: int  # minor currency units
    currency: str
    category: str
    note: str | None = None
    occurredAt: str  # UTC, Z-suffixed
    monthKey: str  # YYYY-MM
    createdAt: str
    GSI1PK: str  # {userId}#{monthKey}
    GSI1SK: str  # occurredAt


class UserItem(DynamoDBItem):
    """Represents a user profile item in the users table."""

    userId: str  # partition key, identity subject
    email: str | None = None  # EmailIndex hash key
    firstName: str | None = None
    lastName: str | None = None
    dateOfBirth: str | None = None
    address: str | None = None
    phone: str | None = None
    createdAt: str
    updatedAt: str


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as the stored UTC form, e.g. 2025-10-15T12:00:00.000Z."""
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def parse_timestamp(value: str) -> datetime:
    """Parse a stored ISO-8601 timestamp. Naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> str:
    return format_timestamp(datetime.now(timezone.utc))
