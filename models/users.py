from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.dynamodb import UserItem, utc_now


class UserProfile(BaseModel):
    """Base model for user profile data."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)  # identity subject claim
    email: Optional[str] = None  # as issued in the identity token, unnormalized
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    created_at: str
    updated_at: str

    @classmethod
    def synthesize(cls, user_id: str, email: Optional[str]) -> "UserProfile":
        """Build an unsaved profile for a user seen for the first time."""
        now = utc_now()
        return cls(user_id=user_id, email=email, created_at=now, updated_at=now)

    def to_dynamodb_item(self) -> UserItem:
        """Convert to DynamoDB item format."""
        return UserItem(**self.model_dump(by_alias=True))

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]) -> Optional["UserProfile"]:
        """Create a UserProfile instance from a DynamoDB item."""
        if not item:
            return None
        return cls.model_validate(item)

    def to_graphql(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class UserProfileUpdate(BaseModel):
    """Model for profile updates - email and timestamps are owned by the server."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None


class UserKey(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1)
