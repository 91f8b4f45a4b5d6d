"""
User profile store for the expense tracker.

Profiles live in the users table keyed by ``userId`` (the identity subject),
with an ``EmailIndex`` secondary index keyed by ``email``.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import botocore

from models.dynamodb import utc_now
from models.users import UserKey, UserProfile, UserProfileUpdate
from services.dynamodb import (get_dynamodb_resource, iterate_pages,
                               log_client_error)
from services.parameter_store import TableConfig
from utils.validation import parse_input

logger = logging.getLogger(__name__)

# BatchGetItem accepts at most 100 keys per request
BATCH_GET_LIMIT = 100


class UserProfileStore:
    """
    Encapsulates operations on the Amazon DynamoDB users table.
    """

    def __init__(self, table_config: TableConfig, dynamodb_resource=None):
        """
        :param table_config: Table and index names.
        :param dynamodb_resource: boto3 DynamoDB resource; the shared one by default.
        """
        self.resource = dynamodb_resource or get_dynamodb_resource()
        self.table = self.resource.Table(table_config.users_table)
        self.email_index = table_config.users_email_index

    def get(self, user_id: str) -> Optional[UserProfile]:
        """
        Gets a stored profile.

        :param user_id: The identity subject of the user.
        :return: The profile if stored, None otherwise.
        """
        try:
            response = self.table.get_item(Key={"userId": user_id})
        except botocore.exceptions.ClientError as err:
            log_client_error(err, "get user", self.table.name, user_id=user_id)
            raise

        return UserProfile.from_dynamodb_item(response.get("Item"))

    def get_or_create(
        self, user_id: str, email_from_identity: Optional[str] = None
    ) -> UserProfile:
        """
        Gets a profile, synthesizing one for a first-time user.

        The synthesized profile is not written; it is persisted by the first
        call to :meth:`upsert`.

        :param user_id: The identity subject of the user.
        :param email_from_identity: Email claim of the caller's token.
        :return: The stored or synthesized profile.
        """
        key = parse_input(UserKey, {"userId": user_id})
        profile = self.get(key.user_id)
        if profile is None:
            logger.info("No stored profile, returning a new one for %s", key.user_id)
            return UserProfile.synthesize(key.user_id, email_from_identity)
        return profile

    def upsert(
        self,
        data: Union[UserProfileUpdate, Mapping[str, Any]],
        email_from_identity: Optional[str] = None,
    ) -> UserProfile:
        """
        Writes a full profile from the supplied input.

        ``email`` and ``createdAt`` are carried over from the stored record
        when there is one; every other field takes the input value, so fields
        left out of the input are cleared.

        :param data: Profile input.
        :param email_from_identity: Email used when no profile is stored yet.
        :return: The profile as written.
        """
        update = parse_input(UserProfileUpdate, data)
        existing = self.get(update.user_id)

        now = utc_now()
        profile = UserProfile(
            **update.model_dump(),
            email=existing.email if existing and existing.email else email_from_identity,
            created_at=existing.created_at if existing else now,
            updated_at=now,
        )

        try:
            self.table.put_item(
                Item=profile.to_dynamodb_item().model_dump(exclude_none=True)
            )
        except botocore.exceptions.ClientError as err:
            log_client_error(err, "put user", self.table.name, user_id=update.user_id)
            raise

        return profile

    def batch_get(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
        """
        Fetches many profiles with BatchGetItem.

        Keys DynamoDB reports as unprocessed are logged and left out of the
        result; there is no retry.

        :param user_ids: User IDs, duplicates allowed.
        :return: Mapping of userId to profile for every profile found.
        """
        unique_ids: List[str] = list(dict.fromkeys(user_ids))
        profiles: Dict[str, UserProfile] = {}

        for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
            chunk = unique_ids[start : start + BATCH_GET_LIMIT]
            try:
                response = self.resource.batch_get_item(
                    RequestItems={
                        self.table.name: {"Keys": [{"userId": u} for u in chunk]}
                    }
                )
            except botocore.exceptions.ClientError as err:
                log_client_error(
                    err, "batch get users", self.table.name, user_count=len(chunk)
                )
                raise

            for item in response.get("Responses", {}).get(self.table.name, []):
                profile = UserProfile.from_dynamodb_item(item)
                profiles[profile.user_id] = profile

            unprocessed = response.get("UnprocessedKeys", {}).get(self.table.name)
            if unprocessed:
                logger.warning(
                    "Batch get left %d user keys unprocessed",
                    len(unprocessed.get("Keys", [])),
                )

        return profiles

    def find_by_email(self, email: str) -> Optional[UserProfile]:
        """
        Gets a profile by email through the email index.

        :param email: The email address to search for.
        :return: The first matching profile, None if there is none.
        """
        try:
            for item in iterate_pages(
                self.table.query,
                IndexName=self.email_index,
                KeyConditionExpression="#email = :email",
                ExpressionAttributeNames={"#email": "email"},
                ExpressionAttributeValues={":email": email},
            ):
                return UserProfile.from_dynamodb_item(item)
        except botocore.exceptions.ClientError as err:
            log_client_error(err, "query users by email", self.table.name, email=email)
            raise

        return None
