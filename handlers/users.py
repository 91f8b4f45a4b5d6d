"""
User profile resolvers for the expense tracker GraphQL API.

Profiles are created lazily: reading a profile that was never saved returns
one seeded from the caller's email claim, and the first update stores it.
"""

from models.users import UserKey, UserProfileUpdate
from services.stores import get_profile_store
from utils.decorators import (appsync_resolver, ensure_owner,
                              extract_arguments, require_identity)
from utils.responses import graphql_result


@appsync_resolver()
@require_identity
@extract_arguments(UserKey)
def get_user_profile(event, context):
    """
    Get the caller's profile.

    Query.getUserProfile(userId: ID!): User

    Args:
        event: AppSync resolver event (with the caller identity)
        context: Lambda context object

    Returns:
        The stored profile, or a new unsaved one for a first-time user
    """
    key = event["args"]
    ensure_owner(event, key.user_id)

    profile = get_profile_store().get_or_create(key.user_id, event["auth"]["email"])
    return graphql_result(profile)


@appsync_resolver()
@require_identity
@extract_arguments(UserProfileUpdate, "input")
def update_user_profile(event, context):
    """
    Save the caller's profile, keeping the stored email and creation time.

    Mutation.updateUserProfile(input: UpdateUserProfileInput!): User!
    """
    update = event["args"]
    ensure_owner(event, update.user_id)

    profile = get_profile_store().upsert(update, event["auth"]["email"])
    return graphql_result(profile)
