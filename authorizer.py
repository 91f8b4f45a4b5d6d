"""
AppSync Lambda authorizer.

Validates a Cognito ID token and passes the caller's subject and email to
resolvers through ``identity.resolverContext``.
"""

from functools import lru_cache
from typing import Any, Dict

from services.identity import CognitoTokenVerifier
from services.parameter_store import config
from utils.logging import log_error, setup_logger

# Initialize shared resources at module level for optimal Lambda performance
# This avoids re-initialization on warm starts and reduces cold start time
logger = setup_logger(__name__)

# Seconds AppSync may cache an authorization decision
AUTHORIZATION_TTL_SECONDS = 300


@lru_cache(maxsize=1)
def get_verifier() -> CognitoTokenVerifier:
    return CognitoTokenVerifier(config.load_cognito_config())


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AppSync Lambda Authorizer.

    Args:
        event: AppSync authorizer event with ``authorizationToken``
        context: Lambda context object

    Returns:
        Authorization response for AppSync
    """
    request_context = event.get("requestContext") or {}
    logger.info(
        "Authorization request received",
        extra={
            "request_id": getattr(context, "aws_request_id", "unknown"),
            "api_id": request_context.get("apiId"),
            "operation_name": request_context.get("operationName"),
        },
    )

    try:
        token = CognitoTokenVerifier.extract_token(event.get("authorizationToken"))
        if not token:
            logger.warning("Authorization failed: no token supplied.")
            return {"isAuthorized": False}

        identity = get_verifier().validate_token(token)
        if identity is None:
            logger.warning("Authorization failed: token rejected.")
            return {"isAuthorized": False}

        logger.info("User authorized successfully", extra={"sub": identity.sub})

        resolver_context = {"sub": identity.sub}
        if identity.email:
            resolver_context["email"] = identity.email

        return {
            "isAuthorized": True,
            "resolverContext": resolver_context,
            "ttlOverride": AUTHORIZATION_TTL_SECONDS,
        }

    except Exception as e:
        log_error(logger, e, {"api_id": request_context.get("apiId")})
        return {"isAuthorized": False}
