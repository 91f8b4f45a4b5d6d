"""
Caller identity for resolvers and Cognito ID token verification for the
AppSync Lambda authorizer.
"""

import logging
from typing import Any, Dict, Optional

import jwt
from jwt.exceptions import ExpiredSignatureError, PyJWTError
from pydantic import BaseModel

from services.parameter_store import CognitoConfig

logger = logging.getLogger(__name__)


class CallerIdentity(BaseModel):
    """The authenticated caller: ``sub`` is the canonical userId."""

    sub: str
    email: Optional[str] = None


def identity_from_event(event: Dict[str, Any]) -> Optional[CallerIdentity]:
    """
    Read the caller identity AppSync attached to a resolver event.

    Handles both Cognito user pool authorization (``identity.sub`` and
    ``identity.claims``) and Lambda authorization (``identity.resolverContext``).

    Args:
        event: AppSync direct Lambda resolver event

    Returns:
        The caller identity, None when the event carries none
    """
    identity = event.get("identity") or {}
    resolver_context = identity.get("resolverContext") or {}
    claims = identity.get("claims") or {}

    sub = identity.get("sub") or resolver_context.get("sub")
    if not sub:
        return None

    return CallerIdentity(
        sub=sub, email=claims.get("email") or resolver_context.get("email")
    )


class CognitoTokenVerifier:
    """Verifies Cognito ID tokens against the user pool's published keys."""

    def __init__(
        self, cognito_config: CognitoConfig, jwk_client: Optional[jwt.PyJWKClient] = None
    ):
        self.config = cognito_config
        self.jwk_client = jwk_client or jwt.PyJWKClient(cognito_config.jwks_url)

    def validate_token(self, token: str) -> Optional[CallerIdentity]:
        """
        Validate a Cognito ID token and return the caller it identifies

        Args:
            token: The raw JWT

        Returns:
            The caller identity if the token is valid, None otherwise
        """
        try:
            signing_key = self.jwk_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.config.app_client_id,
                issuer=self.config.issuer,
                options={"require": ["sub", "exp", "iat"]},
            )
        except ExpiredSignatureError:
            logger.warning("JWT token has expired")
            return None
        except PyJWTError as e:
            logger.warning(f"Invalid JWT token: {str(e)}")
            return None

        if payload.get("token_use") != "id":
            logger.warning("Rejected token with token_use %s", payload.get("token_use"))
            return None

        logger.info(f"Successfully validated token for subject: {payload['sub']}")
        return CallerIdentity(sub=payload["sub"], email=payload.get("email"))

    @staticmethod
    def extract_token(authorization: Optional[str]) -> Optional[str]:
        """
        Extract the JWT from an Authorization value.

        The web client sends the bare ID token; a ``Bearer`` prefix is also
        accepted.
        """
        if not authorization:
            return None

        parts = authorization.split()
        if len(parts) == 1:
            return parts[0]
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
        return None
