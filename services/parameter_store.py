"""
AWS Systems Manager Parameter Store service.

This module provides parameter retrieval from AWS Parameter Store with
environment variable overrides and local development support using .env
files and python-dotenv.
"""

import os
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv
from pydantic import BaseModel

from utils.logging import setup_logger

logger = setup_logger(__name__)

# Load .env file for local development
load_dotenv()

# Cache for Parameter Store client
_ssm_client = None

DEFAULT_PREFIX = "/expense-tracker"


def get_ssm_client():
    """Get or create SSM client with caching."""
    global _ssm_client
    if _ssm_client is None:
        _ssm_client = boto3.client("ssm")
    return _ssm_client


def reset_ssm_client() -> None:
    global _ssm_client
    _ssm_client = None


@lru_cache(maxsize=128)
def get_parameter(parameter_name: str, decrypt: bool = True) -> str | None:
    """
    Get a parameter from AWS Parameter Store with caching.

    Args:
        parameter_name: The full name of the parameter to retrieve
        decrypt: Whether to decrypt SecureString parameters

    Returns:
        Parameter value or None if not found or unreadable
    """
    try:
        ssm = get_ssm_client()
        response = ssm.get_parameter(Name=parameter_name, WithDecryption=decrypt)
        value = response["Parameter"]["Value"]

        logger.debug(f"Retrieved parameter {parameter_name} from Parameter Store")
        return value

    except ClientError as e:
        error_code = e.response["Error"]["Code"]

        if error_code == "ParameterNotFound":
            logger.warning(f"Parameter {parameter_name} not found in Parameter Store")
        else:
            logger.error(f"Error retrieving parameter {parameter_name}: {e}")

        return None
    except BotoCoreError as e:
        logger.error(f"Unexpected error retrieving parameter {parameter_name}: {e}")
        return None


class TableConfig(BaseModel):
    """Names of the tables and indexes the stores operate on."""

    expenses_table: str = "expenses-dev"
    expenses_month_index: str = "GSI1"
    users_table: str = "users-dev"
    users_email_index: str = "EmailIndex"


class CognitoConfig(BaseModel):
    """Identity provider settings used by the authorizer."""

    region: str
    user_pool_id: str
    app_client_id: str

    @property
    def issuer(self) -> str:
        return f"https://cognito-idp.{self.region}.amazonaws.com/{self.user_pool_id}"

    @property
    def jwks_url(self) -> str:
        return f"{self.issuer}/.well-known/jwks.json"


# field -> (environment variable, parameter key under the prefix)
TABLE_SETTINGS = {
    "expenses_table": ("TABLE_NAME", "tables/expenses"),
    "expenses_month_index": ("GSI1_NAME", "tables/expenses-month-index"),
    "users_table": ("USERS_TABLE_NAME", "tables/users"),
    "users_email_index": ("USERS_EMAIL_INDEX_NAME", "tables/users-email-index"),
}


class ParameterStoreConfig:
    """
    Configuration class that resolves settings from the environment first and
    Parameter Store second.

    Lambda functions receive table names as environment variables; scripts
    and local runs read them from Parameter Store.
    """

    def __init__(self, parameter_prefix: str = DEFAULT_PREFIX):
        """
        Initialize configuration with parameter prefix.

        Args:
            parameter_prefix: Prefix for parameter names in Parameter Store
        """
        self.parameter_prefix = parameter_prefix.rstrip("/")
        self._config_cache: Dict[str, Any] = {}

    def get(
        self, key: str, default: Any = None, env_var: Optional[str] = None
    ) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (will be prefixed with parameter_prefix)
            default: Default value if not found
            env_var: Environment variable that overrides the parameter

        Returns:
            Configuration value or default
        """
        if env_var and os.getenv(env_var):
            return os.getenv(env_var)

        if key in self._config_cache:
            return self._config_cache[key]

        value = get_parameter(f"{self.parameter_prefix}/{key}")
        if value is None:
            value = default

        self._config_cache[key] = value
        return value

    def get_required(self, key: str, env_var: Optional[str] = None) -> str:
        """
        Get a required configuration value.

        Raises:
            ValueError: If the value is found neither in the environment nor in
                Parameter Store
        """
        value = self.get(key, env_var=env_var)
        if value is None:
            raise ValueError(
                f"Required parameter {self.parameter_prefix}/{key} not found"
            )
        return value

    def load_table_config(self) -> TableConfig:
        """Resolve table and index names, falling back to the stage defaults."""
        defaults = TableConfig()
        values = {
            field: self.get(key, getattr(defaults, field), env_var=env_var)
            for field, (env_var, key) in TABLE_SETTINGS.items()
        }
        logger.info("Loaded table configuration", extra=values)
        return TableConfig(**values)

    def load_cognito_config(self) -> CognitoConfig:
        """
        Load identity provider settings for token verification.

        Raises:
            ValueError: If the user pool or app client is not configured
        """
        user_pool_id = self.get_required(
            "cognito/user-pool-id", env_var="COGNITO_USER_POOL_ID"
        )
        # Pool IDs are "<region>_<id>"
        return CognitoConfig(
            region=user_pool_id.split("_", 1)[0],
            user_pool_id=user_pool_id,
            app_client_id=self.get_required(
                "cognito/app-client-id", env_var="COGNITO_APP_CLIENT_ID"
            ),
        )


# Global config instance
config = ParameterStoreConfig()


def clear_cache():
    """Clear parameter cache. Useful for testing or config updates."""
    get_parameter.cache_clear()
    config._config_cache.clear()
    reset_ssm_client()
    logger.info("Parameter Store cache cleared")
