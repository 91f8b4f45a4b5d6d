"""
DynamoDB service for the expense tracker.

This module owns the boto3 resource shared by every store in a Lambda
container, plus helpers the stores use for paginated reads and error logging.
"""

import logging
from typing import Any, Callable, Dict, Iterator

import boto3
import botocore

logger = logging.getLogger(__name__)

_dynamodb_resource = None


def get_dynamodb_resource():
    """Get or create the DynamoDB resource reused across all operations."""
    global _dynamodb_resource
    if _dynamodb_resource is None:
        _dynamodb_resource = boto3.resource("dynamodb")
    return _dynamodb_resource


def reset_dynamodb_resource() -> None:
    global _dynamodb_resource
    _dynamodb_resource = None


def iterate_pages(
    operation: Callable[..., Dict[str, Any]], **kwargs: Any
) -> Iterator[Dict[str, Any]]:
    """
    Yield every item of a Query or Scan, following LastEvaluatedKey.

    :param operation: A bound ``Table.query`` or ``Table.scan``.
    :param kwargs: Request parameters passed through on every page.
    """
    while True:
        response = operation(**kwargs)
        yield from response.get("Items", [])

        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return
        kwargs["ExclusiveStartKey"] = last_key


def log_client_error(
    err: botocore.exceptions.ClientError, action: str, table_name: str, **context: Any
) -> None:
    """Log a DynamoDB ClientError with the request context before it is re-raised."""
    logger.error(
        "Couldn't %s in table %s. Error: %s: %s",
        action,
        table_name,
        err.response["Error"]["Code"],
        err.response["Error"]["Message"],
        extra=context,
    )
