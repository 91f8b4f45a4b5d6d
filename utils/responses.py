"""
Result formatting for AppSync resolvers.

Resolvers return plain JSON-able values; AppSync maps them onto the GraphQL
schema by field name. This module converts models and DynamoDB values into
that form.
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional


class APIJSONEncoder(json.JSONEncoder):
    """
    Custom JSON encoder for resolver results that handles:
    - Decimal objects (from DynamoDB)
    - datetime objects
    - Pydantic models
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if hasattr(obj, "model_dump"):  # Pydantic models
            return obj.model_dump(by_alias=True, exclude_none=True)
        return super().default(obj)


def graphql_result(model: Optional[Any]) -> Optional[dict]:
    """
    Convert a single model to a GraphQL record.

    Args:
        model: Model with a ``to_graphql`` method, or None for a null result

    Returns:
        Record keyed by GraphQL field names, or None
    """
    if model is None:
        return None
    return json.loads(json.dumps(model.to_graphql(), cls=APIJSONEncoder))


def graphql_list(models: Iterable[Any]) -> List[dict]:
    """Convert a sequence of models to a list of GraphQL records."""
    return [graphql_result(model) for model in models]
