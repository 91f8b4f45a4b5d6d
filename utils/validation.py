"""Input parsing shared by stores and resolvers."""

from typing import Any, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .errors import InputValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(
    model: Type[ModelT], data: Union[ModelT, Mapping[str, Any], None]
) -> ModelT:
    """
    Validate raw resolver arguments against a model.

    Args:
        model: Pydantic model describing the input
        data: Raw mapping, or an already-validated model instance

    Returns:
        The validated model

    Raises:
        InputValidationError: listing every violated field constraint
    """
    if isinstance(data, model):
        return data

    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        raise InputValidationError.from_pydantic(e) from e
