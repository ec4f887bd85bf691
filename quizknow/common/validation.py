from pydantic import BaseModel, ValidationError as PydanticValidationError

from quizknow.common.errors import ValidationError, format_pydantic_errors


def parse_payload(schema: type[BaseModel], data) -> BaseModel:
    """
    Validate a request body against a pydantic schema.

    Raises:
        ValidationError: the body is missing fields or has out-of-range values
    """
    if data is not None and not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(data or {})
    except PydanticValidationError as e:
        raise ValidationError(format_pydantic_errors(e))
