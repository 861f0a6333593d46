from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_model(model_cls: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate raw request data into ``model_cls``.
    Pydantic errors are flattened into a single ValidationError message.
    """
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_first_error_message(e)) from e


def _first_error_message(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    missing = [str(err["loc"][-1]) for err in errors if err["type"] == "missing"]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"

    err = errors[0]
    if err["type"] == "value_error" and "error" in err.get("ctx", {}):
        # Messages raised from our own validators are already user facing
        return str(err["ctx"]["error"])
    field = ".".join(str(part) for part in err["loc"]) or "body"
    return f"{field}: {err['msg']}"
