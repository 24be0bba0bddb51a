from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import FieldsFromPydantic, ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _Message(fields: list[str]) -> str:
    return f"Invalid value for: {', '.join(fields)}"


def ValidatePayload(schema: type[SchemaT], data: dict[str, Any] | BaseModel) -> SchemaT:
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        fields = FieldsFromPydantic(exc)
        raise ValidationError(_Message(fields), fields) from exc


def ValidatePatch(schema: type[BaseModel], patch: dict[str, Any] | BaseModel) -> dict[str, Any]:
    if isinstance(patch, BaseModel):
        patch = patch.model_dump(exclude_unset=True)
    unknown = sorted(key for key in patch if key not in schema.model_fields)
    if unknown:
        raise ValidationError(_Message(unknown), unknown)
    try:
        model = schema.model_validate(patch)
    except PydanticValidationError as exc:
        fields = FieldsFromPydantic(exc)
        raise ValidationError(_Message(fields), fields) from exc
    return model.model_dump(exclude_unset=True)
