from typing import Any, Type, TypeVar

from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)


def invalid(message: str, errors: list) -> HTTPException:
    return HTTPException(status_code=400, detail={"message": message, "errors": jsonable_encoder(errors)})


def parse(model: Type[M], data: Any, message: str) -> M:
    """Validate data against model; failures become 400 {message, errors}."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise invalid(message, e.errors())
