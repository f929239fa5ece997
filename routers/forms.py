import json
from typing import TypeVar

import pydantic
from fastapi import Request
from starlette.datastructures import UploadFile

from errors import ValidationError

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


async def read_payload(request: Request) -> tuple[dict, dict[str, UploadFile]]:
    """
    Read either a JSON body (API clients) or form-data (browser forms
    with document uploads). Returns (fields, files).
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data, {}

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields: dict = {}
        files: dict[str, UploadFile] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                files[key] = value
            elif isinstance(value, str) and value != "":
                fields[key] = value
        return fields, files

    return {}, {}


def parse_model(schema: type[ModelT], data: dict) -> ModelT:
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError("Validation failed", error=details)
