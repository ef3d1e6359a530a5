import json
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationFailed


Question = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)
]
UserName = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)
]
UserColor = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)
]


class AskRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    question: Question
    userName: UserName | None = None
    userColor: UserColor | None = None


class AskResponse(BaseModel):
    answer: str


class ErrorResponse(BaseModel):
    error: str


def parse_ask_request(raw_body: bytes) -> AskRequest:
    """Decode and validate an /ask body.

    Raises ValidationFailed with the first problem found, described as
    ``"<field>: <message>"`` for field errors.
    """
    try:
        payload = json.loads(raw_body.decode("utf-8")) if raw_body else None
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationFailed("Request body must be a JSON object") from exc

    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")

    try:
        return AskRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationFailed(_describe(exc)) from exc


def _describe(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message
