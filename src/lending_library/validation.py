"""
Request validation for library commands.

Each command has a typed request model. ``validate()`` runs the raw mapping
through the command's model and either returns the typed request or
translates every failure into an ``Err``:

- a required field that is absent → MISSING
- a field that is present but has the wrong type, shape or range → BAD_TYPE
- a failure that no field explains (e.g. the request is not a mapping) → BAD_REQ

Paths are dotted, so the second author of a book is ``authors.1``.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import ErrorDetails

from .errors import Err, ErrorCode, ErrResult, OkResult, err_result, ok_result
from .models import GUTENBERG_YEAR, AddBookRequest, FindBooksRequest, LendRequest

logger = logging.getLogger(__name__)

VALIDATORS: dict[str, type[BaseModel]] = {
    "addBook": AddBookRequest,
    "findBooks": FindBooksRequest,
    "checkoutBook": LendRequest,
    "returnBook": LendRequest,
}

ISBN_MESSAGE = 'isbn must be of the form "ddd-ddd-ddd-d"'

# (top-level field, pydantic error type) -> message
_FIELD_MESSAGES = {
    ("isbn", "string_pattern_mismatch"): ISBN_MESSAGE,
    ("authors", "too_short"): "must have one or more authors",
    ("year", "publish_year"): f"must be a past year on or after {GUTENBERG_YEAR}",
}

_TYPE_NAMES = {
    "bool_type": "boolean",
    "dict_type": "object",
    "float_type": "number",
    "int_from_float": "integer",
    "int_parsing": "integer",
    "int_type": "integer",
    "list_type": "array",
    "model_type": "object",
    "string_type": "string",
}


def validate(command: str, raw: Any) -> OkResult[Any] | ErrResult:
    """Validate ``raw`` as a request for ``command``.

    Returns the typed request on success. Returns a CONFIG error when no
    validator is registered for ``command``.
    """
    model = VALIDATORS.get(command)
    if model is None:
        return err_result(f"no validator for command {command}", ErrorCode.CONFIG)

    try:
        return ok_result(model.model_validate(raw))
    except ValidationError as e:
        errors = field_errors(e)
        logger.debug("Rejected %s request with %d error(s)", command, len(errors))
        return ErrResult(errors=errors)


def field_errors(error: ValidationError) -> list[Err]:
    """Translate a pydantic ``ValidationError`` into library errors."""
    return [_to_err(details) for details in error.errors(include_url=False)]


def _to_err(details: ErrorDetails) -> Err:
    loc = details["loc"]
    path = ".".join(str(part) for part in loc)
    kind = details["type"]

    if kind == "missing":
        return Err(message=f"{path} is required", code=ErrorCode.MISSING, path=path)

    if not loc:
        if kind in ("model_type", "dict_type"):
            message = "request must be an object"
        else:
            message = details["msg"]
        return Err(message=message, code=ErrorCode.BAD_REQ)

    message = _FIELD_MESSAGES.get((str(loc[0]), kind))
    if message is None and kind in _TYPE_NAMES:
        message = f"{path} must have type {_TYPE_NAMES[kind]}"
    if message is None:
        message = details["msg"]
    return Err(message=message, code=ErrorCode.BAD_TYPE, path=path)
