"""
Structured errors and results for the Lending Library.

Every library operation returns a ``Result``: either an ``OkResult`` carrying
the success value or an ``ErrResult`` carrying one or more ``Err`` entries.
Errors are values, never exceptions, once they leave the core.

Error codes:
- MISSING: a required field is absent
- BAD_TYPE: a field is present but invalid (type, shape, range, or a state
  rule such as "no copies available")
- BAD_REQ: the request is malformed in a way no single field explains
- DB: the persistence layer failed
- CONFIG: no validator is registered for the command
- BAD_ARG: a command-line argument could not be parsed
"""

import enum
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorCode(str, enum.Enum):
    """Error kinds reported by the library."""

    MISSING = "MISSING"
    BAD_TYPE = "BAD_TYPE"
    BAD_REQ = "BAD_REQ"
    DB = "DB"
    CONFIG = "CONFIG"
    BAD_ARG = "BAD_ARG"


class Err(BaseModel):
    """A single error: message, kind and the dotted path of the field."""

    message: str
    code: ErrorCode
    path: str = ""

    def __str__(self) -> str:
        text = f"{self.code.value}: {self.message}"
        if self.path:
            text += f"; path={self.path}"
        return text


class OkResult(BaseModel, Generic[T]):
    """Successful result."""

    is_ok: Literal[True] = True
    val: T


class ErrResult(BaseModel):
    """Failed result holding every error found."""

    is_ok: Literal[False] = False
    errors: list[Err] = Field(min_length=1)

    @property
    def codes(self) -> list[ErrorCode]:
        """Codes of all errors, in order."""
        return [e.code for e in self.errors]


Result = OkResult[Any] | ErrResult


def ok_result(val: Any) -> OkResult[Any]:
    """Wrap a success value."""
    return OkResult(val=val)


def err_result(message: str, code: ErrorCode, path: str = "") -> ErrResult:
    """Build a single-error result."""
    return ErrResult(errors=[Err(message=message, code=code, path=path)])


VOID_RESULT: OkResult[None] = OkResult(val=None)
