"""Typed request models for search and circulation commands."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from .book import IsbnStr, NonBlankStr

_SEARCH_WORD = re.compile(r"\w{2,}")


class FindBooksRequest(BaseModel):
    """Validated ``findBooks`` request."""

    model_config = ConfigDict(strict=True)

    search: str = Field(
        ...,
        description="Search words; -word excludes, \"a phrase\" matches exactly, word* is a prefix",
        examples=["javascript", "scala -java", '"good parts"'],
    )

    index: int = Field(
        default=0,
        description="Number of leading matches to skip",
        ge=0,
    )

    count: int | None = Field(
        default=None,
        description="Maximum number of matches to return; all when omitted",
        ge=0,
    )

    @field_validator("search")
    @classmethod
    def validate_search(cls, v: str) -> str:
        """Require at least one word of two or more characters."""
        if _SEARCH_WORD.search(v) is None:
            raise PydanticCustomError(
                "search_words",
                "search must contain at least one word of two or more characters",
            )
        return v


class LendRequest(BaseModel):
    """Validated ``checkoutBook`` / ``returnBook`` request."""

    model_config = ConfigDict(strict=True, populate_by_name=True)

    isbn: IsbnStr = Field(
        ...,
        description="ISBN of the book being lent or returned",
    )

    patron_id: NonBlankStr = Field(
        ...,
        alias="patronId",
        description="Identifier of the patron",
        examples=["joe"],
    )
