"""
Book models for the Lending Library.

``Book`` is a catalog record as stored and returned by the library.
``AddBookRequest`` is the typed form of a raw ``addBook`` request: the same
fields with ``nCopies`` optional, validated strictly so that raw values of the
wrong type are reported instead of coerced.

Field rules:
- isbn: ``ddd-ddd-ddd-d``
- title, publisher: non-blank strings
- authors: one or more non-blank strings, order significant
- pages: positive integer
- year: integer in [1448, current year]
- nCopies: positive integer (defaults to 1 when a new book is added)
"""

from datetime import date
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic_core import PydanticCustomError

# Year of Gutenberg's press; nothing in the catalog can be older.
GUTENBERG_YEAR = 1448

# ASCII digits only.
ISBN_PATTERN = r"^[0-9]{3}-[0-9]{3}-[0-9]{3}-[0-9]$"

# Largest value an SQLite INTEGER column holds.
MAX_STORED_INT = 2**63 - 1


def require_non_blank(value: str) -> str:
    """Reject strings that are empty or only whitespace."""
    if not value.strip():
        raise PydanticCustomError("non_empty", "must be non-empty")
    return value


NonBlankStr = Annotated[str, AfterValidator(require_non_blank)]
IsbnStr = Annotated[str, StringConstraints(pattern=ISBN_PATTERN)]


class BookFields(BaseModel):
    """Fields shared by stored books and add requests."""

    model_config = ConfigDict(populate_by_name=True)

    isbn: IsbnStr = Field(
        ...,
        description="ISBN of the form ddd-ddd-ddd-d; identifies the book",
        examples=["123-456-789-0"],
    )

    title: NonBlankStr = Field(
        ...,
        description="The title of the book",
        examples=["JavaScript: The Good Parts"],
    )

    authors: list[NonBlankStr] = Field(
        ...,
        description="Authors in the order printed on the book",
        min_length=1,
        examples=[["Douglas Crockford"]],
    )

    pages: int = Field(
        ...,
        description="Number of pages",
        gt=0,
        le=MAX_STORED_INT,
    )

    year: int = Field(
        ...,
        description="Year of publication",
    )

    publisher: NonBlankStr = Field(
        ...,
        description="Publisher name",
        examples=["O'Reilly"],
    )

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        """Publication year must lie between Gutenberg and this year."""
        if not GUTENBERG_YEAR <= v <= date.today().year:
            raise PydanticCustomError(
                "publish_year",
                "must be a past year on or after {min_year}",
                {"min_year": GUTENBERG_YEAR},
            )
        return v


class Book(BookFields):
    """A catalog record."""

    n_copies: int = Field(
        ...,
        alias="nCopies",
        description="Number of physical copies owned by the library",
        ge=1,
        le=MAX_STORED_INT,
    )

    def same_edition(self, other: BookFields) -> bool:
        """True when every field except the copy count is identical."""
        return self.model_dump(exclude={"n_copies"}) == other.model_dump(exclude={"n_copies"})

    def to_wire(self) -> dict:
        """Serialize with the wire field names (``nCopies``)."""
        return self.model_dump(by_alias=True)


class AddBookRequest(BookFields):
    """Validated ``addBook`` request."""

    model_config = ConfigDict(strict=True, populate_by_name=True)

    n_copies: int | None = Field(
        default=None,
        alias="nCopies",
        description="Copies being added; 1 when omitted",
        gt=0,
        le=MAX_STORED_INT,
    )

    def to_book(self) -> Book:
        """The catalog record this request describes."""
        return Book(**self.model_dump(exclude={"n_copies"}), n_copies=self.n_copies or 1)
