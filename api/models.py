"""
API models and schemas for the FastAPI application.

These models are the schema description of the service: FastAPI reads
them to build the OpenAPI document served under ``/api-docs``.
"""

import re
from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_WHOLE_INT = re.compile(r"^\s*[+-]?\d+\s*$")

BOOK_EXAMPLE = {
    "id": 1,
    "title": "Effective JavaScript",
    "author": "David Herman",
    "publishedYear": 2013,
}


def parse_int(value: Any) -> Optional[int]:
    """
    Read the leading integer of a query or path value.

    ``"2"`` and ``"2abc"`` both give 2; ``"abc"`` and ``""`` give None.
    Booleans are never treated as numbers.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            try:
                return int(match.group(1))
            except ValueError:
                # Beyond the interpreter's integer digit limit.
                return None
    return None


class Book(BaseModel):
    """Book response model for API."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={"example": BOOK_EXAMPLE},
    )

    id: int = Field(..., description="The auto-generated id of the book")
    title: str = Field(..., description="The title of the book")
    author: str = Field(..., description="The author of the book")
    published_year: Optional[int] = Field(
        None,
        alias="publishedYear",
        description="The year the book was published",
    )


class BookInput(BaseModel):
    """
    Request body for creating or replacing a book.

    Decoding never fails on field types: a non-string title or author is
    read as missing, and a publishedYear that is not an integer (or is 0)
    is read as null. Presence of title and author is checked separately
    by ``missing_required_fields`` so the caller decides when to reject.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "required": ["title", "author"],
            "example": {k: v for k, v in BOOK_EXAMPLE.items() if k != "id"},
        },
    )

    title: Optional[str] = Field(None, description="The title of the book")
    author: Optional[str] = Field(None, description="The author of the book")
    published_year: Optional[int] = Field(
        None,
        alias="publishedYear",
        description="The year the book was published",
    )

    @field_validator('title', 'author', mode='before')
    @classmethod
    def text_or_missing(cls, v):
        return v if isinstance(v, str) else None

    @field_validator('published_year', mode='before')
    @classmethod
    def year_or_null(cls, v):
        """Keep integer years, drop anything else."""
        if isinstance(v, bool):
            return None
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, str) and _WHOLE_INT.match(v):
            try:
                v = int(v)
            except ValueError:
                return None
        if isinstance(v, int):
            return v or None
        return None

    def missing_required_fields(self) -> bool:
        """True when title or author is absent or empty."""
        return not self.title or not self.author


class BookListQuery(BaseModel):
    """Query parameters for book listing."""
    author: Optional[str] = Field(None, description="Filter by author name")
    page: Optional[str] = Field(None, description="Page number for pagination")
    size: Optional[str] = Field(None, description="Number of items per page")

    @field_validator('page', 'size', mode='before')
    @classmethod
    def as_text(cls, v):
        return None if v is None else str(v)

    def pagination(self) -> Optional[Tuple[int, int]]:
        """
        Return ``(page, size)`` when both are given and numeric.

        When only one of them is supplied, or either does not parse,
        the listing is not paginated at all.
        """
        if not self.page or not self.size:
            return None
        page = parse_int(self.page)
        size = parse_int(self.size)
        if page is None or size is None:
            return None
        return page, size


class MessageResponse(BaseModel):
    """Error response model."""
    message: str = Field(..., description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    book_count: int = Field(..., description="Number of books currently held")
