"""Book Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - BookCreate: title/author required, stripped, non-empty, <= 255 chars
    - BookUpdate: every field optional; title/author, when sent, cannot be empty or null
    - isbn, when present, is ISBN-10 or ISBN-13 once dashes and spaces are removed
    - genre <= 100 chars; published_date is a calendar date (no time)

Design Decisions:
    - str_strip_whitespace on the model: length checks see the trimmed value
    - field_validator for custom messages so clients get "Title is required"
      instead of pydantic's generic wording
    - Unknown body keys ignored (v1 REST contract)
"""

import re
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.core.domain_types import (
    AUTHOR_MAX_LENGTH, GENRE_MAX_LENGTH, ISBN_MAX_LENGTH, TITLE_MAX_LENGTH,
)

ISBN_PATTERN = re.compile(r"^(?:\d{9}[\dXx]|\d{13})$")
_ISBN_SEPARATORS = re.compile(r"[- ]")


def normalize_isbn(value: str | None) -> str | None:
    """Blank → None; otherwise check ISBN-10/13 shape and keep the caller's formatting."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not ISBN_PATTERN.match(_ISBN_SEPARATORS.sub("", value)):
        raise ValueError("Must be a valid ISBN-10 or ISBN-13")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value or None


class BookCreate(BaseModel):
    """Book creation — title and author required."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(max_length=TITLE_MAX_LENGTH)
    author: str = Field(max_length=AUTHOR_MAX_LENGTH)
    isbn: str | None = Field(None, max_length=ISBN_MAX_LENGTH)
    published_date: date | None = None
    genre: str | None = Field(None, max_length=GENRE_MAX_LENGTH)
    description: str | None = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("author")
    @classmethod
    def author_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Author is required")
        return v

    @field_validator("isbn")
    @classmethod
    def check_isbn(cls, v: str | None) -> str | None:
        return normalize_isbn(v)

    @field_validator("genre", "description")
    @classmethod
    def blank_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)


class BookUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, max_length=TITLE_MAX_LENGTH)
    author: str | None = Field(None, max_length=AUTHOR_MAX_LENGTH)
    isbn: str | None = Field(None, max_length=ISBN_MAX_LENGTH)
    published_date: date | None = None
    genre: str | None = Field(None, max_length=GENRE_MAX_LENGTH)
    description: str | None = None

    # Validators only run for keys the client actually sent
    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str | None) -> str:
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("author")
    @classmethod
    def author_not_empty(cls, v: str | None) -> str:
        if not v:
            raise ValueError("Author cannot be empty")
        return v

    @field_validator("isbn")
    @classmethod
    def check_isbn(cls, v: str | None) -> str | None:
        return normalize_isbn(v)

    @field_validator("genre", "description")
    @classmethod
    def blank_optional(cls, v: str | None) -> str | None:
        return _blank_to_none(v)

    def changes(self) -> dict:
        """Fields the client sent, with their validated values."""
        return self.model_dump(exclude_unset=True)


class BookResponse(BaseModel):
    """Book response — public-facing record data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    isbn: str | None = None
    published_date: date | None = None
    genre: str | None = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None
