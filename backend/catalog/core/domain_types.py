"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - BookId wraps the store-assigned integer identity — never reassigned
    - RecordState is derived from deleted_at, never stored
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - BookRecord is a plain dataclass: the core never sees ORM objects (ADR: DDD boundary)
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

BookId = NewType("BookId", int)


# ─── Limits ──────────────────────────────────────────────────────

TITLE_MAX_LENGTH: int = 255
AUTHOR_MAX_LENGTH: int = 255
ISBN_MAX_LENGTH: int = 20
GENRE_MAX_LENGTH: int = 100

# Fields a caller may set on create/update. id and timestamps belong to the store.
MUTABLE_FIELDS: frozenset[str] = frozenset({
    "title", "author", "isbn", "published_date", "genre", "description",
})
REQUIRED_FIELDS: tuple[str, ...] = ("title", "author")


# ─── Enums ───────────────────────────────────────────────────────

class RecordState(str, Enum):
    """Book lifecycle states. PURGED is terminal and never observed in the store."""
    ACTIVE = "active"
    SOFT_DELETED = "soft_deleted"
    PURGED = "purged"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ─── Records ─────────────────────────────────────────────────────

@dataclass
class BookRecord:
    """Store-agnostic snapshot of a book row."""
    id: BookId
    title: str
    author: str
    created_at: datetime
    updated_at: datetime
    isbn: str | None = None
    published_date: date | None = None
    genre: str | None = None
    description: str | None = None
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
