"""Book ORM — persists a bibliographic record with soft-delete support.

Invariants:
    - id is an autoincrement integer primary key, never reassigned
    - title/author are non-nullable, bounded strings
    - isbn is unique across every row still in the table (purged rows free it)
    - deleted_at null → active; set → soft-deleted

Design Decisions:
    - Timestamps set in Python (not server_default): identical behaviour on SQLite and PostgreSQL
    - deleted_at indexed: every default query filters on it
    - to_record() converts to the core BookRecord; the core never sees ORM objects
    - to_record() returns tz-aware UTC timestamps whatever the driver hands back
"""

from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.core.domain_types import (
    AUTHOR_MAX_LENGTH, GENRE_MAX_LENGTH, ISBN_MAX_LENGTH, TITLE_MAX_LENGTH,
    BookId, BookRecord,
)
from catalog.db.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; stored values are always UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Book(Base):
    """Book entity — one catalog record."""
    __tablename__ = "books"
    __table_args__ = (
        Index("ix_books_title_author", "title", "author"),
        Index("ix_books_genre", "genre"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    author: Mapped[str] = mapped_column(String(AUTHOR_MAX_LENGTH), nullable=False)
    isbn: Mapped[str | None] = mapped_column(
        String(ISBN_MAX_LENGTH), unique=True, nullable=True,
    )
    published_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    genre: Mapped[str | None] = mapped_column(
        String(GENRE_MAX_LENGTH), nullable=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True,
    )

    def to_record(self) -> BookRecord:
        return BookRecord(
            id=BookId(self.id),
            title=self.title,
            author=self.author,
            isbn=self.isbn,
            published_date=self.published_date,
            genre=self.genre,
            description=self.description,
            created_at=as_utc(self.created_at),
            updated_at=as_utc(self.updated_at),
            deleted_at=as_utc(self.deleted_at),
        )
