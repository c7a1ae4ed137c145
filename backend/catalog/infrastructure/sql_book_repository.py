"""SQL Book Repository — SQLAlchemy implementation of the BookRepository protocol.

Invariants:
    - One commit per state transition; no call spans another call's transaction
    - Every SQLAlchemy exception rolls the session back and leaves as a CatalogError
    - Default reads exclude soft-deleted rows (deleted_at IS NULL)
    - List ordering = plan sort keys, then id ascending as the final tie-breaker

Design Decisions:
    - Plan field names resolved against the books table columns: unknown sort
      fields become a recoverable StoreError (400) instead of raw SQL
    - Substring filters use LIKE with % and _ escaped: user input is always a literal
      substring; case sensitivity follows the column collation
    - Count and page queries share one predicate list so totals always match the rows
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.domain_types import BookId, BookRecord
from catalog.core.errors import ConflictError, ErrorContext, StoreError
from catalog.core.query_plan import (
    DateRangeFilter, ExactFilter, Filter, QueryPlan, SortKey, SubstringFilter,
)
from catalog.infrastructure.database import map_db_error
from catalog.models.book import Book, utc_now

logger = logging.getLogger(__name__)


class SqlBookRepository:
    """BookRepository backed by an AsyncSession (one per request)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────────────

    async def get(
        self, book_id: BookId, include_deleted: bool = False,
    ) -> BookRecord | None:
        book = await self._load(book_id, include_deleted)
        return book.to_record() if book else None

    async def find_and_count(
        self, plan: QueryPlan,
    ) -> tuple[list[BookRecord], int]:
        conditions = self._conditions(plan)
        ordering = [self._order_clause(key) for key in plan.sort]

        count_stmt = select(func.count()).select_from(Book)
        page_stmt = select(Book)
        for condition in conditions:
            count_stmt = count_stmt.where(condition)
            page_stmt = page_stmt.where(condition)
        page_stmt = (
            page_stmt.order_by(*ordering, Book.id.asc())
            .limit(plan.limit)
            .offset(plan.offset)
        )

        async with self._translate_errors("list"):
            total = (await self.db.execute(count_stmt)).scalar_one()
            rows = (await self.db.execute(page_stmt)).scalars().all()
        return [row.to_record() for row in rows], total

    # ─── Writes ─────────────────────────────────────────────────

    async def create(self, fields: dict[str, Any]) -> BookRecord:
        now = utc_now()
        book = Book(**fields, created_at=now, updated_at=now)
        self.db.add(book)
        async with self._translate_errors("create"):
            await self.db.commit()
        return book.to_record()

    async def update(
        self, book_id: BookId, fields: dict[str, Any],
    ) -> BookRecord | None:
        book = await self._load(book_id, include_deleted=True)
        if not book:
            return None
        for name, value in fields.items():
            setattr(book, name, value)
        book.updated_at = utc_now()
        async with self._translate_errors("update", book_id):
            await self.db.commit()
        return book.to_record()

    async def soft_delete(self, book_id: BookId) -> BookRecord | None:
        book = await self._load(book_id, include_deleted=True)
        if not book:
            return None
        if book.deleted_at is None:
            now = utc_now()
            book.deleted_at = now
            book.updated_at = now
            async with self._translate_errors("soft_delete", book_id):
                await self.db.commit()
        return book.to_record()

    async def hard_delete(self, book_id: BookId) -> bool:
        book = await self._load(book_id, include_deleted=True)
        if not book:
            return False
        async with self._translate_errors("hard_delete", book_id):
            await self.db.delete(book)
            await self.db.commit()
        return True

    async def restore(self, book_id: BookId) -> BookRecord | None:
        book = await self._load(book_id, include_deleted=True)
        if not book:
            return None
        book.deleted_at = None
        book.updated_at = utc_now()
        async with self._translate_errors("restore", book_id):
            await self.db.commit()
        return book.to_record()

    # ─── Helpers ────────────────────────────────────────────────

    async def _load(self, book_id: BookId, include_deleted: bool) -> Book | None:
        stmt = select(Book).where(Book.id == book_id)
        if not include_deleted:
            stmt = stmt.where(Book.deleted_at.is_(None))
        async with self._translate_errors("get", book_id):
            result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _conditions(self, plan: QueryPlan) -> list[ColumnElement[bool]]:
        conditions = [self._filter_clause(f) for f in plan.filters]
        if not plan.include_deleted:
            conditions.append(Book.deleted_at.is_(None))
        return conditions

    def _filter_clause(self, f: Filter) -> ColumnElement[bool]:
        column = _resolve_column(f.field)
        if isinstance(f, SubstringFilter):
            return column.contains(f.value, autoescape=True)
        if isinstance(f, ExactFilter):
            return column == f.value
        if isinstance(f, DateRangeFilter):
            bounds = []
            if f.after is not None:
                bounds.append(column >= f.after)
            if f.before is not None:
                bounds.append(column <= f.before)
            return bounds[0] if len(bounds) == 1 else bounds[0] & bounds[1]
        raise StoreError(f"Unsupported filter: {type(f).__name__}", recoverable=False)

    def _order_clause(self, key: SortKey):
        column = _resolve_column(key.field)
        return column.desc() if key.descending else column.asc()

    @asynccontextmanager
    async def _translate_errors(
        self, operation: str, book_id: BookId | None = None,
    ) -> AsyncGenerator[None, None]:
        """Rollback and map SQLAlchemy failures to catalog errors."""
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Integrity violation during {operation}: {e.orig}",
                extra={"book_id": book_id, "error_code": "CONFLICT"},
            )
            if "isbn" in str(e.orig).lower():
                raise ConflictError(
                    "isbn must be unique", field="isbn",
                    context=ErrorContext(book_id=book_id, operation=operation),
                ) from e
            raise map_db_error(e, operation) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Database failure during {operation}: {e}",
                extra={"book_id": book_id},
            )
            raise map_db_error(e, operation) from e


def _resolve_column(name: str):
    """Map a plan field name to a books column, or raise a recoverable StoreError."""
    column = Book.__table__.columns.get(name)
    if column is None:
        raise StoreError(
            f"Unknown field '{name}'",
            context=ErrorContext(operation="list", debug_info={"field": name}),
        )
    return column
