"""Books — list/read/create/update and lifecycle transitions for catalog records.

Invariants:
    - Request shape validated by FastAPI/Pydantic before any handler runs
    - Handlers never touch SQLAlchemy directly; everything goes through BookLifecycle
    - Lifecycle errors propagate to the global handlers (no HTTPException here)
    - List path: query params → build_query_plan → lifecycle.list → compute_pagination

Design Decisions:
    - BookLifecycle built per request from the request's AsyncSession (no shared state)
    - PUT and PATCH share one partial-update handler (v1 REST contract)
    - /{book_id}/permanent and /{book_id}/restore are explicit sub-resources
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config import get_settings
from catalog.core.domain_types import BookId
from catalog.core.pagination import compute_pagination
from catalog.core.query_plan import build_query_plan
from catalog.infrastructure.database import get_db
from catalog.infrastructure.sql_book_repository import SqlBookRepository
from catalog.schemas.book import BookCreate, BookUpdate
from catalog.schemas.envelope import success_envelope
from catalog.services.book_lifecycle import BookLifecycle

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/books", tags=["books"])

_settings = get_settings()


def get_book_lifecycle(db: AsyncSession = Depends(get_db)) -> BookLifecycle:
    """FastAPI dependency — lifecycle bound to this request's session."""
    return BookLifecycle(SqlBookRepository(db))


@router.get("")
async def list_books(
    page: int = Query(1, ge=1),
    limit: int = Query(
        _settings.default_page_size, ge=1, le=_settings.max_page_size,
    ),
    title: str | None = Query(None),
    author: str | None = Query(None),
    genre: str | None = Query(None),
    isbn: str | None = Query(None),
    published_after: date | None = Query(None, alias="publishedAfter"),
    published_before: date | None = Query(None, alias="publishedBefore"),
    sort: str | None = Query(None),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """List books with filtering, sorting, and pagination."""
    plan = build_query_plan({
        "page": page,
        "limit": limit,
        "title": title,
        "author": author,
        "genre": genre,
        "isbn": isbn,
        "publishedAfter": published_after,
        "publishedBefore": published_before,
        "sort": sort,
        "include_deleted": include_deleted,
    })
    records, total = await lifecycle.list(plan)
    pagination = compute_pagination(total, plan.page, plan.limit)
    return success_envelope(data=records, pagination=pagination)


@router.get("/{book_id}")
async def get_book(
    book_id: int,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Get a single book. Soft-deleted books are 404 unless includeDeleted=true."""
    record = await lifecycle.get(BookId(book_id), include_deleted=include_deleted)
    return success_envelope(data=record)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Create a new book."""
    record = await lifecycle.create(body.model_dump())
    return success_envelope(data=record, message="Book created successfully")


@router.put("/{book_id}")
@router.patch("/{book_id}")
async def update_book(
    book_id: int,
    body: BookUpdate,
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Apply a partial update. Allowed on active and soft-deleted books."""
    record = await lifecycle.update(BookId(book_id), body.changes())
    return success_envelope(data=record, message="Book updated successfully")


@router.delete("/{book_id}")
async def delete_book(
    book_id: int,
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Soft delete. Repeating it on a soft-deleted book still succeeds."""
    await lifecycle.soft_delete(BookId(book_id))
    return success_envelope(message="Book deleted successfully")


@router.delete("/{book_id}/permanent")
async def hard_delete_book(
    book_id: int,
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Permanently remove a book, active or soft-deleted."""
    await lifecycle.hard_delete(BookId(book_id))
    return success_envelope(message="Book permanently deleted")


@router.post("/{book_id}/restore")
async def restore_book(
    book_id: int,
    lifecycle: BookLifecycle = Depends(get_book_lifecycle),
):
    """Restore a soft-deleted book. 400 if the book is not deleted."""
    record = await lifecycle.restore(BookId(book_id))
    return success_envelope(data=record, message="Book restored successfully")
