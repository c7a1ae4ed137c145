"""Book Lifecycle — orchestrates list/get and the five mutating operations against a BookRepository.

Invariants:
    - Every single-record operation loads first; a missing id is ResourceNotFoundError
    - Every load includes soft-deleted records; get then applies is_visible
    - restore is strict (InvalidStateError when not deleted); soft_delete is idempotent
    - Errors propagate unmodified to the HTTP boundary — nothing is retried here

Design Decisions:
    - Repository injected at construction (no global store handle) so tests swap in a fake
    - Load-then-write is not atomic: concurrent writers race, last write wins
      (ADR: no optimistic-concurrency token in the data model)
    - Domain checks (required title/author, known field names) repeated here because
      callers other than the HTTP schema may construct fields directly
"""

import logging
from typing import Any

from catalog.core.domain_types import (
    MUTABLE_FIELDS, REQUIRED_FIELDS, BookId, BookRecord,
)
from catalog.core.errors import (
    ErrorContext, InvalidInputError, InvalidStateError, ResourceNotFoundError,
)
from catalog.core.lifecycle import ensure_restorable, is_visible, needs_soft_delete
from catalog.core.query_plan import QueryPlan
from catalog.core.repository_protocols import BookRepository

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "Book"


class BookLifecycle:
    """Lifecycle controller for book records."""

    def __init__(self, repository: BookRepository):
        self.repository = repository

    # ─── Queries ────────────────────────────────────────────────

    async def list(self, plan: QueryPlan) -> tuple[list[BookRecord], int]:
        """Rows for the plan's page plus the total matching count."""
        records, total = await self.repository.find_and_count(plan)
        logger.info(
            f"Retrieved {len(records)} books (page {plan.page})",
            extra={"total": total},
        )
        return records, total

    async def get(
        self, book_id: BookId, include_deleted: bool = False,
    ) -> BookRecord:
        record = await self._load(book_id, "get")
        if not is_visible(record, include_deleted):
            raise self._not_found(book_id, "get")
        logger.info(f"Retrieved book with ID {book_id}", extra={"book_id": book_id})
        return record

    # ─── Mutations ──────────────────────────────────────────────

    async def create(self, fields: dict[str, Any]) -> BookRecord:
        fields = _checked_fields(fields, partial=False)
        record = await self.repository.create(fields)
        logger.info(
            f"Created new book with ID {record.id}", extra={"book_id": record.id},
        )
        return record

    async def update(
        self, book_id: BookId, fields: dict[str, Any],
    ) -> BookRecord:
        changes = _checked_fields(fields, partial=True)
        await self._load(book_id, "update")
        record = await self.repository.update(book_id, changes)
        if record is None:
            raise self._not_found(book_id, "update")
        logger.info(f"Updated book with ID {book_id}", extra={"book_id": book_id})
        return record

    async def soft_delete(self, book_id: BookId) -> BookRecord:
        current = await self._load(book_id, "soft_delete")
        if not needs_soft_delete(current):
            logger.info(
                f"Book with ID {book_id} already soft deleted",
                extra={"book_id": book_id},
            )
            return current
        record = await self.repository.soft_delete(book_id)
        if record is None:
            raise self._not_found(book_id, "soft_delete")
        logger.info(f"Soft deleted book with ID {book_id}", extra={"book_id": book_id})
        return record

    async def hard_delete(self, book_id: BookId) -> None:
        await self._load(book_id, "hard_delete")
        if not await self.repository.hard_delete(book_id):
            raise self._not_found(book_id, "hard_delete")
        logger.info(f"Hard deleted book with ID {book_id}", extra={"book_id": book_id})

    async def restore(self, book_id: BookId) -> BookRecord:
        current = await self._load(book_id, "restore")
        try:
            ensure_restorable(current)
        except InvalidStateError:
            logger.warning(
                f"Cannot restore: book with ID {book_id} is not deleted",
                extra={"book_id": book_id, "error_code": "INVALID_STATE"},
            )
            raise
        record = await self.repository.restore(book_id)
        if record is None:
            raise self._not_found(book_id, "restore")
        logger.info(
            f"Restored soft-deleted book with ID {book_id}",
            extra={"book_id": book_id},
        )
        return record

    # ─── Helpers ────────────────────────────────────────────────

    async def _load(self, book_id: BookId, operation: str) -> BookRecord:
        record = await self.repository.get(book_id, include_deleted=True)
        if record is None:
            raise self._not_found(book_id, operation)
        return record

    def _not_found(self, book_id: BookId, operation: str) -> ResourceNotFoundError:
        logger.warning(
            f"Cannot {operation}: book with ID {book_id} not found",
            extra={"book_id": book_id, "error_code": "RESOURCE_NOT_FOUND"},
        )
        return ResourceNotFoundError(
            RESOURCE_TYPE, book_id,
            ErrorContext(book_id=book_id, operation=operation),
        )


def _checked_fields(fields: dict[str, Any], partial: bool) -> dict[str, Any]:
    """Reject unknown names and empty required values. Returns a copy."""
    errors = [
        {"field": name, "message": f"Unknown field '{name}'"}
        for name in fields if name not in MUTABLE_FIELDS
    ]
    for name in REQUIRED_FIELDS:
        if partial and name not in fields:
            continue
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            label = name.capitalize()
            message = f"{label} cannot be empty" if partial else f"{label} is required"
            errors.append({"field": name, "message": message})
    if errors:
        raise InvalidInputError("Validation error", errors=errors)
    return dict(fields)
