"""Record Lifecycle — pure state derivation and transition guards.

Invariants:
    - State is derived from deleted_at alone (null → ACTIVE, set → SOFT_DELETED)
    - Guards never mutate the record; the shell applies the transition through the store
    - restore is only legal from SOFT_DELETED; soft delete is legal from any stored state

Design Decisions:
    - Guards raise typed errors instead of returning descriptors: the controller
      propagates them unchanged to the HTTP boundary
"""

from catalog.core.domain_types import BookRecord, RecordState
from catalog.core.errors import ErrorContext, InvalidStateError


def record_state(record: BookRecord | None) -> RecordState:
    """Current lifecycle state. A missing record is PURGED."""
    if record is None:
        return RecordState.PURGED
    if not record.is_deleted:
        return RecordState.ACTIVE
    return RecordState.SOFT_DELETED


def is_visible(record: BookRecord, include_deleted: bool = False) -> bool:
    """Whether default reads may return the record."""
    return include_deleted or not record.is_deleted


def ensure_restorable(record: BookRecord) -> None:
    """Raise InvalidStateError unless the record is soft-deleted."""
    if record_state(record) is not RecordState.SOFT_DELETED:
        raise InvalidStateError(
            "Book is not deleted",
            ErrorContext(book_id=record.id, operation="restore"),
        )


def needs_soft_delete(record: BookRecord) -> bool:
    """False when already soft-deleted — repeated deletes are no-ops."""
    return record_state(record) is RecordState.ACTIVE
