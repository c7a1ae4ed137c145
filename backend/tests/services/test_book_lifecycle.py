"""Book Lifecycle — state machine and error mapping against the in-memory repository.

Invariants:
    - Active --soft_delete--> SoftDeleted --restore--> Active
    - hard_delete from either state is terminal: get/restore/update → NotFound
    - restore on an active record → InvalidStateError, never NotFound
    - soft_delete repeated on a soft-deleted record succeeds without touching deleted_at
    - update allowed on soft-deleted records and never changes state
"""

from datetime import date

import pytest

from catalog.core.domain_types import BookId, RecordState
from catalog.core.errors import (
    ConflictError, InvalidInputError, InvalidStateError, ResourceNotFoundError,
    StoreError,
)
from catalog.core.lifecycle import record_state
from catalog.core.query_plan import build_query_plan

MISSING = BookId(999)


async def _create(lifecycle, **fields):
    return await lifecycle.create({"title": "T", "author": "A", **fields})


# --- create / get -------------------------------------------------------------

async def test_create_returns_active_record_with_id(lifecycle):
    record = await _create(lifecycle, isbn="978-3-16-148410-0")
    assert record.id == 1
    assert record.title == "T"
    assert record_state(record) is RecordState.ACTIVE
    assert record.created_at == record.updated_at


async def test_get_returns_created_record(lifecycle):
    created = await _create(lifecycle)
    fetched = await lifecycle.get(created.id)
    assert fetched.title == created.title
    assert fetched.author == created.author


async def test_get_missing_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await lifecycle.get(MISSING)
    assert exc_info.value.http_status == 404
    assert exc_info.value.context.operation == "get"


async def test_create_without_title_is_invalid_input(lifecycle, memory_repository):
    with pytest.raises(InvalidInputError) as exc_info:
        await lifecycle.create({"author": "A"})
    assert exc_info.value.errors == [{"field": "title", "message": "Title is required"}]
    assert "create" not in memory_repository.calls


async def test_create_with_unknown_field_is_invalid_input(lifecycle):
    with pytest.raises(InvalidInputError) as exc_info:
        await lifecycle.create({"title": "T", "author": "A", "rating": 5})
    assert exc_info.value.errors[0]["field"] == "rating"


async def test_create_duplicate_isbn_is_conflict(lifecycle):
    await _create(lifecycle, isbn="0306406152")
    with pytest.raises(ConflictError):
        await _create(lifecycle, isbn="0306406152")


# --- update -------------------------------------------------------------------

async def test_update_applies_only_present_fields(lifecycle):
    created = await _create(lifecycle, genre="Fiction", description="d")
    updated = await lifecycle.update(created.id, {"title": "New"})
    assert updated.title == "New"
    assert updated.author == "A"
    assert updated.genre == "Fiction"
    assert updated.description == "d"
    assert updated.updated_at >= created.updated_at


async def test_update_soft_deleted_record_keeps_state(lifecycle):
    created = await _create(lifecycle)
    await lifecycle.soft_delete(created.id)
    updated = await lifecycle.update(created.id, {"genre": "Poetry"})
    assert updated.genre == "Poetry"
    assert record_state(updated) is RecordState.SOFT_DELETED


async def test_update_missing_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.update(MISSING, {"title": "x"})


async def test_update_blank_title_is_invalid_input(lifecycle):
    created = await _create(lifecycle)
    with pytest.raises(InvalidInputError) as exc_info:
        await lifecycle.update(created.id, {"title": " "})
    assert exc_info.value.errors[0]["message"] == "Title cannot be empty"


# --- soft delete / restore ----------------------------------------------------

async def test_soft_delete_hides_record_from_default_get(lifecycle):
    created = await _create(lifecycle)
    deleted = await lifecycle.soft_delete(created.id)
    assert deleted.deleted_at is not None
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get(created.id)
    hidden = await lifecycle.get(created.id, include_deleted=True)
    assert record_state(hidden) is RecordState.SOFT_DELETED


async def test_soft_delete_is_idempotent(lifecycle, memory_repository):
    created = await _create(lifecycle)
    first = await lifecycle.soft_delete(created.id)
    second = await lifecycle.soft_delete(created.id)
    assert second.deleted_at == first.deleted_at
    assert memory_repository.calls.count("soft_delete") == 1


async def test_soft_delete_missing_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.soft_delete(MISSING)


async def test_restore_round_trip_returns_original_fields(lifecycle):
    created = await _create(
        lifecycle, isbn="0306406152", genre="Science",
        published_date=date(1980, 1, 1), description="About things",
    )
    await lifecycle.soft_delete(created.id)
    restored = await lifecycle.restore(created.id)

    assert restored.deleted_at is None
    for name in ("id", "title", "author", "isbn", "genre", "published_date", "description"):
        assert getattr(restored, name) == getattr(created, name)
    assert (await lifecycle.get(created.id)).id == created.id


async def test_restore_active_record_is_invalid_state(lifecycle):
    created = await _create(lifecycle)
    with pytest.raises(InvalidStateError) as exc_info:
        await lifecycle.restore(created.id)
    assert exc_info.value.message == "Book is not deleted"


async def test_restore_missing_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.restore(MISSING)


# --- hard delete --------------------------------------------------------------

async def test_hard_delete_active_record_is_terminal(lifecycle):
    created = await _create(lifecycle)
    await lifecycle.hard_delete(created.id)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.get(created.id, include_deleted=True)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.restore(created.id)


async def test_hard_delete_soft_deleted_record_is_terminal(lifecycle):
    created = await _create(lifecycle)
    await lifecycle.soft_delete(created.id)
    await lifecycle.hard_delete(created.id)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.restore(created.id)
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.update(created.id, {"title": "x"})


async def test_hard_delete_missing_raises_not_found(lifecycle):
    with pytest.raises(ResourceNotFoundError):
        await lifecycle.hard_delete(MISSING)


async def test_hard_delete_frees_isbn(lifecycle):
    created = await _create(lifecycle, isbn="0306406152")
    await lifecycle.hard_delete(created.id)
    again = await _create(lifecycle, isbn="0306406152")
    assert again.id != created.id


# --- list ---------------------------------------------------------------------

async def test_list_excludes_soft_deleted_by_default(lifecycle):
    keep = await _create(lifecycle, title="Keep")
    gone = await _create(lifecycle, title="Gone")
    await lifecycle.soft_delete(gone.id)

    records, total = await lifecycle.list(build_query_plan({}))
    assert total == 1
    assert [r.id for r in records] == [keep.id]

    records, total = await lifecycle.list(build_query_plan({"includeDeleted": True}))
    assert total == 2


async def test_list_filters_compose_with_and(lifecycle):
    await _create(lifecycle, title="Harry Potter", author="J.K. Rowling", genre="Fantasy")
    await _create(lifecycle, title="Harry Potter 2", author="J.K. Rowling", genre="Drama")
    await _create(lifecycle, title="1984", author="George Orwell", genre="Fantasy")

    records, total = await lifecycle.list(
        build_query_plan({"author": "Rowl", "genre": "Fantasy"}),
    )
    assert total == 1
    assert records[0].title == "Harry Potter"


async def test_list_sort_precedence_left_to_right(lifecycle):
    await _create(lifecycle, title="B", author="Zed")
    await _create(lifecycle, title="B", author="Amy")
    await _create(lifecycle, title="C", author="Max")
    await _create(lifecycle, title="A", author="Bob")

    records, _ = await lifecycle.list(build_query_plan({"sort": "-title,author"}))
    assert [(r.title, r.author) for r in records] == [
        ("C", "Max"), ("B", "Amy"), ("B", "Zed"), ("A", "Bob"),
    ]


async def test_list_pages_through_results(lifecycle):
    for i in range(25):
        await _create(lifecycle, title=f"Book {i:02d}")

    records, total = await lifecycle.list(
        build_query_plan({"page": 3, "limit": 10, "sort": "title"}),
    )
    assert total == 25
    assert [r.title for r in records] == [f"Book {i:02d}" for i in range(20, 25)]


async def test_list_unknown_sort_field_surfaces_store_error(lifecycle):
    await _create(lifecycle)
    with pytest.raises(StoreError):
        await lifecycle.list(build_query_plan({"sort": "popularity"}))


async def test_get_soft_deleted_reports_get_operation(lifecycle, memory_repository):
    created = await _create(lifecycle)
    await lifecycle.soft_delete(created.id)
    with pytest.raises(ResourceNotFoundError) as exc_info:
        await lifecycle.get(created.id)
    assert exc_info.value.context.operation == "get"
    assert memory_repository.calls[-1] == "get"
