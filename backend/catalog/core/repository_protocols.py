"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, the in-memory test fake needs no base class
    - Async in Protocol: implementations do IO; each call is one state transition,
      no call spans a transaction with another
    - Mutating calls return None when the id does not resolve; the controller
      decides whether that is a NotFound
"""

from typing import Any, Protocol

from catalog.core.domain_types import BookId, BookRecord
from catalog.core.query_plan import QueryPlan


class BookRepository(Protocol):
    """Contract for book persistence — implemented by shell."""
    async def create(self, fields: dict[str, Any]) -> BookRecord: ...
    async def get(
        self, book_id: BookId, include_deleted: bool = False,
    ) -> BookRecord | None: ...
    async def find_and_count(
        self, plan: QueryPlan,
    ) -> tuple[list[BookRecord], int]: ...
    async def update(
        self, book_id: BookId, fields: dict[str, Any],
    ) -> BookRecord | None: ...
    async def soft_delete(self, book_id: BookId) -> BookRecord | None: ...
    async def hard_delete(self, book_id: BookId) -> bool: ...
    async def restore(self, book_id: BookId) -> BookRecord | None: ...
