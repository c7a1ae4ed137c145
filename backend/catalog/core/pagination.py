"""Pagination — pure page-metadata computation from a total count.

Invariants:
    - total_pages == ceil(total / limit), 0 when total is 0
    - has_next == page < total_pages; has_prev == page > 1
    - No clamping: a page past the end is valid and simply has no rows

Design Decisions:
    - Frozen dataclass + to_dict(): snake_case in Python, camelCase on the wire
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PaginationMeta:
    total: int
    total_pages: int
    current_page: int
    per_page: int
    has_next: bool
    has_prev: bool

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "totalPages": self.total_pages,
            "currentPage": self.current_page,
            "perPage": self.per_page,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def compute_pagination(total: int, page: int, limit: int) -> PaginationMeta:
    """Derive page metadata. Pure; limit must be >= 1."""
    total_pages = math.ceil(total / limit)
    return PaginationMeta(
        total=total,
        total_pages=total_pages,
        current_page=page,
        per_page=limit,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
