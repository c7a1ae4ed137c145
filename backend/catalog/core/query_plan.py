"""Query Planner — turns raw list parameters into an immutable, store-agnostic plan.

Invariants:
    - build_query_plan is PURE: no IO, never touches the store, never raises on validated input
    - offset == (page - 1) * limit; plan.limit == requested limit
    - Filters compose with AND; absent or empty parameters add no filter
    - Sort keys keep left-to-right precedence; no sort → created_at descending

Design Decisions:
    - Tagged filter variants (frozen dataclasses) over a mutable where-dict: stores
      pattern-match on the type instead of inspecting operator keys
    - Sort field names are passed through without a whitelist. Resolution (and
      rejection of unknown names) is the store's job — known gap, kept on purpose
    - page/limit bounds are enforced by the request schema, not here
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Union

from catalog.core.domain_types import SortDirection

DEFAULT_PAGE: int = 1
DEFAULT_LIMIT: int = 10
DEFAULT_SORT_FIELD: str = "created_at"

SUBSTRING_FIELDS: tuple[str, ...] = ("title", "author", "genre")
EXACT_FIELDS: tuple[str, ...] = ("isbn",)
DATE_RANGE_FIELD: str = "published_date"


# ─── Plan Types ──────────────────────────────────────────────────

@dataclass(frozen=True)
class SubstringFilter:
    """field contains value."""
    field: str
    value: str


@dataclass(frozen=True)
class ExactFilter:
    """field equals value."""
    field: str
    value: str


@dataclass(frozen=True)
class DateRangeFilter:
    """Inclusive range; either bound may be open."""
    field: str
    after: date | None = None
    before: date | None = None


Filter = Union[SubstringFilter, ExactFilter, DateRangeFilter]


@dataclass(frozen=True)
class SortKey:
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


DEFAULT_SORT: tuple[SortKey, ...] = (
    SortKey(DEFAULT_SORT_FIELD, SortDirection.DESC),
)


@dataclass(frozen=True)
class QueryPlan:
    """Normalized list query consumed by a BookRepository."""
    filters: tuple[Filter, ...] = ()
    sort: tuple[SortKey, ...] = DEFAULT_SORT
    limit: int = DEFAULT_LIMIT
    offset: int = 0
    page: int = DEFAULT_PAGE
    include_deleted: bool = False


# ─── Planner ─────────────────────────────────────────────────────

def build_query_plan(params: Mapping[str, Any]) -> QueryPlan:
    """Build a QueryPlan from list-request parameters. Pure, no IO.

    Accepts both the wire names (publishedAfter) and snake_case
    (published_after) for the date bounds.
    """
    page = _as_int(params.get("page"), DEFAULT_PAGE)
    limit = _as_int(params.get("limit"), DEFAULT_LIMIT)

    return QueryPlan(
        filters=parse_filters(params),
        sort=parse_sort(params.get("sort")),
        limit=limit,
        offset=(page - 1) * limit,
        page=page,
        include_deleted=_as_bool(
            _first(params, "include_deleted", "includeDeleted"),
        ),
    )


def parse_filters(params: Mapping[str, Any]) -> tuple[Filter, ...]:
    """Collect every supplied filter. Order follows the field tables above."""
    filters: list[Filter] = []
    for name in SUBSTRING_FIELDS:
        value = params.get(name)
        if value:
            filters.append(SubstringFilter(name, str(value)))
    for name in EXACT_FIELDS:
        value = params.get(name)
        if value:
            filters.append(ExactFilter(name, str(value)))

    after = _as_date(_first(params, "publishedAfter", "published_after"))
    before = _as_date(_first(params, "publishedBefore", "published_before"))
    if after is not None or before is not None:
        filters.append(DateRangeFilter(DATE_RANGE_FIELD, after, before))
    return tuple(filters)


def parse_sort(sort: str | None) -> tuple[SortKey, ...]:
    """Parse "-title,author" into ordered SortKeys.

    Empty segments (trailing commas, a bare "-") are skipped; if nothing
    is left the default order applies.
    """
    if not sort:
        return DEFAULT_SORT

    keys: list[SortKey] = []
    for raw in sort.split(","):
        token = raw.strip()
        if token.startswith("-"):
            name, direction = token[1:].strip(), SortDirection.DESC
        else:
            name, direction = token, SortDirection.ASC
        if name:
            keys.append(SortKey(name, direction))
    return tuple(keys) or DEFAULT_SORT


# ─── Helpers ─────────────────────────────────────────────────────

def _first(params: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        value = params.get(name)
        if value:
            return value
    return None


def _as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _as_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _as_bool(value: Any) -> bool:
    """Query-string flags arrive as text: only "true"/"1" switch them on."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1")
    return bool(value)
