"""Query Planner — verifies pure plan construction from raw list parameters.

Invariants:
    - Defaults: page 1, limit 10, no filters, created_at descending
    - offset == (page - 1) * limit for every page/limit
    - Every supplied filter becomes one plan filter (AND composition)
    - Sort keys keep left-to-right order; "-" means descending
"""

import dataclasses
from datetime import date

import pytest

from catalog.core.domain_types import SortDirection
from catalog.core.query_plan import (
    DEFAULT_SORT, DateRangeFilter, ExactFilter, QueryPlan, SortKey,
    SubstringFilter, build_query_plan, parse_sort,
)


def test_empty_params_produce_default_plan():
    plan = build_query_plan({})
    assert plan.limit == 10
    assert plan.offset == 0
    assert plan.page == 1
    assert plan.filters == ()
    assert plan.sort == (SortKey("created_at", SortDirection.DESC),)
    assert plan.include_deleted is False


def test_pagination_offset_from_page_and_limit():
    plan = build_query_plan({"page": 2, "limit": 5})
    assert plan.limit == 5
    assert plan.offset == 5


def test_string_page_and_limit_are_coerced():
    plan = build_query_plan({"page": "3", "limit": "20"})
    assert plan.page == 3
    assert plan.limit == 20
    assert plan.offset == 40


@pytest.mark.parametrize("page", [1, 2, 7, 50])
@pytest.mark.parametrize("limit", [1, 10, 33, 100])
def test_offset_property_holds(page, limit):
    plan = build_query_plan({"page": page, "limit": limit})
    assert plan.offset == (page - 1) * limit
    assert plan.limit == limit


def test_title_and_author_become_substring_filters():
    plan = build_query_plan({"title": "Harry", "author": "Rowling"})
    assert plan.filters == (
        SubstringFilter("title", "Harry"),
        SubstringFilter("author", "Rowling"),
    )


def test_genre_is_substring_and_isbn_is_exact():
    plan = build_query_plan({"genre": "Fic", "isbn": "9780747532699"})
    assert SubstringFilter("genre", "Fic") in plan.filters
    assert ExactFilter("isbn", "9780747532699") in plan.filters


def test_empty_filter_values_are_ignored():
    plan = build_query_plan({"title": "", "author": None, "isbn": ""})
    assert plan.filters == ()


def test_date_range_with_both_bounds():
    plan = build_query_plan({
        "publishedAfter": "2000-01-01", "publishedBefore": "2010-12-31",
    })
    assert plan.filters == (
        DateRangeFilter("published_date", date(2000, 1, 1), date(2010, 12, 31)),
    )


def test_date_range_open_ended_after_only():
    plan = build_query_plan({"publishedAfter": date(1990, 5, 1)})
    assert plan.filters == (
        DateRangeFilter("published_date", after=date(1990, 5, 1), before=None),
    )


def test_date_range_open_ended_before_only_snake_case():
    plan = build_query_plan({"published_before": "1999-12-31"})
    assert plan.filters == (
        DateRangeFilter("published_date", after=None, before=date(1999, 12, 31)),
    )


def test_all_filters_compose_together():
    plan = build_query_plan({
        "title": "T", "author": "A", "genre": "G", "isbn": "0306406152",
        "publishedAfter": "2001-01-01", "publishedBefore": "2002-01-01",
    })
    assert len(plan.filters) == 5
    assert {type(f) for f in plan.filters} == {
        SubstringFilter, ExactFilter, DateRangeFilter,
    }


def test_sort_parses_direction_and_precedence():
    plan = build_query_plan({"sort": "-title,author"})
    assert plan.sort == (
        SortKey("title", SortDirection.DESC),
        SortKey("author", SortDirection.ASC),
    )
    assert plan.sort[0].descending
    assert not plan.sort[1].descending


def test_sort_skips_empty_segments_and_whitespace():
    assert parse_sort(" -published_date , ,genre,") == (
        SortKey("published_date", SortDirection.DESC),
        SortKey("genre", SortDirection.ASC),
    )


def test_sort_with_only_separators_falls_back_to_default():
    assert parse_sort(",-,") == DEFAULT_SORT


def test_unknown_sort_field_passes_through():
    plan = build_query_plan({"sort": "-popularity"})
    assert plan.sort == (SortKey("popularity", SortDirection.DESC),)


def test_include_deleted_flag_accepts_wire_name():
    assert build_query_plan({"includeDeleted": True}).include_deleted
    assert build_query_plan({"include_deleted": True}).include_deleted


@pytest.mark.parametrize("raw, expected", [
    ("true", True), ("TRUE", True), ("1", True),
    ("false", False), ("0", False), ("", False), ("no", False),
])
def test_include_deleted_parses_text_flags(raw, expected):
    assert build_query_plan({"includeDeleted": raw}).include_deleted is expected
    assert build_query_plan({"include_deleted": raw}).include_deleted is expected


def test_plan_is_immutable():
    plan = build_query_plan({})
    with pytest.raises(dataclasses.FrozenInstanceError):
        plan.limit = 99  # type: ignore[misc]
    assert isinstance(plan, QueryPlan)
