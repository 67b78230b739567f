"""Unit tests for the list query builder."""

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from store_rating.db.query import (
    ListingSpec,
    ListParams,
    build_listing,
    normalize_positive_int,
    paginate,
    pagination_block,
)
from store_rating.models import Store
from store_rating.services.stores import STORE_LISTING
from store_rating.services.users import USER_LISTING


def _sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


# ── Page / limit coercion ──────────────────────────

@pytest.mark.parametrize(
    "raw, expected",
    [("3", 3), (7, 7), (" 2 ", 2), ("0", 10), (-4, 10), ("abc", 10), (None, 10), ("1.5", 10), ("", 10)],
)
def test_normalize_positive_int(raw, expected):
    assert normalize_positive_int(raw, 10) == expected


def test_invalid_page_and_limit_fall_back_to_defaults():
    listing = build_listing(select(Store.id), STORE_LISTING, ListParams(page="-1", limit="zero"))
    assert listing.page == 1
    assert listing.limit == 10


# ── Allow-lists ────────────────────────────────────

def test_unknown_sort_field_falls_back_to_default():
    listing = build_listing(
        select(Store.id), STORE_LISTING, ListParams(sort_by="password; DROP TABLE users")
    )
    assert listing.sort_key == "name"
    assert listing.sort_order == "asc"
    assert "DROP" not in _sql(listing.query)
    assert "ORDER BY stores.name ASC, stores.id ASC" in _sql(listing.query)


def test_sort_order_is_case_insensitive():
    listing = build_listing(
        select(Store.id), STORE_LISTING, ListParams(sort_by="average_rating", sort_order="DESC")
    )
    assert listing.sort_order == "desc"
    assert "ORDER BY stores.average_rating DESC" in _sql(listing.query)


def test_unknown_sort_order_uses_listing_default():
    spec = ListingSpec(
        sortable={"created_at": Store.created_at}, default_sort="created_at", default_order="desc"
    )
    listing = build_listing(select(Store.id), spec, ListParams(sort_order="sideways"))
    assert listing.sort_order == "desc"


def test_unknown_search_field_falls_back_and_binds_text():
    listing = build_listing(
        select(Store.id),
        STORE_LISTING,
        ListParams(search="o'brien%", search_by="email"),
    )
    compiled = listing.query.compile(dialect=postgresql.dialect())
    sql = str(compiled)

    assert "lower(stores.name) LIKE lower(" in sql
    assert "o'brien" not in sql
    assert "%o'brien%%" in compiled.params.values()


def test_search_and_filters_are_shared_with_count_query():
    listing = build_listing(
        select(Store.id),
        STORE_LISTING,
        ListParams(search="market"),
        filters=[Store.owner_id == 5],
    )
    count_sql = _sql(listing.count_query)
    assert "stores.owner_id = " in count_sql
    assert "lower(stores.name) LIKE" in count_sql
    assert "LIMIT" not in count_sql


def test_role_is_searchable_for_users():
    listing = build_listing(
        select(Store.id), USER_LISTING, ListParams(search="owner", search_by="role")
    )
    assert "lower(users.role)" in _sql(listing.query)


def test_spec_rejects_default_outside_allow_list():
    with pytest.raises(ValueError):
        ListingSpec(sortable={"name": Store.name}, default_sort="email")


# ── Pagination block ───────────────────────────────

def test_pagination_block_empty():
    assert pagination_block(1, 10, 0) == {
        "currentPage": 1,
        "totalPages": 0,
        "total": 0,
        "hasNext": False,
        "hasPrev": False,
    }


def test_pagination_block_middle_page():
    block = pagination_block(2, 10, 25)
    assert block["totalPages"] == 3
    assert block["hasNext"] is True
    assert block["hasPrev"] is True


def test_pagination_block_past_the_end():
    block = pagination_block(5, 10, 25)
    assert block["hasNext"] is False
    assert block["hasPrev"] is True


@pytest.mark.asyncio
async def test_paginate_offsets_and_counts(session, factory):
    for i in range(7):
        await factory.store(name=f"Paginated Store {chr(ord('A') + i)} Outlet")

    listing = build_listing(
        select(Store.id, Store.name), STORE_LISTING, ListParams(page="2", limit="3")
    )
    rows, pagination = await paginate(session, listing)

    assert [r["name"] for r in rows] == [
        "Paginated Store D Outlet",
        "Paginated Store E Outlet",
        "Paginated Store F Outlet",
    ]
    assert pagination == {
        "currentPage": 2,
        "totalPages": 3,
        "total": 7,
        "hasNext": True,
        "hasPrev": True,
    }
