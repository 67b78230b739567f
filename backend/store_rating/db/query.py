"""Filter / sort / search / paginate for list endpoints.

Request parameters are untrusted. Column names only ever come from the fixed
mappings of a :class:`ListingSpec`; an unknown ``sortBy`` or ``searchBy``
silently falls back to the listing default instead of failing the request.
Search text and filter values are always bound parameters.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, Select, and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.config import settings

DEFAULT_PAGE = 1
SORT_ORDERS = ("asc", "desc")


def normalize_positive_int(value: Any, default: int) -> int:
    """Parse a page/limit value, falling back to ``default`` unless it is a positive integer."""
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass(frozen=True)
class ListParams:
    """Raw list parameters as they arrive on the query string."""

    page: Any = None
    limit: Any = None
    sort_by: str | None = None
    sort_order: str | None = None
    search: str | None = None
    search_by: str | None = None


@dataclass(frozen=True)
class ListingSpec:
    """Allow-lists mapping logical sort/search keys to column expressions."""

    sortable: Mapping[str, ColumnElement]
    default_sort: str
    default_order: str = "asc"
    searchable: Mapping[str, ColumnElement] = field(default_factory=dict)
    default_search: str | None = None
    tiebreak: Sequence[ColumnElement] = ()

    def __post_init__(self):
        if self.default_sort not in self.sortable:
            raise ValueError(f"default sort {self.default_sort!r} is not sortable")
        if self.default_order not in SORT_ORDERS:
            raise ValueError(f"default order must be one of {SORT_ORDERS}")
        if self.searchable and self.default_search not in self.searchable:
            raise ValueError(f"default search {self.default_search!r} is not searchable")

    def sort_key(self, requested: str | None) -> str:
        return requested if requested in self.sortable else self.default_sort

    def sort_direction(self, requested: str | None) -> str:
        if requested and requested.lower() in SORT_ORDERS:
            return requested.lower()
        return self.default_order

    def search_key(self, requested: str | None) -> str | None:
        if not self.searchable:
            return None
        return requested if requested in self.searchable else self.default_search


@dataclass
class Listing:
    query: Select
    count_query: Select
    page: int
    limit: int
    sort_key: str
    sort_order: str


def build_listing(
    base: Select,
    spec: ListingSpec,
    params: ListParams,
    filters: Sequence[ColumnElement] = (),
) -> Listing:
    """Build the page query and a count query sharing the same predicates.

    ``base`` is the select producing the rows (joins included); ``filters``
    are extra scoping predicates, ANDed with the search predicate.
    """
    page = normalize_positive_int(params.page, DEFAULT_PAGE)
    limit = normalize_positive_int(params.limit, settings.DEFAULT_PAGE_SIZE)

    predicates = list(filters)
    search_key = spec.search_key(params.search_by)
    if params.search and search_key is not None:
        column = spec.searchable[search_key]
        predicates.append(func.lower(column).like(func.lower(f"%{params.search}%")))

    where = and_(*predicates) if predicates else None

    query = base if where is None else base.where(where)
    count_query = select(func.count()).select_from(query.order_by(None).subquery())

    sort_key = spec.sort_key(params.sort_by)
    sort_order = spec.sort_direction(params.sort_order)
    column = spec.sortable[sort_key]
    ordering = column.asc() if sort_order == "asc" else column.desc()
    query = (
        query.order_by(ordering, *spec.tiebreak)
        .limit(limit)
        .offset((page - 1) * limit)
    )

    return Listing(
        query=query,
        count_query=count_query,
        page=page,
        limit=limit,
        sort_key=sort_key,
        sort_order=sort_order,
    )


def pagination_block(page: int, limit: int, total: int) -> dict:
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "total": total,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


async def paginate(session: AsyncSession, listing: Listing) -> tuple[list, dict]:
    """Execute a listing. Returns ``(rows, pagination)`` with each row as a plain dict."""
    total = (await session.execute(listing.count_query)).scalar_one()
    result = await session.execute(listing.query)
    rows = [dict(row) for row in result.mappings().all()]
    return rows, pagination_block(listing.page, listing.limit, total)
