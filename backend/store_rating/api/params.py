"""Query-string parsing shared by list endpoints.

Values are taken as raw strings; the query builder decides the fallbacks.
"""

from fastapi import Query

from store_rating.db.query import ListParams


def list_params(
    page: str | None = None,
    limit: str | None = None,
    sort_by: str | None = Query(None, alias="sortBy"),
    sort_order: str | None = Query(None, alias="sortOrder"),
    search: str | None = None,
    search_by: str | None = Query(None, alias="searchBy"),
) -> ListParams:
    return ListParams(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
        search_by=search_by,
    )
