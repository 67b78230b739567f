"""Rating submission and rating listings.

Every write here locks the store row first, then changes the rating, then
recomputes the store aggregates before the request transaction commits.
"""

import logging

from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.exceptions import Conflict, NotFound
from store_rating.db.aggregates import lock_store, refresh_store_aggregates
from store_rating.db.query import ListingSpec, ListParams, build_listing, paginate
from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import User, UserRole
from store_rating.schemas.auth import Principal
from store_rating.schemas.rating import RatingCreate, RatingUpdate
from store_rating.services.access import ensure_role, flush_or_conflict

logger = logging.getLogger(__name__)

DUPLICATE_RATING = "You have already rated this store. Use PUT to update your rating."

# Ratings of one store, with the rater
STORE_RATINGS_LISTING = ListingSpec(
    sortable={
        "rating": Rating.rating,
        "created_at": Rating.created_at,
        "user_name": User.name,
        "user_email": User.email,
    },
    default_sort="created_at",
    default_order="desc",
    tiebreak=(Rating.id.asc(),),
)

# Ratings by one user, with the rated store
USER_RATINGS_LISTING = ListingSpec(
    sortable={
        "rating": Rating.rating,
        "created_at": Rating.created_at,
        "store_name": Store.name,
    },
    default_sort="created_at",
    default_order="desc",
    tiebreak=(Rating.id.asc(),),
)


def _store_ratings_select():
    return select(
        Rating.id,
        Rating.rating,
        Rating.comment,
        Rating.created_at,
        Rating.updated_at,
        User.name.label("user_name"),
        User.email.label("user_email"),
    ).join(User, Rating.user_id == User.id)


def _user_ratings_select():
    return select(
        Rating.id,
        Rating.rating,
        Rating.comment,
        Rating.created_at,
        Rating.updated_at,
        Store.id.label("store_id"),
        Store.name.label("store_name"),
        Store.address.label("store_address"),
        Store.average_rating.label("store_average_rating"),
    ).join(Store, Rating.store_id == Store.id)


async def _find_rating(session: AsyncSession, user_id: int, store_id: int) -> Rating | None:
    result = await session.execute(
        select(Rating).where(Rating.user_id == user_id, Rating.store_id == store_id)
    )
    return result.scalar_one_or_none()


async def submit_rating(session: AsyncSession, principal: Principal, data: RatingCreate) -> Rating:
    ensure_role(principal, UserRole.NORMAL_USER)

    if await lock_store(session, data.store_id) is None:
        raise NotFound("Store not found")
    if await _find_rating(session, principal.id, data.store_id) is not None:
        raise Conflict(DUPLICATE_RATING)

    rating = Rating(
        user_id=principal.id,
        store_id=data.store_id,
        rating=data.rating,
        comment=data.comment,
    )
    session.add(rating)
    await flush_or_conflict(session, DUPLICATE_RATING)
    await refresh_store_aggregates(session, data.store_id)
    await session.refresh(rating)

    logger.info("User %s rated store %s: %s", principal.id, data.store_id, data.rating)
    return rating


async def update_rating(
    session: AsyncSession,
    principal: Principal,
    store_id: int,
    data: RatingUpdate,
) -> Rating:
    ensure_role(principal, UserRole.NORMAL_USER)

    if await lock_store(session, store_id) is None:
        raise NotFound("Store not found")
    rating = await _find_rating(session, principal.id, store_id)
    if rating is None:
        raise NotFound("You have not rated this store yet. Use POST to submit a new rating.")

    rating.rating = data.rating
    rating.comment = data.comment
    await session.flush()
    await refresh_store_aggregates(session, store_id)
    await session.refresh(rating)

    logger.info("User %s updated rating of store %s: %s", principal.id, store_id, data.rating)
    return rating


async def delete_rating(session: AsyncSession, principal: Principal, store_id: int) -> None:
    ensure_role(principal, UserRole.NORMAL_USER)

    store = await lock_store(session, store_id)
    rating = await _find_rating(session, principal.id, store_id) if store else None
    if rating is None:
        raise NotFound("Rating not found")

    await session.delete(rating)
    await session.flush()
    await refresh_store_aggregates(session, store_id)

    logger.info("User %s deleted rating of store %s", principal.id, store_id)


async def store_ratings_page(
    session: AsyncSession,
    store_id: int,
    params: ListParams,
) -> tuple[list[dict], dict]:
    """One page of a store's ratings. Callers check access to the store."""
    listing = build_listing(
        _store_ratings_select(), STORE_RATINGS_LISTING, params, [Rating.store_id == store_id]
    )
    return await paginate(session, listing)


async def list_ratings_for_store(
    session: AsyncSession,
    store_id: int,
    params: ListParams,
) -> tuple[list[dict], dict, dict]:
    """Ratings of a store with live count/average, visible to any signed-in user."""
    if await session.get(Store, store_id) is None:
        raise NotFound("Store not found")

    rows, pagination = await store_ratings_page(session, store_id, params)
    for row in rows:
        row.pop("user_email", None)

    total, average = (
        await session.execute(
            select(
                func.count(Rating.id),
                func.round(func.coalesce(func.avg(Rating.rating), 0), 1),
            ).where(Rating.store_id == store_id)
        )
    ).one()
    stats = {"total_ratings": total, "average_rating": float(average)}
    return rows, pagination, stats


async def list_my_ratings(
    session: AsyncSession,
    principal: Principal,
    params: ListParams,
) -> tuple[list[dict], dict]:
    ensure_role(principal, UserRole.NORMAL_USER)
    listing = build_listing(
        _user_ratings_select(), USER_RATINGS_LISTING, params, [Rating.user_id == principal.id]
    )
    return await paginate(session, listing)


async def list_user_ratings(
    session: AsyncSession,
    principal: Principal,
    user_id: int,
    params: ListParams,
) -> tuple[list[dict], dict]:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    if await session.get(User, user_id) is None:
        raise NotFound("User not found")

    listing = build_listing(
        _user_ratings_select(), USER_RATINGS_LISTING, params, [Rating.user_id == user_id]
    )
    return await paginate(session, listing)


async def rating_stats(session: AsyncSession, principal: Principal) -> dict:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)

    total, average, stores, users = (
        await session.execute(
            select(
                func.count(Rating.id),
                func.coalesce(func.avg(Rating.rating), 0),
                func.count(distinct(Rating.store_id)),
                func.count(distinct(Rating.user_id)),
            )
        )
    ).one()
    distribution = (
        await session.execute(
            select(Rating.rating, func.count(Rating.id))
            .group_by(Rating.rating)
            .order_by(Rating.rating)
        )
    ).all()

    return {
        "total_ratings": total,
        "overall_average_rating": round(float(average), 1),
        "stores_with_ratings": stores,
        "users_who_rated": users,
        "distribution": [{"rating": r, "count": c} for r, c in distribution],
    }
