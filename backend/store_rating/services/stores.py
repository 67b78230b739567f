"""Store management and the store-owner views of a store's ratings."""

import logging

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.exceptions import Conflict, Forbidden, InvalidOwner, NoOp, NotFound
from store_rating.db.query import ListingSpec, ListParams, build_listing, paginate
from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import User, UserRole
from store_rating.schemas.auth import Principal
from store_rating.schemas.store import StoreCreate, StoreUpdate
from store_rating.services.access import ensure_role, flush_or_conflict
from store_rating.services.ratings import store_ratings_page

logger = logging.getLogger(__name__)

STORE_LISTING = ListingSpec(
    sortable={
        "name": Store.name,
        "email": Store.email,
        "address": Store.address,
        "average_rating": Store.average_rating,
        "total_ratings": Store.total_ratings,
        "created_at": Store.created_at,
    },
    default_sort="name",
    default_order="asc",
    searchable={
        "name": Store.name,
        "address": Store.address,
    },
    default_search="name",
    tiebreak=(Store.id.asc(),),
)


def _store_select(principal: Principal):
    """Stores with owner name; normal users also get their own rating of each store."""
    query = select(
        Store.id,
        Store.name,
        Store.email,
        Store.address,
        Store.owner_id,
        Store.average_rating,
        Store.total_ratings,
        Store.created_at,
        User.name.label("owner_name"),
    ).outerjoin(User, Store.owner_id == User.id)

    if principal.role == UserRole.NORMAL_USER:
        query = query.add_columns(Rating.rating.label("user_rating")).outerjoin(
            Rating, and_(Rating.store_id == Store.id, Rating.user_id == principal.id)
        )
    return query


async def _fetch_store(session: AsyncSession, principal: Principal, store_id: int) -> dict:
    result = await session.execute(_store_select(principal).where(Store.id == store_id))
    row = result.mappings().first()
    if row is None:
        raise NotFound("Store not found")
    return dict(row)


def _check_owner_access(principal: Principal, owner_id: int | None) -> None:
    if principal.role == UserRole.STORE_OWNER and owner_id != principal.id:
        raise Forbidden("Access denied")


async def _ensure_email_free(session: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    query = select(Store.id).where(Store.email == email)
    if exclude_id is not None:
        query = query.where(Store.id != exclude_id)
    if (await session.execute(query)).first() is not None:
        raise Conflict("Store already exists with this email")


async def _owned_store_id(session: AsyncSession, owner_id: int) -> int | None:
    result = await session.execute(select(Store.id).where(Store.owner_id == owner_id))
    return result.scalars().first()


async def list_stores(
    session: AsyncSession,
    principal: Principal,
    params: ListParams,
) -> tuple[list[dict], dict]:
    filters = []
    if principal.role == UserRole.STORE_OWNER:
        filters.append(Store.owner_id == principal.id)

    listing = build_listing(_store_select(principal), STORE_LISTING, params, filters)
    return await paginate(session, listing)


async def get_store(session: AsyncSession, principal: Principal, store_id: int) -> dict:
    store = await _fetch_store(session, principal, store_id)
    _check_owner_access(principal, store["owner_id"])
    return store


async def get_owned_store(session: AsyncSession, principal: Principal) -> dict:
    ensure_role(principal, UserRole.STORE_OWNER)
    store_id = await _owned_store_id(session, principal.id)
    if store_id is None:
        raise NotFound("No store found for this owner")
    return await _fetch_store(session, principal, store_id)


async def create_store(session: AsyncSession, principal: Principal, data: StoreCreate) -> dict:
    """Create a store, optionally assigned to a store owner who has none yet."""
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    await _ensure_email_free(session, data.email)

    if data.owner_id is not None:
        # Row lock on the owner serialises concurrent assignments to the same owner
        result = await session.execute(
            select(User).where(User.id == data.owner_id).with_for_update()
        )
        owner = result.scalar_one_or_none()
        if owner is None:
            raise NotFound("Owner not found")
        if owner.role != UserRole.STORE_OWNER:
            raise InvalidOwner("User must be a store owner")
        if await _owned_store_id(session, owner.id) is not None:
            raise Conflict("Store owner already has a store")

    store = Store(
        name=data.name,
        email=data.email,
        address=data.address,
        owner_id=data.owner_id,
    )
    session.add(store)
    await flush_or_conflict(session, "Store already exists with this email")

    logger.info("Created store %s (owner %s)", store.id, data.owner_id)
    return await _fetch_store(session, principal, store.id)


async def update_store(
    session: AsyncSession,
    principal: Principal,
    store_id: int,
    data: StoreUpdate,
) -> dict:
    ensure_role(principal, UserRole.SYSTEM_ADMIN, UserRole.STORE_OWNER)
    store = await session.get(Store, store_id)
    if store is None:
        raise NotFound("Store not found")
    _check_owner_access(principal, store.owner_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise NoOp("No valid fields to update")

    if "email" in changes:
        await _ensure_email_free(session, changes["email"], exclude_id=store_id)

    for key, value in changes.items():
        setattr(store, key, value)
    await flush_or_conflict(session, "Store already exists with this email")

    logger.info("Updated store %s: %s", store_id, sorted(changes))
    return await _fetch_store(session, principal, store_id)


async def delete_store(session: AsyncSession, principal: Principal, store_id: int) -> None:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    store = await session.get(Store, store_id)
    if store is None:
        raise NotFound("Store not found")

    await session.execute(delete(Rating).where(Rating.store_id == store_id))
    await session.delete(store)
    await session.flush()

    logger.info("Deleted store %s", store_id)


async def list_store_ratings(
    session: AsyncSession,
    principal: Principal,
    store_id: int,
    params: ListParams,
) -> tuple[list[dict], dict]:
    """Ratings of a store for its admin or owner."""
    ensure_role(principal, UserRole.SYSTEM_ADMIN, UserRole.STORE_OWNER)
    store = await session.get(Store, store_id)
    if store is None:
        raise NotFound("Store not found")
    _check_owner_access(principal, store.owner_id)

    return await store_ratings_page(session, store_id, params)


async def list_owned_store_ratings(
    session: AsyncSession,
    principal: Principal,
    params: ListParams,
) -> tuple[list[dict], dict]:
    ensure_role(principal, UserRole.STORE_OWNER)
    store_id = await _owned_store_id(session, principal.id)
    if store_id is None:
        raise NotFound("No store found for this owner")
    return await store_ratings_page(session, store_id, params)
