"""User management: listing, profile, admin CRUD, registration."""

import logging

from sqlalchemy import and_, case, delete, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from store_rating.core.exceptions import Conflict, Forbidden, InvalidCredentials, NoOp, NotFound
from store_rating.core.security import hash_password, verify_password
from store_rating.db.aggregates import lock_store, refresh_many
from store_rating.db.query import ListingSpec, ListParams, build_listing, paginate
from store_rating.models.rating import Rating
from store_rating.models.store import Store
from store_rating.models.user import User, UserRole
from store_rating.schemas.auth import Principal
from store_rating.schemas.user import UserCreate, UserRegister, UserUpdate
from store_rating.services.access import ensure_role, flush_or_conflict

logger = logging.getLogger(__name__)

USER_LISTING = ListingSpec(
    sortable={
        "name": User.name,
        "email": User.email,
        "address": User.address,
        "role": User.role,
        "created_at": User.created_at,
    },
    default_sort="name",
    default_order="asc",
    searchable={
        "name": User.name,
        "email": User.email,
        "address": User.address,
        "role": User.role,
    },
    default_search="name",
    tiebreak=(User.id.asc(),),
)


def _user_select():
    """Users with the rating and id of the store they own (store owners only)."""
    is_owner = User.role == UserRole.STORE_OWNER
    return (
        select(
            User.id,
            User.name,
            User.email,
            User.address,
            User.role,
            User.created_at,
            case((is_owner, Store.average_rating), else_=None).label("store_rating"),
            case((is_owner, Store.id), else_=None).label("store_id"),
        )
        .outerjoin(Store, and_(Store.owner_id == User.id, is_owner))
    )


async def _ensure_email_free(session: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    if (await session.execute(query)).first() is not None:
        raise Conflict("Email already exists")


async def _get_user_or_404(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def list_users(
    session: AsyncSession,
    principal: Principal,
    params: ListParams,
    role: str | None = None,
) -> tuple[list[dict], dict]:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)

    filters = []
    if role:
        try:
            filters.append(User.role == UserRole(role))
        except ValueError:
            # Unknown role matches nothing
            filters.append(false())

    listing = build_listing(_user_select(), USER_LISTING, params, filters)
    return await paginate(session, listing)


async def get_user(session: AsyncSession, principal: Principal, user_id: int) -> dict:
    """Admins may read anyone; other roles only their own profile."""
    if not principal.is_admin and principal.id != user_id:
        raise Forbidden("Access denied")

    result = await session.execute(_user_select().where(User.id == user_id))
    row = result.mappings().first()
    if row is None:
        raise NotFound("User not found")
    return dict(row)


async def create_user(session: AsyncSession, principal: Principal, data: UserCreate) -> User:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    return await _insert_user(session, data, data.role)


async def register_user(session: AsyncSession, data: UserRegister) -> User:
    """Self-service sign-up; always creates a normal user."""
    return await _insert_user(session, data, UserRole.NORMAL_USER)


async def _insert_user(session: AsyncSession, data: UserRegister, role: UserRole) -> User:
    await _ensure_email_free(session, data.email)

    user = User(
        name=data.name,
        email=data.email,
        password=hash_password(data.password),
        address=data.address,
        role=role,
    )
    session.add(user)
    await flush_or_conflict(session, "Email already exists")
    await session.refresh(user)

    logger.info("Created user %s with role %s", user.id, role.value)
    return user


async def authenticate(session: AsyncSession, email: str, password: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password):
        return None
    return user


async def update_user(
    session: AsyncSession,
    principal: Principal,
    user_id: int,
    data: UserUpdate,
) -> dict:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    user = await _get_user_or_404(session, user_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise NoOp("No valid fields to update")

    if "email" in changes:
        await _ensure_email_free(session, changes["email"], exclude_id=user_id)

    for key, value in changes.items():
        setattr(user, key, value)
    await flush_or_conflict(session, "Email already exists")

    logger.info("Updated user %s: %s", user_id, sorted(changes))
    return await get_user(session, principal, user_id)


async def change_password(
    session: AsyncSession,
    principal: Principal,
    current_password: str,
    new_password: str,
) -> None:
    user = await _get_user_or_404(session, principal.id)
    if not verify_password(current_password, user.password):
        raise InvalidCredentials("Current password is incorrect")
    user.password = hash_password(new_password)
    await session.flush()


async def delete_user(session: AsyncSession, principal: Principal, user_id: int) -> None:
    """Delete a user with their ratings and owned stores.

    Stores the user rated but does not own get their aggregates recomputed in
    the same transaction.
    """
    ensure_role(principal, UserRole.SYSTEM_ADMIN)
    if principal.id == user_id:
        raise Forbidden("Cannot delete your own account")
    user = await _get_user_or_404(session, user_id)

    owned_ids = set(
        (await session.execute(select(Store.id).where(Store.owner_id == user_id))).scalars()
    )
    rated_ids = set(
        (
            await session.execute(
                select(Rating.store_id).where(Rating.user_id == user_id).distinct()
            )
        ).scalars()
    ) - owned_ids

    for store_id in sorted(rated_ids):
        await lock_store(session, store_id)

    await session.execute(delete(Rating).where(Rating.user_id == user_id))
    if owned_ids:
        await session.execute(delete(Rating).where(Rating.store_id.in_(sorted(owned_ids))))
        await session.execute(delete(Store).where(Store.id.in_(sorted(owned_ids))))
    await session.delete(user)
    await session.flush()
    await refresh_many(session, rated_ids)

    logger.info(
        "Deleted user %s (owned stores %s, refreshed %s)",
        user_id, sorted(owned_ids), sorted(rated_ids),
    )


async def dashboard_stats(session: AsyncSession, principal: Principal) -> dict:
    ensure_role(principal, UserRole.SYSTEM_ADMIN)

    role_counts = dict(
        (await session.execute(select(User.role, func.count(User.id)).group_by(User.role))).all()
    )
    total_stores = (await session.execute(select(func.count(Store.id)))).scalar_one()
    total_ratings = (await session.execute(select(func.count(Rating.id)))).scalar_one()

    return {
        "total_users": sum(role_counts.values()),
        "normal_users": role_counts.get(UserRole.NORMAL_USER, 0),
        "store_owners": role_counts.get(UserRole.STORE_OWNER, 0),
        "admin_users": role_counts.get(UserRole.SYSTEM_ADMIN, 0),
        "total_stores": total_stores,
        "total_ratings": total_ratings,
    }


async def ensure_bootstrap_admin(session: AsyncSession, name: str, email: str, password: str) -> bool:
    """Create the configured admin account if no user holds that email. Returns True if created."""
    existing = await session.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        return False

    session.add(
        User(
            name=name,
            email=email,
            password=hash_password(password),
            address="System Administrator Address",
            role=UserRole.SYSTEM_ADMIN,
        )
    )
    await session.flush()
    logger.info("Created bootstrap admin %s", email)
    return True
