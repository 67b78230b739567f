"""User service: admin management, profile access, cascading delete."""

import pytest

from store_rating.core.exceptions import Conflict, Forbidden, InvalidCredentials, NoOp, NotFound
from store_rating.db.query import ListParams
from store_rating.models import Store, User, UserRole
from store_rating.schemas.rating import RatingCreate
from store_rating.schemas.user import UserCreate, UserRegister, UserUpdate
from store_rating.services import ratings as rating_service
from store_rating.services import users as user_service


@pytest.mark.asyncio
async def test_list_users_filters_by_role_and_search(session, factory, admin_principal):
    await factory.user(UserRole.STORE_OWNER, name="Olivia Owner Of The Bakery")
    await factory.user(UserRole.NORMAL_USER, name="Nathan Normal Shopper Person")

    rows, pagination = await user_service.list_users(
        session, admin_principal, ListParams(), role="store_owner"
    )
    assert [r["name"] for r in rows] == ["Olivia Owner Of The Bakery"]
    assert pagination["total"] == 1

    rows, _ = await user_service.list_users(
        session, admin_principal, ListParams(search="SHOPPER")
    )
    assert [r["name"] for r in rows] == ["Nathan Normal Shopper Person"]

    rows, _ = await user_service.list_users(
        session, admin_principal, ListParams(search="owner", search_by="role")
    )
    assert [r["role"] for r in rows] == [UserRole.STORE_OWNER]


@pytest.mark.asyncio
async def test_list_users_unknown_role_matches_nothing(session, factory, admin_principal):
    await factory.user()
    rows, pagination = await user_service.list_users(
        session, admin_principal, ListParams(), role="superhero"
    )
    assert rows == []
    assert pagination["totalPages"] == 0


@pytest.mark.asyncio
async def test_list_users_requires_admin(session, factory, as_principal):
    user = await factory.user()
    with pytest.raises(Forbidden):
        await user_service.list_users(session, as_principal(user), ListParams())


@pytest.mark.asyncio
async def test_store_owner_profile_includes_store_rating(session, factory, as_principal):
    owner = await factory.user(UserRole.STORE_OWNER)
    store = await factory.store(owner=owner)
    rater = await factory.user()
    await rating_service.submit_rating(session, as_principal(rater), RatingCreate(storeId=store.id, rating=4))

    profile = await user_service.get_user(session, as_principal(owner), owner.id)
    assert profile["store_id"] == store.id
    assert profile["store_rating"] == pytest.approx(4.0)

    rater_profile = await user_service.get_user(session, as_principal(rater), rater.id)
    assert rater_profile["store_id"] is None


@pytest.mark.asyncio
async def test_user_cannot_read_someone_else(session, factory, as_principal, admin):
    user = await factory.user()
    with pytest.raises(Forbidden):
        await user_service.get_user(session, as_principal(user), admin.id)


@pytest.mark.asyncio
async def test_create_and_register_users(session, admin_principal):
    created = await user_service.create_user(
        session,
        admin_principal,
        UserCreate(
            name="Freshly Created Store Owner",
            email="owner@example.com",
            address="5 Owner Way",
            password="Secret@123",
            role=UserRole.STORE_OWNER,
        ),
    )
    assert created.role == UserRole.STORE_OWNER
    assert created.password != "Secret@123"

    registered = await user_service.register_user(
        session,
        UserRegister(
            name="Self Registered Regular User",
            email="self@example.com",
            address="6 Self Street",
            password="Secret@123",
        ),
    )
    assert registered.role == UserRole.NORMAL_USER
    assert await user_service.authenticate(session, "self@example.com", "Secret@123") is not None
    assert await user_service.authenticate(session, "self@example.com", "wrong") is None

    with pytest.raises(Conflict):
        await user_service.register_user(
            session,
            UserRegister(
                name="Duplicate Email Registration",
                email="self@example.com",
                address="7 Copy Street",
                password="Secret@123",
            ),
        )


@pytest.mark.asyncio
async def test_update_user(session, factory, admin_principal):
    user = await factory.user()
    await factory.user(email="taken@example.com")

    with pytest.raises(NoOp):
        await user_service.update_user(session, admin_principal, user.id, UserUpdate())
    with pytest.raises(Conflict):
        await user_service.update_user(session, admin_principal, user.id, UserUpdate(email="taken@example.com"))
    with pytest.raises(NotFound):
        await user_service.update_user(session, admin_principal, 9999, UserUpdate(address="Nowhere"))

    updated = await user_service.update_user(
        session, admin_principal, user.id, UserUpdate(role=UserRole.STORE_OWNER)
    )
    assert updated["role"] == UserRole.STORE_OWNER


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(session, admin, admin_principal):
    with pytest.raises(Forbidden):
        await user_service.delete_user(session, admin_principal, admin.id)


@pytest.mark.asyncio
async def test_delete_user_cascades_and_recomputes(session, factory, admin_principal, as_principal):
    owner = await factory.user(UserRole.STORE_OWNER)
    owned = await factory.store(owner=owner)
    rated = await factory.store()
    doomed, other = await factory.user(), await factory.user()

    await rating_service.submit_rating(session, as_principal(doomed), RatingCreate(storeId=rated.id, rating=1))
    await rating_service.submit_rating(session, as_principal(other), RatingCreate(storeId=rated.id, rating=5))
    await rating_service.submit_rating(session, as_principal(doomed), RatingCreate(storeId=owned.id, rating=3))

    await user_service.delete_user(session, admin_principal, doomed.id)
    store = await session.get(Store, rated.id, populate_existing=True)
    assert (store.total_ratings, store.average_rating) == (1, pytest.approx(5.0))

    await user_service.delete_user(session, admin_principal, owner.id)
    assert await session.get(User, owner.id) is None
    assert await session.get(Store, owned.id) is None


@pytest.mark.asyncio
async def test_change_password(session, admin_principal, as_principal):
    user = await user_service.create_user(
        session,
        admin_principal,
        UserCreate(
            name="Password Changing Person",
            email="pw@example.com",
            address="8 Key Lane",
            password="Before@123",
        ),
    )
    principal = as_principal(user)

    with pytest.raises(InvalidCredentials) as exc_info:
        await user_service.change_password(session, principal, "wrong", "After@1234")
    assert exc_info.value.status_code == 400

    await user_service.change_password(session, principal, "Before@123", "After@1234")
    assert await user_service.authenticate(session, "pw@example.com", "After@1234") is not None


@pytest.mark.asyncio
async def test_dashboard_stats(session, factory, admin_principal):
    await factory.user(UserRole.STORE_OWNER)
    await factory.user()
    await factory.store()

    stats = await user_service.dashboard_stats(session, admin_principal)
    assert stats == {
        "total_users": 3,
        "normal_users": 1,
        "store_owners": 1,
        "admin_users": 1,
        "total_stores": 1,
        "total_ratings": 0,
    }


@pytest.mark.asyncio
async def test_bootstrap_admin_is_created_once(session):
    assert await user_service.ensure_bootstrap_admin(
        session, "Bootstrap System Administrator", "root@example.com", "Root@1234"
    )
    assert not await user_service.ensure_bootstrap_admin(
        session, "Bootstrap System Administrator", "root@example.com", "Root@1234"
    )
