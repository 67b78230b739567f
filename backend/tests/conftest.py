import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from store_rating.db.base import Base
from store_rating.models import Store, User, UserRole
from store_rating.schemas.auth import Principal


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with factory() as session:
        yield session


class Factory:
    """Inserts rows directly, bypassing the services."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    async def user(self, role: UserRole = UserRole.NORMAL_USER, name: str | None = None, **kwargs) -> User:
        n = self._next()
        user = User(
            name=name or f"Test User Number {n:04d} Fullname",
            email=kwargs.pop("email", f"user{n}@example.com"),
            password="not-a-real-hash",
            address=kwargs.pop("address", f"{n} Test Street, Springfield"),
            role=role,
            **kwargs,
        )
        self.session.add(user)
        await self.session.flush()
        return user

    async def store(self, owner: User | None = None, name: str | None = None, **kwargs) -> Store:
        n = self._next()
        store = Store(
            name=name or f"Test Store Number {n:04d} Market",
            email=kwargs.pop("email", f"store{n}@example.com"),
            address=kwargs.pop("address", f"{n} Market Road, Shelbyville"),
            owner_id=owner.id if owner else None,
            **kwargs,
        )
        self.session.add(store)
        await self.session.flush()
        return store


@pytest_asyncio.fixture
async def factory(session):
    return Factory(session)


def principal_for(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)


@pytest.fixture
def as_principal():
    return principal_for


@pytest_asyncio.fixture
async def admin(factory):
    return await factory.user(UserRole.SYSTEM_ADMIN, name="Primary System Administrator")


@pytest_asyncio.fixture
async def admin_principal(admin):
    return principal_for(admin)
