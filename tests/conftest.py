import os
from datetime import datetime, timedelta

import pytest
import pytest_asyncio

# Configure test environment before the application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-1234")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from harmony.core.config import settings  # noqa: E402
from harmony.infra.db import get_db  # noqa: E402
from harmony.main import app  # noqa: E402
from harmony.models import Base, User  # noqa: E402
from harmony.services.crud import TeamCRUD  # noqa: E402


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """File-backed SQLite so separate sessions use separate connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'harmony.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_factory):
    """alice, bob and carol, committed"""
    people = {
        name: User(id=f"user-{name}", email=f"{name}@example.com", username=name.capitalize())
        for name in ("alice", "bob", "carol")
    }
    async with session_factory() as session:
        session.add_all(people.values())
        await session.commit()
    return {name: user.id for name, user in people.items()}


@pytest_asyncio.fixture
async def team(session_factory, users):
    """Team "Eng" owned by alice"""
    async with session_factory() as session:
        owner = await session.get(User, users["alice"])
        created = await TeamCRUD.create(session, owner, "Eng")
        await session.commit()
    return {"id": created.id, "uid": created.uid, "name": created.name}


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def make(user_id: str, expires_in: timedelta = timedelta(minutes=30)) -> dict:
        return {"Authorization": f"Bearer {mint_token(user_id, expires_in)}"}

    return make


def mint_token(user_id: str, expires_in: timedelta) -> str:
    """Token shaped like the ones the auth service issues"""
    now = datetime.utcnow()
    claims = {"sub": user_id, "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
