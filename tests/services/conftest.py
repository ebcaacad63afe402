"""Route test fixtures — async DB + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test DB session
    - db_manager patched so background tasks (audit writes) hit the same DB

Design Decisions:
    - SQLite in-memory: fast, no external dependency; cart upserts use the
      SQLite ON CONFLICT dialect in tests and the PostgreSQL one in production
"""

import pytest
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.config import get_settings
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.security import hash_password
from app.models.product import Product
from app.models.user import User
import app.infrastructure.database as db_module
from app.main import app
from tests.services.route_helpers import ADMIN_PASSWORD, register


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def user_token(client) -> str:
    body = await register(client, "buyer@example.com", name="Buyer")
    return body["token"]


@pytest.fixture
async def admin_user(test_db) -> User:
    """Admins are never self-registered: insert one directly."""
    admin = User(
        name="Admin",
        email="admin@example.com",
        password_hash=hash_password(ADMIN_PASSWORD, get_settings().bcrypt_rounds),
        role="admin",
        token_version=0,
    )
    test_db.add(admin)
    await test_db.commit()
    await test_db.refresh(admin)
    return admin


@pytest.fixture
async def admin_token(client, admin_user) -> str:
    res = await client.post("/api/auth/login", json={
        "email": admin_user.email, "password": ADMIN_PASSWORD,
    })
    assert res.status_code == 200, res.text
    return res.json()["token"]


@pytest.fixture
def make_product(test_db):
    """Insert a product directly; returns the persisted row."""
    counter = {"n": 0}

    async def _make(**overrides) -> Product:
        counter["n"] += 1
        data = {
            "title": f"Test Speaker {counter['n']}",
            "slug": f"test-speaker-{counter['n']}",
            "price": 50,
            "stock": 5,
            "category": "speaker",
            "images": [f"https://img.example.com/{counter['n']}.png"],
            "active": True,
        }
        data.update(overrides)
        product = Product(**data)
        test_db.add(product)
        await test_db.commit()
        await test_db.refresh(product)
        return product

    return _make
