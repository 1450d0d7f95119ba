import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.models  # noqa: F401
from helpers import auth_headers
from storefront.core.db import Base, enable_sqlite_foreign_keys, get_db
from storefront.models.product_models import Product
from storefront.models.user_models import User
from main import app


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite DB shared by every session of a test."""
    _engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    event.listen(_engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_product(db_session):
    async def _make(price="100.00", name="Linen Shirt", category="shirts", in_stock=True, featured=False):
        product = Product(
            name=name,
            category=category,
            price=Decimal(str(price)),
            in_stock=in_stock,
            featured=featured,
        )
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product
    return _make


# --------------------------
# API fixtures
# --------------------------
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
def make_user(db_session):
    async def _make(username="admin@example.com", role="admin", password_hash="not-used"):
        user = User(username=username, password_hash=password_hash, role=role, is_active=True, token_version=0)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user
    return _make


@pytest_asyncio.fixture
async def admin_headers(make_user):
    return auth_headers(await make_user())
