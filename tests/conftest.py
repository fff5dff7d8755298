"""
Pytest configuration and fixtures.
Provides test app client, async DB session replacement and seed helpers.
"""

import os

# Settings are read at import time
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from contact_directory.main import app
from contact_directory.core.roles import CanonicalRole
from contact_directory.db.base import Base
from contact_directory.db.session import get_db
from contact_directory.deps.auth import TokenAuthorizationGate
from contact_directory.deps.di_container import build_container, set_container
from contact_directory.models import Contact, ContactPage, ContactPageMember, ContactReason
from contact_directory.services.health_service import HealthService


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_TOKEN = "test-token"


class Seeder:
    """Inserts rows directly, bypassing service rules."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def contact(self, name: str = "Jane Doe", is_active: bool = True, **fields) -> Contact:
        return await self._add(Contact(name=name, is_active=is_active, **fields))

    async def page(
        self,
        customer_name: str = "Acme Corp",
        area_code: str = "1234",
        slug: str = None,
        is_published: bool = False,
        **fields,
    ) -> ContactPage:
        return await self._add(ContactPage(
            customer_name=customer_name,
            area_code=area_code,
            slug=slug or f"{customer_name.lower().replace(' ', '-')}-{area_code}",
            is_published=is_published,
            **fields,
        ))

    async def reason(self, label: str, description: str = None) -> ContactReason:
        return await self._add(ContactReason(label=label, description=description))

    async def member(
        self,
        page: ContactPage,
        contact: Contact,
        order_index: int = 0,
        role: str = CanonicalRole.SALES_CONTRACT.value,
    ) -> ContactPageMember:
        return await self._add(ContactPageMember(
            page_id=page.id,
            contact_id=contact.id,
            role=role,
            order_index=order_index,
        ))


@pytest.fixture(scope="function")
async def test_engine():
    """
    Create a test database engine.
    Uses in-memory SQLite for fast tests; StaticPool keeps one shared connection.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def test_session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture(scope="function")
async def test_db_session(test_session_maker):
    """Create a test database session."""
    async with test_session_maker() as session:
        yield session


@pytest.fixture(scope="function")
async def seed(test_session_maker):
    """Seed helper with its own session."""
    async with test_session_maker() as session:
        yield Seeder(session)


@pytest.fixture(scope="function")
def auth_headers():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture(scope="function")
async def test_client(test_session_maker):
    """
    Create a test HTTP client.
    Requests run against the in-memory database and a gate that accepts TEST_TOKEN.
    """
    async def override_get_db():
        async with test_session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    container = build_container()
    container.authorization_gate.override(providers.Object(TokenAuthorizationGate([TEST_TOKEN])))
    container.health_service.override(providers.Object(HealthService(session_factory=test_session_maker)))
    set_container(container)
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    set_container(None)
