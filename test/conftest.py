"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from contactbook.config import Settings
from contactbook.contacts.memory import InMemoryContactRepository
from contactbook.contacts.repository import ContactRepository
from contactbook.contacts.service import ContactService
from contactbook.main import app
from contactbook.shared.database import Base, engine_options, get_db_session


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        database_url="sqlite+aiosqlite:///:memory:",
        cors_origins="http://localhost:3000",
    )


@pytest.fixture
def contact_data() -> dict[str, Any]:
    """Valid complete field set."""
    return {
        "first_name": "Ann",
        "last_name": "Lee",
        "email": "a@x.com",
        "phone": "123456789",
    }


@pytest.fixture
def other_contact_data() -> dict[str, Any]:
    """Second valid field set sharing nothing with `contact_data`."""
    return {
        "first_name": "Bob",
        "last_name": "Stone",
        "email": "bob@example.com",
        "phone": "+44-2079460000",
        "additional_info": "Met at the conference",
    }


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        **engine_options(test_settings.database_url),
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def contact_repository(db_session: AsyncSession) -> ContactRepository:
    """Create SQL contact repository."""
    return ContactRepository(session=db_session)


@pytest.fixture
def memory_repository() -> InMemoryContactRepository:
    """Create in-memory contact repository."""
    return InMemoryContactRepository()


@pytest.fixture
def memory_service(memory_repository: InMemoryContactRepository) -> ContactService:
    """Contact service over the in-memory store."""
    return ContactService(repository=memory_repository)


@pytest.fixture
def sql_service(contact_repository: ContactRepository) -> ContactService:
    """Contact service over the SQL store."""
    return ContactService(repository=contact_repository)


@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API tests."""

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def file_session_factory(
    tmp_path: Path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over a SQLite file, so separate sessions use separate connections."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'contacts.sqlite'}"
    engine = create_async_engine(url, echo=False, **engine_options(url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    await engine.dispose()
