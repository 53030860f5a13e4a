"""
Catalog Manager - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine / db_session_factory / db_session: throwaway SQLite file per test
    ├── app: FastAPI app whose session dependency uses that database
    ├── test_client: HTTPX AsyncClient talking to the app in-process
    ├── uploads_dir: directory served under /uploads
    ├── mock_db_session: AsyncMock session for storage-failure paths
    └── sample_jpeg_bytes / sample_png_bytes: tiny image payloads
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any catalog imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="catalog_test_db_"), "catalog.db"
)
os.environ["UPLOADS_DIR"] = tempfile.mkdtemp(prefix="catalog_test_uploads_")
os.environ["SEED_INITIAL_ENTRIES"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from catalog.config import settings
from catalog.database import Base, get_db_session
from catalog.models.entry import Entry  # noqa: F401


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(db_session_factory):
    """A session on the per-test database, for service-level tests."""
    async with db_session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        await entry_service.list_entries(mock_db_session)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app(db_session_factory):
    """
    A fresh application wired to the per-test database.

    The lifespan does not run under ASGITransport, so nothing is seeded.
    """
    from catalog.main import create_app

    application = create_app()

    async def override_db_session():
        async with db_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/entries")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def uploads_dir() -> Path:
    """The directory the app writes uploads to and serves under /uploads."""
    path = Path(settings.uploads_dir).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
# Sample Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_jpeg_bytes():
    """Minimal JPEG: Start of Image (FFD8) + JFIF marker + End of Image (FFD9)."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature followed by an empty IEND chunk."""
    return b'\x89PNG\r\n\x1a\n\x00\x00\x00\x00IEND\xaeB`\x82'


@pytest.fixture
def cold_soul():
    return {
        "name": "Cold Soul",
        "ingredients": "Wodka, Ice, Herbs",
        "recipe": "Combine, shake, serve over ice",
    }
