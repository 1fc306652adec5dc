"""
Shared pytest fixtures.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from niko.core.config import Settings
from niko.infrastructure.local.database import Base


@pytest.fixture
async def session_factory():
    """In-memory SQLite session factory with fresh tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def test_user_id():
    return "test_user"


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        GOOGLE_API_KEY="",
        NOTION_API_BASE="https://notion.test/v1",
        NOTION_API_KEY="",
        NOTION_DB_ID="",
        PREFERENCES_PATH=str(tmp_path / "preferences.json"),
    )
