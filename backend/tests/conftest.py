import socket
import uuid
from collections.abc import AsyncGenerator, Iterator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from haulmatch.core.config import settings
from haulmatch.models.base import Base
from haulmatch.providers import factory
from haulmatch.providers.embedding.mock_adapter import MockEmbeddingProvider

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Fixed ids for predictable assertions
TEST_COMPANY_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
OTHER_COMPANY_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c2")


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on port 5432, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available."""
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine with all tables.

    Skips test if PostgreSQL is not available.
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pgcrypto"))
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_embedding() -> Iterator[MockEmbeddingProvider]:
    """Mock embedding provider injected into the factory singleton.

    Yields:
        MockEmbeddingProvider instance (384 dimensions).
    """
    mock = MockEmbeddingProvider()

    factory._embedding_provider = mock
    factory._resolved = True

    yield mock

    factory.reset_providers()


@pytest.fixture
def no_embedding() -> Iterator[None]:
    """Force rules-only mode in the factory singleton."""
    factory._embedding_provider = None
    factory._resolved = True

    yield

    factory.reset_providers()
