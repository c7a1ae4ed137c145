"""Service test fixtures — async DB + FastAPI test client + in-memory repository.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - db_manager patched so readiness probes see the test engine
    - Seeding uses its own short-lived session (never held open across requests)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (ADR: PostgreSQL-specific features not exercised here)
    - InMemoryBookRepository for controller tests: exercises the state machine
      without SQL in the way
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from catalog.db.base import Base
from catalog.infrastructure.database import get_db, DatabaseSessionManager
from catalog.infrastructure.sql_book_repository import SqlBookRepository
import catalog.infrastructure.database as db_module
from catalog.main import app
from catalog.services.book_lifecycle import BookLifecycle
from tests.services.memory_book_repository import InMemoryBookRepository


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
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
def seed_books(test_session_factory):
    """Insert books through the SQL repository. Returns the created records."""
    async def _seed(*books: dict):
        created = []
        async with test_session_factory() as session:
            repo = SqlBookRepository(session)
            for fields in books:
                created.append(await repo.create(fields))
        return created

    return _seed


@pytest.fixture
def memory_repository():
    return InMemoryBookRepository()


@pytest.fixture
def lifecycle(memory_repository):
    return BookLifecycle(memory_repository)
