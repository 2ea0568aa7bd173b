"""Service test fixtures — in-memory store, async SQLite DB, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The client's app.state carries controllers built on that database
    - memory_store can be told to fail writes, to exercise storage-failure paths

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - app.state populated directly: httpx ASGITransport does not run the lifespan
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from lessonbook.db.base import Base
from lessonbook.infrastructure.database import DatabaseSessionManager
from lessonbook.infrastructure.ledger_store import SqlLedgerStore
from lessonbook.main import app
from lessonbook.services.access_gate import AccessGate
from lessonbook.services.ledger_controller import LedgerController
import lessonbook.models  # noqa: F401
from tests.services.memory_store import FakeClock, MemoryStore


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(memory_store, clock):
    return LedgerController(memory_store, clock=clock)


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
async def db_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
async def sql_store(db_manager):
    return SqlLedgerStore(db_manager)


@pytest.fixture
async def client(db_manager, sql_store):
    """FastAPI test client with controllers on a fresh SQLite database."""
    ledger = LedgerController(sql_store)
    await ledger.load()
    app.state.db_manager = db_manager
    app.state.ledger = ledger
    app.state.gate = AccessGate(sql_store)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    for attr in ("db_manager", "ledger", "gate"):
        delattr(app.state, attr)


@pytest.fixture
async def auth_headers(client):
    """Log in (first run sets the passcode) and return the session header."""
    res = await client.post("/api/v1/auth/login", json={"passcode": "abc123"})
    assert res.status_code == 200
    return {"X-Session-Token": res.json()["token"]}
