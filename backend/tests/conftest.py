"""Pytest configuration and fixtures."""

import os

# Settings are read at import time; force local mode and no advisory key.
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SPREADSHEET_ID"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["DEBUG"] = "true"

import pytest
from typing import Generator, List, Optional, Sequence

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from parts_inventory.core.errors import PersistenceError
from parts_inventory.db.base import Base
from parts_inventory.db.session import get_db
from parts_inventory.main import app
# Import all models to ensure they're registered with Base.metadata
from parts_inventory.models import *
from parts_inventory.schemas.inventory import PartRecord
from parts_inventory.services.ledger.base import LedgerStore
from parts_inventory.services.ledger.local import LocalLedgerStore

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

GLASS = "玻璃拉門"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    # Disable rate limiter during tests to avoid flaky failures
    from parts_inventory.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def local_store(db_session: Session) -> LocalLedgerStore:
    return LocalLedgerStore(db_session)


def make_record(
    specification: str,
    name: str,
    quantity: int,
    category: str = GLASS,
    note: str = "",
    record_id: Optional[str] = None,
) -> PartRecord:
    """Ledger record with fixed id/timestamp for tests."""
    return PartRecord(
        id=record_id or f"T-{specification}-{name}-{quantity}",
        timestamp="2026/1/5 上午9:00:00",
        category=category,
        name=name,
        specification=specification,
        quantity=quantity,
        note=note,
    )


class MemoryLedgerStore(LedgerStore):
    """In-memory store; optionally fails on the Nth append (1-based)."""

    store_name = "memory"

    def __init__(
        self,
        records: Optional[Sequence[PartRecord]] = None,
        tasks: Optional[Sequence[str]] = None,
        fail_on_append: Optional[int] = None,
        fail_task_replace: bool = False,
    ):
        self.records: List[PartRecord] = list(records or [])
        self.tasks: List[str] = list(tasks or [])
        self.fail_on_append = fail_on_append
        self.fail_task_replace = fail_task_replace
        self.append_calls = 0

    async def fetch_records(self) -> List[PartRecord]:
        return list(self.records)

    async def append_record(self, record: PartRecord) -> None:
        self.append_calls += 1
        if self.fail_on_append is not None and self.append_calls >= self.fail_on_append:
            raise PersistenceError("同步失敗 (HTTP 500)", status_code=500)
        self.records.append(record)

    async def fetch_tasks(self) -> List[str]:
        return list(self.tasks)

    async def replace_tasks(self, tasks: Sequence[str]) -> None:
        if self.fail_task_replace:
            raise PersistenceError("任務同步失敗", status_code=500)
        self.tasks = list(tasks)
