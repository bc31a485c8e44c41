"""
Pytest fixtures for the stall POS tests.

Provides an in-memory document store, a wired ledger/journal/synchronizer
graph and an HTTP test client.
"""

import asyncio
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("SEED_CATALOG", "true")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Sequence

import pytest

from app.core.realtime import ConnectionManager
from app.storage.database import build_engine
from app.storage.document_store import SqlDocumentStore, WriteOp
from app.v1_0.entities import ProductDTO
from app.v1_0.repositories import ProductRepository, SaleRepository
from app.v1_0.services import InventoryLedger, RemoteSynchronizer, SaleJournal, StallService


class RecordingManager(ConnectionManager):
    """ConnectionManager that remembers every published event."""

    def __init__(self) -> None:
        super().__init__()
        self.events: List[Dict[str, Any]] = []

    async def publish(self, channel_id, resource, action, payload=None) -> None:
        self.events.append({"channel": channel_id, "type": f"{resource}.{action}", "payload": payload or {}})
        await super().publish(channel_id, resource, action, payload)

    def types(self) -> List[str]:
        return [e["type"] for e in self.events]


class FlakyStore(SqlDocumentStore):
    """
    SqlDocumentStore whose writes can be switched off to simulate an outage,
    or slowed down: each entry of ``commit_delays`` delays one commit by that
    many seconds.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fail_writes = False
        self.commit_delays: List[float] = []

    async def _commit(self, ops: Sequence[WriteOp]) -> None:
        if self.commit_delays:
            await asyncio.sleep(self.commit_delays.pop(0))
        if self.fail_writes:
            raise ConnectionError("remote store unavailable")
        await super()._commit(ops)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now


def make_products() -> List[ProductDTO]:
    return [
        ProductDTO(id="1", name="Frango", price=Decimal("50"), stock=10),
        ProductDTO(id="2", name="Sobrecoxa", price=Decimal("5"), stock=20),
        ProductDTO(id="6", name="Maionese", price=Decimal("7"), stock=4),
    ]


@pytest.fixture
def products() -> List[ProductDTO]:
    return make_products()


@pytest.fixture
def ledger(products) -> InventoryLedger:
    return InventoryLedger(products=products)


@pytest.fixture
def strict_ledger(products) -> InventoryLedger:
    return InventoryLedger(oversell_policy="reject", products=products)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def journal(ledger, clock) -> SaleJournal:
    return SaleJournal(ledger, clock=clock)


@pytest.fixture
async def store():
    s = FlakyStore(build_engine("sqlite+aiosqlite:///:memory:"))
    await s.init_schema()
    yield s
    await s.close()


@pytest.fixture
def manager() -> RecordingManager:
    return RecordingManager()


@pytest.fixture
async def stall(store, manager, clock):
    """StallService wired to the in-memory store, with the test products already remote."""
    product_repository = ProductRepository(store)
    sale_repository = SaleRepository(store)
    await store.apply(product_repository.set_ops(make_products()))

    ledger = InventoryLedger()
    journal = SaleJournal(ledger, clock=clock)
    synchronizer = RemoteSynchronizer(
        store=store,
        ledger=ledger,
        journal=journal,
        product_repository=product_repository,
        sale_repository=sale_repository,
        realtime_manager=manager,
        channel_id="test",
    )
    service = StallService(
        ledger=ledger,
        journal=journal,
        synchronizer=synchronizer,
        product_repository=product_repository,
        sale_repository=sale_repository,
        display_timezone="UTC",
    )
    await synchronizer.start()
    yield service
    await synchronizer.stop()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient
    from app.main import create_app

    with TestClient(create_app()) as c:
        yield c
