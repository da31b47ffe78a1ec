"""Shared fixtures: a throwaway SQLite store, the mock stock app and order seeding."""

from decimal import Decimal

import httpx
import pytest
from sqlalchemy import select

from order_service import models
from order_service.analytics import AnalyticsLog
from order_service.config import ServiceConfig
from order_service.database import create_engine_and_factory, create_tables
from order_service.events import EventPublisher
from order_service.service import OrderService
from stock_service.main import app as stock_app

STOCK_URL = "http://stock.test"


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database file."""
    engine, factory = create_engine_and_factory(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}", echo=False)
    await create_tables(engine)
    yield factory
    await engine.dispose()


@pytest.fixture
async def stock_http_client():
    """HTTP client wired straight to the mock stock service app."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=stock_app)) as client:
        yield client


class RecordingBrokerSink:
    """Stand-in for the Kafka sink that keeps what it was sent."""

    name = "broker"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send(self, event):
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.sent.append(event)


@pytest.fixture
def broker_sink():
    return RecordingBrokerSink()


@pytest.fixture
def failing_broker_sink():
    return RecordingBrokerSink(fail=True)


@pytest.fixture
def service_config():
    return ServiceConfig(stock_service_url=STOCK_URL, stock_max_attempts=2, stock_retry_backoff_seconds=0)


@pytest.fixture
def order_service(service_config, session_factory, broker_sink, stock_http_client):
    publisher = EventPublisher(AnalyticsLog(session_factory), broker_sink)
    return OrderService(service_config, session_factory, publisher, http_client=stock_http_client)


@pytest.fixture
def seed_order(session_factory):
    """Inserts an order directly into the store, bypassing validation."""

    async def _seed(order_id: str, items: list[tuple[str, int, str]], customer_id: str = "cust-001"):
        async with session_factory() as session:
            async with session.begin():
                order = models.Order(id=order_id, customer_id=customer_id)
                order.items = [
                    models.OrderItem(position=i, sku=sku, qty=qty, price=Decimal(price))
                    for i, (sku, qty, price) in enumerate(items)
                ]
                session.add(order)
        return order_id

    return _seed


@pytest.fixture
def sample_order_payload():
    return {
        "customer_id": "cust-12345",
        "items": [
            {"sku": "SKU-RED", "qty": 2, "price": "10.00"},
            {"sku": "SKU-VN", "qty": 1, "price": "5.00"},
        ],
    }


@pytest.fixture
def event_log(session_factory):
    """Reads back the analytics rows written for an order."""

    async def _fetch(order_id: str):
        async with session_factory() as session:
            result = await session.execute(
                select(models.OrderEventLog)
                .where(models.OrderEventLog.order_id == order_id)
                .order_by(models.OrderEventLog.received_at)
            )
            return list(result.scalars().all())

    return _fetch
