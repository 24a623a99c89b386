import sys
import os
import asyncio
from contextlib import ExitStack
from dataclasses import dataclass
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, List, Optional

import pytest

# Add the backend directory to the Python path
# This is necessary for pytest to find the 'main' module and other packages
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

from aiokafka.errors import KafkaConnectionError
from fastapi.testclient import TestClient

from core.events import EventPublisher, MessageBuilder
from main import create_app
from models.orders import Order, OrderItem, OrderStatus
from models.product import Product, ProductVariant
from models.user import User, UserRole


@dataclass
class SentRecord:
    topic: str
    key: Optional[bytes]
    value: bytes
    headers: List[Any]

    @property
    def header_map(self) -> dict:
        return {name: value.decode("utf-8") for name, value in self.headers}


class FakeKafkaProducer:
    """
    In-process stand-in for AIOKafkaProducer with the same start/stop/send
    coroutine signatures. send() records the message and returns a delivery
    future, like the real client.
    """

    def __init__(self):
        self.started = False
        self.start_calls = 0
        self.stop_calls = 0
        self.sent: List[SentRecord] = []
        self.start_error: Optional[BaseException] = None
        self.send_error: Optional[BaseException] = None
        self.delivery_error: Optional[BaseException] = None
        self.delivery_delay: float = 0.0

    async def start(self):
        self.start_calls += 1
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    async def stop(self):
        self.stop_calls += 1
        self.started = False

    async def send(self, topic, value=None, key=None, headers=None, **kwargs):
        if self.send_error is not None:
            raise self.send_error
        loop = asyncio.get_running_loop()
        delivery = loop.create_future()
        self.sent.append(SentRecord(topic=topic, key=key, value=value, headers=list(headers or [])))
        metadata = SimpleNamespace(topic=topic, partition=0, offset=len(self.sent) - 1)

        if self.delivery_error is not None:
            delivery.set_exception(self.delivery_error)
        elif self.delivery_delay:
            loop.call_later(self.delivery_delay, _resolve, delivery, metadata)
        else:
            delivery.set_result(metadata)
        return delivery


def _resolve(delivery: asyncio.Future, metadata: Any) -> None:
    if not delivery.done():
        delivery.set_result(metadata)


@pytest.fixture
def fake_producer():
    return FakeKafkaProducer()


@pytest.fixture
def producer_factory(fake_producer):
    return lambda: fake_producer


@pytest.fixture
def builder():
    return MessageBuilder("test-service")


@pytest.fixture
async def publisher(producer_factory):
    """A connected publisher backed by the fake producer."""
    publisher = EventPublisher("test-service", producer_factory, connect_timeout=1.0, publish_timeout=0.5)
    await publisher.connect()
    yield publisher
    await publisher.disconnect()


@pytest.fixture
def disconnected_publisher(producer_factory):
    return EventPublisher("test-service", producer_factory, connect_timeout=1.0, publish_timeout=0.5)


@pytest.fixture
def sample_user():
    return User(
        id="u1",
        email="ada@example.com",
        name="Ada Lovelace",
        hashed_password="not-a-real-hash",
        role=UserRole.SELLER,
        created_at=datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_product():
    return Product(
        id="p1",
        seller_id="s1",
        name="Trail Shoe",
        category="footwear",
        base_price=89.5,
        description="Lightweight trail shoe",
        variants=[
            ProductVariant(id="v1", name="EU 42", sku="TS-42", stock=10),
            ProductVariant(id="v2", name="EU 43", sku="TS-43", stock=0),
        ],
        created_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_order():
    return Order(
        id="o1",
        buyer_id="b1",
        items=[
            OrderItem(product_id="p1", variant_id="v1", quantity=2, price=89.5, seller_id="s1"),
            OrderItem(product_id="p2", variant_id="v9", quantity=1, price=10.0, seller_id="s2"),
        ],
        total_amount=189.0,
        status=OrderStatus.PENDING,
        created_at=datetime(2024, 5, 2, 8, 15, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_client(fake_producer):
    """
    Factory for a TestClient running one service's app with the fake producer.
    connected=False makes the broker unreachable at startup, so the service
    runs degraded.
    """
    stack = ExitStack()

    def _make(service_name: str, connected: bool = True, raise_server_exceptions: bool = True) -> TestClient:
        if not connected:
            fake_producer.start_error = KafkaConnectionError()
        app = create_app(service_name, producer_factory=lambda: fake_producer, require_broker=False)
        return stack.enter_context(TestClient(app, raise_server_exceptions=raise_server_exceptions))

    yield _make
    stack.close()
