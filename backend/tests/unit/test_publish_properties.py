"""
Property-based tests for the publish policy and message headers

Properties:
- a non-critical publish never raises, whatever the broker does
- a critical publish either succeeds or raises a PublishError carrying a FAILED result
- the correlation id and routing key given to the builder reach the wire unchanged
- an order total stays within rounding distance of the exact sum
"""
import asyncio

import pytest
from aiokafka.errors import KafkaConnectionError, KafkaTimeoutError
from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from conftest import FakeKafkaProducer
from core.events import (
    EventPublisher,
    MessageBuilder,
    PublishError,
    PublishOutcome,
    PublishPolicy,
    create_stock_deducted_event,
    create_user_deleted_event,
)
from models.orders import Order, OrderItem

keys = st.text(min_size=1, max_size=40).filter(lambda value: value.strip())
correlation_ids = st.text(
    alphabet=st.characters(min_codepoint=33, max_codepoint=126), min_size=1, max_size=64
)


@composite
def broker_behaviour(draw):
    """Connection state plus an optional send or delivery failure"""
    return {
        "connected": draw(st.booleans()),
        "send_error": draw(st.sampled_from([None, KafkaConnectionError(), KafkaTimeoutError()])),
        "delivery_error": draw(st.sampled_from([None, KafkaConnectionError(), KafkaTimeoutError()])),
    }


async def _publish(behaviour, critical: bool):
    producer = FakeKafkaProducer()
    publisher = EventPublisher("svc", lambda: producer, publish_timeout=0.5)
    if behaviour["connected"]:
        await publisher.connect()
    producer.send_error = behaviour["send_error"]
    producer.delivery_error = behaviour["delivery_error"]

    message = MessageBuilder("svc").build("u1", create_user_deleted_event("u1"), "corr-1")
    try:
        return await publisher.publish("user.deleted", message, PublishPolicy(critical=critical))
    finally:
        await publisher.disconnect()


def _broker_healthy(behaviour) -> bool:
    return behaviour["connected"] and behaviour["send_error"] is None and behaviour["delivery_error"] is None


class TestPublishPolicyProperties:

    @given(behaviour=broker_behaviour())
    @settings(max_examples=40, deadline=None)
    def test_non_critical_never_raises(self, behaviour):
        result = asyncio.run(_publish(behaviour, critical=False))

        assert result.ok
        if _broker_healthy(behaviour):
            assert result.outcome is PublishOutcome.SUCCESS
        else:
            assert result.outcome is PublishOutcome.DEGRADED
            assert result.error is not None

    @given(behaviour=broker_behaviour())
    @settings(max_examples=40, deadline=None)
    def test_critical_succeeds_or_raises_failed_result(self, behaviour):
        if _broker_healthy(behaviour):
            result = asyncio.run(_publish(behaviour, critical=True))
            assert result.outcome is PublishOutcome.SUCCESS
            return

        with pytest.raises(PublishError) as exc_info:
            asyncio.run(_publish(behaviour, critical=True))
        assert exc_info.value.result.outcome is PublishOutcome.FAILED
        assert exc_info.value.correlation_id == "corr-1"


class TestMessageProperties:

    @given(key=keys, correlation_id=correlation_ids, quantity=st.integers(min_value=1, max_value=10_000))
    def test_key_and_correlation_id_preserved(self, key, correlation_id, quantity):
        envelope = create_stock_deducted_event("p1", "v1", quantity, "o1")

        message = MessageBuilder("product-service").build(key, envelope, correlation_id)

        assert message.key == key
        assert message.kafka_key() == key.encode("utf-8")
        assert message.headers["correlationId"] == correlation_id
        assert message.envelope() == envelope


@composite
def order_items(draw):
    count = draw(st.integers(min_value=1, max_value=6))
    return [
        OrderItem(
            product_id=f"p{index}",
            variant_id=f"v{index}",
            quantity=draw(st.integers(min_value=1, max_value=50)),
            price=draw(st.floats(min_value=0.0, max_value=5000.0, allow_nan=False)),
            seller_id=f"s{index % 2}",
        )
        for index in range(count)
    ]


class TestOrderTotalProperties:

    @given(items=order_items())
    def test_total_is_rounded_sum_of_items(self, items):
        total = Order.calculate_total(items)

        exact = sum(item.quantity * item.price for item in items)
        assert total >= 0
        # each line and the sum are rounded to cents
        assert abs(total - exact) <= 0.005 * (len(items) + 1) + 1e-6
