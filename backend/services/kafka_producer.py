"""
Per-service producer facades.

Each facade binds one service's vocabulary to the shared pipeline:
schema registry -> MessageBuilder -> EventPublisher, with the topic and
criticality looked up once per event type in EVENT_ROUTES.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

from core.events import (
    BaseEventEnvelope,
    EventPublisher,
    MessageBuilder,
    PublishPolicy,
    PublishResult,
    create_order_cancelled_event,
    create_order_created_event,
    create_order_status_updated_event,
    create_product_created_event,
    create_product_updated_event,
    create_stock_deducted_event,
    create_stock_restored_event,
    create_user_deleted_event,
    create_user_registered_event,
    create_user_updated_event,
    route_for,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """A domain value plus the outcome of the event published for it (None when nothing was published)."""

    value: T
    event: Optional[PublishResult] = None

    @property
    def event_status(self) -> Optional[str]:
        return self.event.outcome.value if self.event is not None else None


class ServiceProducer:
    """Base facade: owns nothing but a handle on the service's publisher."""

    def __init__(self, publisher: EventPublisher, builder: Optional[MessageBuilder] = None):
        self.publisher = publisher
        self.builder = builder or MessageBuilder(publisher.service_name)

    async def connect(self) -> None:
        await self.publisher.connect()

    async def disconnect(self) -> None:
        await self.publisher.disconnect()

    async def _emit(self, key: Any, envelope: BaseEventEnvelope, correlation_id: Optional[str]) -> PublishResult:
        route = route_for(envelope.event_type)
        message = self.builder.build(key, envelope, correlation_id)
        logger.debug(f"Emitting {envelope.event_type} key={message.key} to {route.topic} (critical={route.critical})")
        return await self.publisher.publish(
            route.topic,
            message,
            PublishPolicy(critical=route.critical, correlation_id=message.correlation_id),
        )


class AuthServiceProducer(ServiceProducer):
    async def publish_user_registered(self, user: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_user_registered_event(user)
        return await self._emit(event.payload.user_id, event, correlation_id)

    async def publish_user_updated(
        self, user_id: Any, changes: Dict[str, Any], correlation_id: Optional[str] = None
    ) -> PublishResult:
        event = create_user_updated_event(user_id, changes)
        return await self._emit(event.payload.user_id, event, correlation_id)

    async def publish_user_deleted(self, user_id: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_user_deleted_event(user_id)
        return await self._emit(event.payload.user_id, event, correlation_id)


class ProductServiceProducer(ServiceProducer):
    async def publish_product_created(self, product: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_product_created_event(product)
        return await self._emit(event.payload.product_id, event, correlation_id)

    async def publish_product_updated(self, product: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_product_updated_event(product)
        return await self._emit(event.payload.product_id, event, correlation_id)

    async def publish_stock_deducted(
        self,
        product_id: Any,
        variant_id: Any,
        quantity: int,
        order_id: Any,
        correlation_id: Optional[str] = None,
    ) -> PublishResult:
        event = create_stock_deducted_event(product_id, variant_id, quantity, order_id)
        return await self._emit(event.payload.product_id, event, correlation_id)

    async def publish_stock_restored(
        self,
        product_id: Any,
        variant_id: Any,
        quantity: int,
        order_id: Any,
        correlation_id: Optional[str] = None,
    ) -> PublishResult:
        event = create_stock_restored_event(product_id, variant_id, quantity, order_id)
        return await self._emit(event.payload.product_id, event, correlation_id)


class OrderServiceProducer(ServiceProducer):
    async def publish_order_created(self, order: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_order_created_event(order)
        return await self._emit(event.payload.order_id, event, correlation_id)

    async def publish_order_status_updated(
        self, order_id: Any, status: Any, correlation_id: Optional[str] = None
    ) -> PublishResult:
        event = create_order_status_updated_event(order_id, status)
        return await self._emit(event.payload.order_id, event, correlation_id)

    async def publish_order_cancelled(self, order: Any, correlation_id: Optional[str] = None) -> PublishResult:
        event = create_order_cancelled_event(order)
        return await self._emit(event.payload.order_id, event, correlation_id)
