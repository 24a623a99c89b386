import logging
from typing import Optional

from core.database import OrderRepository
from core.events import EventPublishingError
from core.exceptions import AuthorizationException, ConflictException, NotFoundException
from models.orders import Order, OrderItem, OrderStatus
from schemas.orders import OrderCancel, OrderCreate, OrderStatusUpdate
from services.kafka_producer import OrderServiceProducer, ServiceResult

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, repository: OrderRepository, producer: OrderServiceProducer):
        self.repository = repository
        self.producer = producer

    async def create_order(self, order_data: OrderCreate, correlation_id: Optional[str] = None) -> ServiceResult:
        """
        Persist a pending order and publish OrderCreated.

        OrderCreated is critical: the order is removed again when the event
        cannot be published.
        """
        items = [OrderItem(**item.model_dump()) for item in order_data.items]
        order = Order(
            buyer_id=order_data.buyer_id,
            items=items,
            total_amount=Order.calculate_total(items),
            status=OrderStatus.PENDING,
            notes=order_data.notes,
        )
        await self.repository.add(order)
        logger.info(f"Order created: {order.id} for buyer {order.buyer_id} total {order.total_amount}")

        try:
            event = await self.producer.publish_order_created(order, correlation_id)
        except EventPublishingError:
            await self.repository.delete(order.id)
            logger.warning(f"Order {order.id} removed: OrderCreated not published")
            raise
        return ServiceResult(order, event)

    async def get_order(self, order_id: str) -> Order:
        order = await self.repository.get(order_id)
        if not order:
            raise NotFoundException("Order not found", resource="order")
        return order

    async def update_order_status(
        self, order_id: str, status_data: OrderStatusUpdate, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        order = await self.get_order(order_id)

        if not any(item.seller_id == status_data.seller_id for item in order.items):
            raise AuthorizationException("Unauthorized to update this order")
        if order.status.is_terminal:
            raise ConflictException(f"Order is {order.status.value} and can no longer change status")
        if status_data.status is OrderStatus.CANCELLED:
            raise ConflictException("Orders are cancelled through the cancel operation")
        if status_data.status is order.status:
            return ServiceResult(order, None)

        order.status = status_data.status
        order.touch()
        await self.repository.save(order)
        logger.info(f"Order {order.id} status -> {order.status.value}")

        event = await self.producer.publish_order_status_updated(order.id, order.status, correlation_id)
        return ServiceResult(order, event)

    async def cancel_order(
        self, order_id: str, cancel_data: OrderCancel, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        order = await self.get_order(order_id)

        if order.buyer_id != cancel_data.buyer_id:
            raise AuthorizationException("Only the buyer can cancel this order")
        if not order.status.is_cancellable:
            raise ConflictException(f"Order cannot be cancelled once {order.status.value}")

        previous_status = order.status
        previous_updated_at = order.updated_at
        order.status = OrderStatus.CANCELLED
        order.touch()
        await self.repository.save(order)

        try:
            event = await self.producer.publish_order_cancelled(order, correlation_id)
        except EventPublishingError:
            order.status = previous_status
            order.updated_at = previous_updated_at
            await self.repository.save(order)
            logger.warning(f"Order {order.id} cancellation reverted: OrderCancelled not published")
            raise

        logger.info(f"Order cancelled: {order.id}")
        return ServiceResult(order, event)
