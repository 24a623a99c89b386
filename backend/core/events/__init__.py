"""
Event publishing layer shared by the auth, product and order services.
Schema registry -> message builder -> publisher with a critical / non-critical policy.
"""

from .errors import (
    EventPublishingError,
    MalformedDomainObject,
    InvalidRoutingKey,
    BrokerConnectionError,
    PublishError,
    PublishUnavailable,
    PublishFailed,
)
from .envelope import BaseEventEnvelope, EventPayload
from .user_events import (
    UserRegistered,
    UserUpdated,
    UserDeleted,
    create_user_registered_event,
    create_user_updated_event,
    create_user_deleted_event,
)
from .product_events import (
    ProductCreated,
    ProductUpdated,
    StockDeducted,
    StockRestored,
    create_product_created_event,
    create_product_updated_event,
    create_stock_deducted_event,
    create_stock_restored_event,
)
from .order_events import (
    OrderCreated,
    OrderStatusUpdated,
    OrderCancelled,
    create_order_created_event,
    create_order_status_updated_event,
    create_order_cancelled_event,
)
from .registry import EventEnvelope, EVENT_TYPES, serialize_envelope, deserialize_envelope, parse_envelope
from .topics import Topics, EventRoute, EVENT_ROUTES, route_for
from .message import MessageBuilder, TransportMessage
from .circuit_breaker import CircuitBreaker, CircuitState
from .publisher import (
    EventPublisher,
    ConnectionState,
    PublishOutcome,
    PublishPolicy,
    PublishResult,
)

__all__ = [
    'EventPublishingError',
    'MalformedDomainObject',
    'InvalidRoutingKey',
    'BrokerConnectionError',
    'PublishError',
    'PublishUnavailable',
    'PublishFailed',
    'BaseEventEnvelope',
    'EventPayload',
    'UserRegistered',
    'UserUpdated',
    'UserDeleted',
    'create_user_registered_event',
    'create_user_updated_event',
    'create_user_deleted_event',
    'ProductCreated',
    'ProductUpdated',
    'StockDeducted',
    'StockRestored',
    'create_product_created_event',
    'create_product_updated_event',
    'create_stock_deducted_event',
    'create_stock_restored_event',
    'OrderCreated',
    'OrderStatusUpdated',
    'OrderCancelled',
    'create_order_created_event',
    'create_order_status_updated_event',
    'create_order_cancelled_event',
    'EventEnvelope',
    'EVENT_TYPES',
    'serialize_envelope',
    'deserialize_envelope',
    'parse_envelope',
    'Topics',
    'EventRoute',
    'EVENT_ROUTES',
    'route_for',
    'MessageBuilder',
    'TransportMessage',
    'CircuitBreaker',
    'CircuitState',
    'EventPublisher',
    'ConnectionState',
    'PublishOutcome',
    'PublishPolicy',
    'PublishResult',
]
