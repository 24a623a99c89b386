# Services package - consolidated imports only

from .kafka_producer import (
    ServiceResult,
    ServiceProducer,
    AuthServiceProducer,
    ProductServiceProducer,
    OrderServiceProducer,
)
from .user import UserService
from .products import ProductService
from .orders import OrderService

__all__ = [
    "ServiceResult",
    "ServiceProducer",
    "AuthServiceProducer",
    "ProductServiceProducer",
    "OrderServiceProducer",
    "UserService",
    "ProductService",
    "OrderService",
]
