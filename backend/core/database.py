"""
In-memory async persistence for the services.

Repositories keep entities in a dict guarded by an asyncio.Lock so that
check-then-write operations (unique email, conditional stock adjustment)
stay atomic across concurrent requests on the event loop.
"""
import asyncio
import copy
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from core.utils.uuid_utils import uuid7_str

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class BaseModel:
    """Base model with a UUIDv7 primary key and timestamps"""

    id: str = field(default_factory=uuid7_str)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.updated_at is None:
            self.updated_at = self.created_at

    def touch(self) -> None:
        self.updated_at = utc_now()


ModelT = TypeVar("ModelT", bound=BaseModel)


class RepositoryError(Exception):
    """Base class for persistence rule violations."""


class DuplicateEntityError(RepositoryError):
    pass


class InsufficientStockError(RepositoryError):
    def __init__(self, product_id: str, variant_id: str, requested: int, available: int):
        self.product_id = product_id
        self.variant_id = variant_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id} variant {variant_id}: "
            f"requested {requested}, available {available}"
        )


class VariantNotFoundError(RepositoryError):
    pass


class InMemoryRepository(Generic[ModelT]):
    """
    Dict-backed repository. Reads hand out copies so callers cannot mutate
    stored state without going through save().
    """

    def __init__(self):
        self._items: Dict[str, ModelT] = {}
        self._lock = asyncio.Lock()

    async def get(self, entity_id: str) -> Optional[ModelT]:
        item = self._items.get(str(entity_id))
        return copy.deepcopy(item) if item is not None else None

    async def list(self, predicate: Optional[Callable[[ModelT], bool]] = None) -> List[ModelT]:
        return [copy.deepcopy(item) for item in self._items.values() if predicate is None or predicate(item)]

    async def add(self, entity: ModelT) -> ModelT:
        async with self._lock:
            self._check_insert(entity)
            self._items[entity.id] = copy.deepcopy(entity)
        return entity

    async def save(self, entity: ModelT) -> ModelT:
        async with self._lock:
            self._items[entity.id] = copy.deepcopy(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        async with self._lock:
            return self._items.pop(str(entity_id), None) is not None

    async def count(self) -> int:
        return len(self._items)

    def _check_insert(self, entity: ModelT) -> None:
        if entity.id in self._items:
            raise DuplicateEntityError(f"{type(entity).__name__} {entity.id} already exists")


class UserRepository(InMemoryRepository):
    async def get_by_email(self, email: str) -> Optional[Any]:
        needle = email.strip().lower()
        for user in self._items.values():
            if user.email == needle:
                return copy.deepcopy(user)
        return None

    def _check_insert(self, entity) -> None:
        super()._check_insert(entity)
        if any(user.email == entity.email for user in self._items.values()):
            raise DuplicateEntityError(f"User with email {entity.email} already exists")


class ProductRepository(InMemoryRepository):
    async def adjust_stock(self, product_id: str, variant_id: str, delta: int) -> Any:
        """
        Atomically add `delta` to a variant's stock and return the updated product.

        Raises:
            VariantNotFoundError: product or variant does not exist
            InsufficientStockError: the adjustment would make stock negative
        """
        async with self._lock:
            product = self._items.get(str(product_id))
            if product is None:
                raise VariantNotFoundError(f"Product {product_id} not found")
            variant = product.find_variant(variant_id)
            if variant is None:
                raise VariantNotFoundError(f"Variant {variant_id} not found on product {product_id}")
            if variant.stock + delta < 0:
                raise InsufficientStockError(product.id, variant.id, -delta, variant.stock)
            variant.stock += delta
            product.touch()
            logger.debug(f"Stock for {product.id}/{variant.id} adjusted by {delta} -> {variant.stock}")
            return copy.deepcopy(product)


class OrderRepository(InMemoryRepository):
    async def list_for_buyer(self, buyer_id: str) -> List[Any]:
        return await self.list(lambda order: order.buyer_id == str(buyer_id))


__all__ = [
    "BaseModel",
    "utc_now",
    "RepositoryError",
    "DuplicateEntityError",
    "InsufficientStockError",
    "VariantNotFoundError",
    "InMemoryRepository",
    "UserRepository",
    "ProductRepository",
    "OrderRepository",
]
