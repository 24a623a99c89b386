"""
Order models
Includes: OrderStatus, OrderItem, Order
"""
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional

from core.database import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    @property
    def is_cancellable(self) -> bool:
        return self in (OrderStatus.PENDING, OrderStatus.CONFIRMED)


@dataclass
class OrderItem:
    """Individual items within an order"""
    product_id: str
    variant_id: str
    quantity: int
    price: float
    seller_id: str
    product_name: Optional[str] = None

    @property
    def total_price(self) -> float:
        return round(self.price * self.quantity, 2)


@dataclass(kw_only=True)
class Order(BaseModel):
    buyer_id: str
    items: List[OrderItem] = field(default_factory=list)
    total_amount: float = 0.0
    status: OrderStatus = OrderStatus.PENDING
    notes: Optional[str] = None

    @staticmethod
    def calculate_total(items: List[OrderItem]) -> float:
        return round(sum(item.total_price for item in items), 2)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data
