from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from models.orders import OrderStatus


class OrderItemCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    product_id: str = Field(..., min_length=1)
    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: float = Field(..., ge=0)
    seller_id: str = Field(..., min_length=1)
    product_name: Optional[str] = None


class OrderCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    buyer_id: str = Field(..., min_length=1)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    seller_id: str = Field(..., min_length=1)
    status: OrderStatus


class OrderCancel(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    buyer_id: str = Field(..., min_length=1)
