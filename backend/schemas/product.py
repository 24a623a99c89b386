from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class ProductVariantCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    sku: str = Field(..., min_length=1, max_length=64)
    stock: int = Field(..., ge=0)
    price: Optional[float] = Field(None, ge=0)


class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    seller_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    category: str = Field(..., min_length=1, max_length=100)
    base_price: float = Field(..., ge=0)
    variants: List[ProductVariantCreate] = Field(..., min_length=1)


class ProductUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    seller_id: str = Field(..., min_length=1)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    base_price: Optional[float] = Field(None, ge=0)
    # Replaces the variant list wholesale when given
    variants: Optional[List[ProductVariantCreate]] = Field(None, min_length=1)


class StockChange(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    variant_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    order_id: str = Field(..., min_length=1)
