from dataclasses import asdict, dataclass, field
from typing import List, Optional

from core.utils.uuid_utils import uuid7_str
from core.database import BaseModel


@dataclass
class ProductVariant:
    name: str
    sku: str
    stock: int = 0
    price: Optional[float] = None
    id: str = field(default_factory=uuid7_str)


@dataclass(kw_only=True)
class Product(BaseModel):
    seller_id: str
    name: str
    category: str
    base_price: float
    description: Optional[str] = None
    variants: List[ProductVariant] = field(default_factory=list)

    def find_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((variant for variant in self.variants if variant.id == str(variant_id)), None)

    @property
    def total_stock(self) -> int:
        return sum(variant.stock for variant in self.variants)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["total_stock"] = self.total_stock
        return data
