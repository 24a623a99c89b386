"""
Product event schemas (product-service).
"""
from typing import Any, Literal, Tuple

from pydantic import Field

from .envelope import (
    BaseEventEnvelope,
    EventPayload,
    build_payload,
    format_timestamp,
    require_fields,
    require_values,
    stringify_id,
    utc_now_iso,
)
from .errors import MalformedDomainObject


class VariantSnapshot(EventPayload):
    variant_id: str
    name: str
    stock: int
    sku: str


class ProductCreatedPayload(EventPayload):
    product_id: str
    seller_id: str
    name: str
    category: str
    base_price: float
    variants: Tuple[VariantSnapshot, ...]
    created_at: str


class ProductUpdatedPayload(EventPayload):
    product_id: str
    seller_id: str
    name: str
    category: str
    base_price: float
    variants: Tuple[VariantSnapshot, ...]
    updated_at: str


class StockDeductedPayload(EventPayload):
    product_id: str
    variant_id: str
    quantity: int
    order_id: str
    deducted_at: str


class StockRestoredPayload(EventPayload):
    product_id: str
    variant_id: str
    quantity: int
    order_id: str
    restored_at: str


class ProductCreated(BaseEventEnvelope):
    event_type: Literal["ProductCreated"] = Field("ProductCreated", alias="eventType")
    payload: ProductCreatedPayload


class ProductUpdated(BaseEventEnvelope):
    event_type: Literal["ProductUpdated"] = Field("ProductUpdated", alias="eventType")
    payload: ProductUpdatedPayload


class StockDeducted(BaseEventEnvelope):
    event_type: Literal["StockDeducted"] = Field("StockDeducted", alias="eventType")
    payload: StockDeductedPayload


class StockRestored(BaseEventEnvelope):
    event_type: Literal["StockRestored"] = Field("StockRestored", alias="eventType")
    payload: StockRestoredPayload


_PRODUCT_FIELDS = {
    "product_id": ("id", "product_id"),
    "seller_id": ("seller_id",),
    "name": ("name",),
    "category": ("category",),
    "base_price": ("base_price",),
    "variants": ("variants",),
}

_VARIANT_FIELDS = {
    "variant_id": ("id", "variant_id"),
    "name": ("name",),
    "stock": ("stock",),
    "sku": ("sku",),
}


def _variant_snapshots(event_type: str, variants: Any) -> Tuple[dict, ...]:
    if isinstance(variants, (str, bytes)) or not hasattr(variants, "__iter__"):
        raise MalformedDomainObject(event_type, reason="variants must be a list")
    snapshots = []
    for index, variant in enumerate(variants):
        try:
            values = require_fields(event_type, variant, _VARIANT_FIELDS)
        except MalformedDomainObject as exc:
            raise MalformedDomainObject(
                event_type, [f"variants[{index}].{name}" for name in exc.missing_fields]
            ) from exc
        values["variant_id"] = stringify_id(values["variant_id"])
        snapshots.append(values)
    return tuple(snapshots)


def _product_values(event_type: str, product: Any, timestamp_field: str) -> dict:
    values = require_fields(event_type, product, {
        **_PRODUCT_FIELDS,
        timestamp_field: (timestamp_field,),
    })
    values["product_id"] = stringify_id(values["product_id"])
    values["seller_id"] = stringify_id(values["seller_id"])
    values["variants"] = _variant_snapshots(event_type, values["variants"])
    values[timestamp_field] = format_timestamp(values[timestamp_field])
    return values


def create_product_created_event(product: Any) -> ProductCreated:
    """ProductCreated with a snapshot of every variant; createdAt is copied from the entity."""
    values = _product_values("ProductCreated", product, "created_at")
    return ProductCreated(payload=build_payload("ProductCreated", ProductCreatedPayload, **values))


def create_product_updated_event(product: Any) -> ProductUpdated:
    """ProductUpdated; updatedAt is the entity's own modification time."""
    values = _product_values("ProductUpdated", product, "updated_at")
    return ProductUpdated(payload=build_payload("ProductUpdated", ProductUpdatedPayload, **values))


def create_stock_deducted_event(product_id: Any, variant_id: Any, quantity: Any, order_id: Any) -> StockDeducted:
    require_values("StockDeducted", product_id=product_id, variant_id=variant_id,
                   quantity=quantity, order_id=order_id)
    payload = build_payload(
        "StockDeducted",
        StockDeductedPayload,
        product_id=stringify_id(product_id),
        variant_id=stringify_id(variant_id),
        quantity=quantity,
        order_id=stringify_id(order_id),
        deducted_at=utc_now_iso(),
    )
    return StockDeducted(payload=payload)


def create_stock_restored_event(product_id: Any, variant_id: Any, quantity: Any, order_id: Any) -> StockRestored:
    require_values("StockRestored", product_id=product_id, variant_id=variant_id,
                   quantity=quantity, order_id=order_id)
    payload = build_payload(
        "StockRestored",
        StockRestoredPayload,
        product_id=stringify_id(product_id),
        variant_id=stringify_id(variant_id),
        quantity=quantity,
        order_id=stringify_id(order_id),
        restored_at=utc_now_iso(),
    )
    return StockRestored(payload=payload)

