from fastapi import APIRouter, Depends, Request, status

from core.dependencies import get_product_service
from core.middleware import validate
from core.utils.correlation import get_correlation_id
from core.utils.response import Response
from schemas.product import ProductCreate, ProductUpdate, StockChange
from services.products import ProductService

router = APIRouter(prefix="/v1/products", tags=["Products"])


@router.post("")
async def create_product(
    request: Request,
    product_data: ProductCreate = Depends(validate(ProductCreate)),
    product_service: ProductService = Depends(get_product_service),
):
    result = await product_service.create_product(product_data, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Product created successfully",
        status_code=status.HTTP_201_CREATED,
        event=result.event_status,
    )


@router.get("/{product_id}")
async def get_product(product_id: str, product_service: ProductService = Depends(get_product_service)):
    product = await product_service.get_product(product_id)
    return Response.success(data=product.to_dict(), message="Product retrieved successfully")


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    request: Request,
    product_data: ProductUpdate = Depends(validate(ProductUpdate)),
    product_service: ProductService = Depends(get_product_service),
):
    result = await product_service.update_product(product_id, product_data, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Product updated successfully",
        event=result.event_status,
    )


@router.post("/{product_id}/stock/deduct")
async def deduct_stock(
    product_id: str,
    request: Request,
    change: StockChange = Depends(validate(StockChange)),
    product_service: ProductService = Depends(get_product_service),
):
    """Deduct variant stock for an order. Rolled back (503) if StockDeducted cannot be published."""
    result = await product_service.deduct_stock(product_id, change, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Stock deducted successfully",
        event=result.event_status,
    )


@router.post("/{product_id}/stock/restore")
async def restore_stock(
    product_id: str,
    request: Request,
    change: StockChange = Depends(validate(StockChange)),
    product_service: ProductService = Depends(get_product_service),
):
    result = await product_service.restore_stock(product_id, change, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Stock restored successfully",
        event=result.event_status,
    )
