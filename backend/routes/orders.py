from fastapi import APIRouter, Depends, Request, status

from core.dependencies import get_order_service
from core.middleware import validate
from core.utils.correlation import get_correlation_id
from core.utils.response import Response
from schemas.orders import OrderCancel, OrderCreate, OrderStatusUpdate
from services.orders import OrderService

router = APIRouter(prefix="/v1/orders", tags=["Orders"])


@router.post("")
async def create_order(
    request: Request,
    order_data: OrderCreate = Depends(validate(OrderCreate)),
    order_service: OrderService = Depends(get_order_service),
):
    """Create a new order."""
    result = await order_service.create_order(order_data, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Order created successfully",
        status_code=status.HTTP_201_CREATED,
        event=result.event_status,
    )


@router.get("/{order_id}")
async def get_order(order_id: str, order_service: OrderService = Depends(get_order_service)):
    order = await order_service.get_order(order_id)
    return Response.success(data=order.to_dict(), message="Order retrieved successfully")


@router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    request: Request,
    status_data: OrderStatusUpdate = Depends(validate(OrderStatusUpdate)),
    order_service: OrderService = Depends(get_order_service),
):
    result = await order_service.update_order_status(order_id, status_data, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Order status updated successfully",
        event=result.event_status,
    )


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    request: Request,
    cancel_data: OrderCancel = Depends(validate(OrderCancel)),
    order_service: OrderService = Depends(get_order_service),
):
    result = await order_service.cancel_order(order_id, cancel_data, get_correlation_id(request))
    return Response.success(
        data=result.value.to_dict(),
        message="Order cancelled successfully",
        event=result.event_status,
    )
