from fastapi import APIRouter, Depends, Request, status

from core.dependencies import get_user_service
from core.middleware import validate
from core.utils.correlation import get_correlation_id
from core.utils.response import Response
from schemas.user import UserCreate, UserUpdate
from services.user import UserService

router = APIRouter(prefix="/v1/users", tags=["Users"])


@router.post("/register")
async def register(
    request: Request,
    user_data: UserCreate = Depends(validate(UserCreate)),
    user_service: UserService = Depends(get_user_service),
):
    """Register a new buyer or seller and publish UserRegistered."""
    result = await user_service.register_user(user_data, get_correlation_id(request))
    return Response.success(
        data=result.value.public_dict(),
        message="User registered successfully",
        status_code=status.HTTP_201_CREATED,
        event=result.event_status,
    )


@router.get("/{user_id}")
async def get_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    user = await user_service.get_user(user_id)
    return Response.success(data=user.public_dict(), message="User retrieved successfully")


@router.patch("/{user_id}")
async def update_user(
    user_id: str,
    request: Request,
    user_data: UserUpdate = Depends(validate(UserUpdate)),
    user_service: UserService = Depends(get_user_service),
):
    result = await user_service.update_user(user_id, user_data, get_correlation_id(request))
    return Response.success(
        data=result.value.public_dict(),
        message="User updated successfully",
        event=result.event_status,
    )


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    request: Request,
    user_service: UserService = Depends(get_user_service),
):
    result = await user_service.delete_user(user_id, get_correlation_id(request))
    return Response.success(
        data={"id": result.value.id},
        message="User deleted successfully",
        event=result.event_status,
    )
