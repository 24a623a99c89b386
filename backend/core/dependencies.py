"""
Request-scoped accessors for the objects main.create_app wires onto app.state.
"""
from fastapi import Request

from core.events import EventPublisher
from services.orders import OrderService
from services.products import ProductService
from services.user import UserService


def get_publisher(request: Request) -> EventPublisher:
    return request.app.state.publisher


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service
