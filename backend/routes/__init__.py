# Consolidated route imports
from .auth import router as auth_router
from .health import router as health_router
from .orders import router as orders_router
from .products import router as products_router

# Routers mounted per service; health is mounted on every service
SERVICE_ROUTERS = {
    "auth-service": [auth_router],
    "product-service": [products_router],
    "order-service": [orders_router],
}

__all__ = [
    "auth_router",
    "health_router",
    "orders_router",
    "products_router",
    "SERVICE_ROUTERS",
]
