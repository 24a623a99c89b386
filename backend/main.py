from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import configuration and middleware
from core.config import settings
from core.database import OrderRepository, ProductRepository, UserRepository
from core.events import (
    BrokerConnectionError,
    CircuitBreaker,
    EventPublisher,
    EventPublishingError,
    PublishError,
)
from core.kafka import ProducerFactory, kafka_producer_factory
from core.logging import setup_logging
from core.middleware import CorrelationIdMiddleware
# Import exceptions and handlers
from core.exceptions import (
    APIException,
    api_exception_handler,
    event_construction_exception_handler,
    general_exception_handler,
    http_exception_handler,
    publish_error_handler,
    validation_exception_handler,
)
from routes import SERVICE_ROUTERS, health_router
from services import (
    AuthServiceProducer,
    OrderService,
    OrderServiceProducer,
    ProductService,
    ProductServiceProducer,
    UserService,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup event
    publisher: EventPublisher = app.state.publisher
    try:
        await publisher.connect()
    except BrokerConnectionError as e:
        if app.state.require_broker:
            logger.error(f"Kafka is required on startup for {publisher.service_name}: {e}")
            raise
        logger.warning(
            f"Starting {publisher.service_name} without Kafka: {e}. "
            "Non-critical events will be skipped and critical operations will fail fast."
        )

    yield

    # Shutdown event
    await publisher.disconnect()


def create_app(
    service_name: str = settings.SERVICE_NAME,
    producer_factory: Optional[ProducerFactory] = None,
    require_broker: Optional[bool] = None,
) -> FastAPI:
    """
    Build the FastAPI app for one of auth-service, product-service or order-service.

    The service name is the producer identity on every message and picks the
    routers to mount; producer_factory defaults to a real AIOKafkaProducer.
    """
    if service_name not in SERVICE_ROUTERS:
        raise ValueError(f"Unknown service {service_name!r}; expected one of {sorted(SERVICE_ROUTERS)}")

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, service=service_name)

    app = FastAPI(
        title=service_name,
        description="Domain service publishing its events to Kafka.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    publisher = EventPublisher(
        service_name,
        producer_factory or kafka_producer_factory(service_name),
        connect_timeout=settings.KAFKA_CONNECT_TIMEOUT_SECONDS,
        publish_timeout=settings.KAFKA_PUBLISH_TIMEOUT_SECONDS,
        circuit_breaker=CircuitBreaker(
            failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
            reset_timeout=settings.CIRCUIT_BREAKER_RESET_TIMEOUT_SECONDS,
            name=service_name,
        ),
    )
    app.state.publisher = publisher
    app.state.require_broker = settings.KAFKA_REQUIRED_ON_STARTUP if require_broker is None else require_broker

    if service_name == "auth-service":
        app.state.user_service = UserService(UserRepository(), AuthServiceProducer(publisher))
    elif service_name == "product-service":
        app.state.product_service = ProductService(ProductRepository(), ProductServiceProducer(publisher))
    else:
        app.state.order_service = OrderService(OrderRepository(), OrderServiceProducer(publisher))

    app.add_middleware(CorrelationIdMiddleware, header_name=settings.CORRELATION_ID_HEADER)

    for router in SERVICE_ROUTERS[service_name]:
        app.include_router(router)
    app.include_router(health_router)

    @app.get("/")
    async def read_root():
        return {
            "service": service_name,
            "status": "Running",
            "version": "1.0.0",
        }

    # Register exception handlers
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(PublishError, publish_error_handler)
    app.add_exception_handler(EventPublishingError, event_construction_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()
