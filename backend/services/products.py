import logging
from typing import Optional

from core.database import InsufficientStockError, ProductRepository, RepositoryError, VariantNotFoundError
from core.events import EventPublishingError
from core.exceptions import AuthorizationException, ConflictException, NotFoundException
from models.product import Product, ProductVariant
from schemas.product import ProductCreate, ProductUpdate, StockChange
from services.kafka_producer import ProductServiceProducer, ServiceResult

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, repository: ProductRepository, producer: ProductServiceProducer):
        self.repository = repository
        self.producer = producer

    async def create_product(self, product_data: ProductCreate, correlation_id: Optional[str] = None) -> ServiceResult:
        product = Product(
            seller_id=product_data.seller_id,
            name=product_data.name,
            description=product_data.description,
            category=product_data.category,
            base_price=product_data.base_price,
            variants=[ProductVariant(**variant.model_dump()) for variant in product_data.variants],
        )
        await self.repository.add(product)
        logger.info(f"Product created: {product.id} by seller {product.seller_id}")

        event = await self.producer.publish_product_created(product, correlation_id)
        return ServiceResult(product, event)

    async def get_product(self, product_id: str) -> Product:
        product = await self.repository.get(product_id)
        if not product:
            raise NotFoundException("Product not found", resource="product")
        return product

    async def update_product(
        self, product_id: str, product_data: ProductUpdate, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        product = await self.get_product(product_id)
        if product.seller_id != product_data.seller_id:
            raise AuthorizationException("Unauthorized to update this product")

        updates = product_data.model_dump(exclude_unset=True, exclude_none=True, exclude={"seller_id", "variants"})
        for field_name, value in updates.items():
            setattr(product, field_name, value)
        if product_data.variants is not None:
            product.variants = [ProductVariant(**variant.model_dump()) for variant in product_data.variants]

        product.touch()
        await self.repository.save(product)
        logger.info(f"Product updated: {product.id}")

        event = await self.producer.publish_product_updated(product, correlation_id)
        return ServiceResult(product, event)

    async def deduct_stock(
        self, product_id: str, change: StockChange, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        """
        Atomically deduct stock and publish StockDeducted.

        StockDeducted is critical: if it cannot be published the deduction is
        reverted before the error propagates.
        """
        product = await self._adjust(product_id, change.variant_id, -change.quantity)
        logger.info(
            f"Stock deducted: {change.quantity} of {product.id}/{change.variant_id} for order {change.order_id}"
        )
        try:
            event = await self.producer.publish_stock_deducted(
                product.id, change.variant_id, change.quantity, change.order_id, correlation_id
            )
        except EventPublishingError:
            await self._compensate(product.id, change.variant_id, change.quantity, "deduction")
            raise
        return ServiceResult(product, event)

    async def restore_stock(
        self, product_id: str, change: StockChange, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        """Atomically restore stock and publish StockRestored; reverted if the event cannot be published."""
        product = await self._adjust(product_id, change.variant_id, change.quantity)
        logger.info(
            f"Stock restored: {change.quantity} of {product.id}/{change.variant_id} for order {change.order_id}"
        )
        try:
            event = await self.producer.publish_stock_restored(
                product.id, change.variant_id, change.quantity, change.order_id, correlation_id
            )
        except EventPublishingError:
            await self._compensate(product.id, change.variant_id, -change.quantity, "restoration")
            raise
        return ServiceResult(product, event)

    async def _adjust(self, product_id: str, variant_id: str, delta: int) -> Product:
        try:
            return await self.repository.adjust_stock(product_id, variant_id, delta)
        except VariantNotFoundError as e:
            raise NotFoundException(str(e), resource="product")
        except InsufficientStockError as e:
            raise ConflictException(str(e))

    async def _compensate(self, product_id: str, variant_id: str, delta: int, operation: str) -> None:
        try:
            await self.repository.adjust_stock(product_id, variant_id, delta)
            logger.warning(f"Stock {operation} for {product_id}/{variant_id} reverted: event not published")
        except RepositoryError as e:
            logger.error(f"Could not revert stock {operation} for {product_id}/{variant_id}: {e}")
