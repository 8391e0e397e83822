from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.common import DuplicateSkuError, PaginatedList, PaginationParams
from shared.messaging import PRODUCT_CREATED, PRODUCT_DELETED, PRODUCT_UPDATED, CacheService, EventPublisher
from .models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductResponse, ProductUpdate

logger = structlog.get_logger(__name__)

CACHE_KEY_PREFIX = "product_"


def product_cache_key(product_id: int) -> str:
    return f"{CACHE_KEY_PREFIX}{product_id}"


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, publisher: EventPublisher, data: ProductCreate) -> Product:
        if data.sku and await ProductRepository.sku_exists(db, data.sku):
            raise DuplicateSkuError(data.sku)

        product = Product(
            name=data.name,
            description=data.description,
            sku=data.sku,
            price=data.price,
            stock_quantity=data.stock_quantity,
            is_available=data.is_available,
        )
        product = await ProductRepository.create_product(db, product)
        logger.info("product_created", product_id=product.id, name=product.name)
        await publisher.publish(PRODUCT_CREATED, {"productId": product.id, "name": product.name})
        return product

    @staticmethod
    async def list_products(db: AsyncSession, params: PaginationParams) -> PaginatedList[Product]:
        items, total = await ProductRepository.list_products(db, params)
        return PaginatedList(list(items), total, params.page_number, params.page_size)

    @staticmethod
    async def get_product(db: AsyncSession, cache: CacheService, product_id: int) -> Optional[dict]:
        """Read path for a single product: cache first, database on a miss."""
        key = product_cache_key(product_id)
        cached = await cache.get(key)
        if cached is not None:
            return cached

        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            return None

        dto = ProductResponse.model_validate(product).model_dump(mode="json", by_alias=True)
        await cache.set(key, dto)
        return dto

    @staticmethod
    async def update_product(
        db: AsyncSession,
        cache: CacheService,
        publisher: EventPublisher,
        product_id: int,
        data: ProductUpdate,
    ) -> Optional[Product]:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            return None

        changes = data.model_dump(exclude_unset=True)
        if changes.get("sku") and await ProductRepository.sku_exists(db, changes["sku"], exclude_id=product_id):
            raise DuplicateSkuError(changes["sku"])

        for field, value in changes.items():
            setattr(product, field, value)

        product = await ProductRepository.update_product(db, product)
        await cache.invalidate(product_cache_key(product_id))
        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        await publisher.publish(PRODUCT_UPDATED, {"productId": product.id, "name": product.name})
        return product

    @staticmethod
    async def delete_product(
        db: AsyncSession, cache: CacheService, publisher: EventPublisher, product_id: int
    ) -> bool:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            return False

        await ProductRepository.soft_delete_product(db, product)
        await cache.invalidate(product_cache_key(product_id))
        logger.info("product_deleted", product_id=product_id)
        await publisher.publish(PRODUCT_DELETED, {"productId": product_id})
        return True
