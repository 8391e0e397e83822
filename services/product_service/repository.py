from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.common import (
    InsufficientStockError,
    PaginationParams,
    ProductNotFoundError,
    ProductUnavailableError,
)
from .models import Product

_SORT_COLUMNS = {
    "name": Product.name,
    "price": Product.price,
    "stockquantity": Product.stock_quantity,
    "createdat": Product.created_at,
}


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(db: AsyncSession, params: PaginationParams):
        query = select(Product).where(Product.is_deleted.is_(False))
        if params.search_term:
            pattern = f"%{params.search_term}%"
            query = query.where(or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
                Product.sku.ilike(pattern),
            ))

        column = _SORT_COLUMNS.get((params.sort_by or "").lower())
        if column is None:
            # Newest first unless the caller names a known column
            query = query.order_by(Product.created_at.desc(), Product.id.desc())
        else:
            query = query.order_by(column.desc() if params.sort_descending else column.asc(), Product.id)

        total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
        result = await db.execute(query.offset(params.offset).limit(params.page_size))
        return result.scalars().all(), total or 0

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int, for_update: bool = False) -> Optional[Product]:
        query = select(Product).where(Product.id == product_id, Product.is_deleted.is_(False))
        if for_update:
            # Row lock where the backend has one; always re-read past the identity map.
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def sku_exists(db: AsyncSession, sku: str, exclude_id: Optional[int] = None) -> bool:
        # Soft-deleted rows still hold their SKU under the unique constraint.
        query = select(Product.id).where(Product.sku == sku)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        return await db.scalar(query.limit(1)) is not None

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def soft_delete_product(db: AsyncSession, product: Product):
        # Order lines keep referencing the row, so products are never physically removed.
        product.is_deleted = True
        product.is_available = False
        await db.commit()

    # --- INVENTORY LEDGER ---
    # Both operations mutate stock inside the caller's transaction; neither commits.

    @staticmethod
    async def reserve(db: AsyncSession, product_id: int, quantity: int) -> Product:
        """Decrement stock for one order line, or raise the reason it cannot be reserved."""
        product = await ProductRepository.get_product_by_id(db, product_id, for_update=True)
        if not product:
            raise ProductNotFoundError(product_id)
        if not product.is_available:
            raise ProductUnavailableError(product.name)
        if product.stock_quantity < quantity:
            raise InsufficientStockError(product.name)

        product.stock_quantity -= quantity
        await db.flush()
        return product

    @staticmethod
    async def restore(db: AsyncSession, product_id: int, quantity: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id, for_update=True)
        if not product:
            raise ProductNotFoundError(product_id)

        product.stock_quantity += quantity
        await db.flush()
        return product
