from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shared.common import PaginationParams
from .models import Order, OrderStatus

_SORT_COLUMNS = {
    "ordernumber": Order.order_number,
    "totalamount": Order.total_amount,
    "status": Order.status,
}


class OrderRepository:
    @staticmethod
    async def add_order(db: AsyncSession, order: Order) -> Order:
        # Header and lines are written together; the caller owns the commit.
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, for_update: bool = False) -> Optional[Order]:
        query = select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
        if for_update:
            query = query.with_for_update(of=Order)
        result = await db.execute(query)
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession, params: PaginationParams):
        query = select(Order)
        if params.search_term:
            query = query.where(Order.order_number.contains(params.search_term))

        column = _SORT_COLUMNS.get((params.sort_by or "").lower())
        if column is None:
            query = query.order_by(Order.order_date.desc(), Order.id.desc())
        else:
            query = query.order_by(column.desc() if params.sort_descending else column.asc(), Order.id)

        total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
        result = await db.execute(query.offset(params.offset).limit(params.page_size))
        return result.scalars().all(), total or 0

    @staticmethod
    async def list_by_user(db: AsyncSession, user_id: str):
        result = await db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def list_by_status(db: AsyncSession, status: OrderStatus):
        result = await db.execute(
            select(Order)
            .where(Order.status == status)
            .order_by(Order.order_date.desc(), Order.id.desc())
        )
        return result.scalars().all()
