import time
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .lifecycle import REVENUE_STATUSES, PaymentStatus
from .models import Order
from .schemas import OrderFilters

ORDER_NUMBER_BASE = 1000


class OrderRepository:

    @staticmethod
    async def add(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.flush()
        return order

    @staticmethod
    async def save(db: AsyncSession, order: Order) -> Order:
        db.add(order)
        await db.commit()
        return await OrderRepository.get_order(db, order.id)

    @staticmethod
    async def get_order(db: AsyncSession, order_id: int, customer_id: Optional[int] = None):
        query = select(Order).where(Order.id == order_id)
        if customer_id is not None:
            query = query.where(Order.customer_id == customer_id)
        # Reload columns and collections that may have changed in another transaction
        result = await db.execute(query.execution_options(populate_existing=True))
        return result.scalars().first()

    @staticmethod
    async def list_orders(db: AsyncSession, filters: OrderFilters, customer_id: Optional[int] = None):
        query = select(Order)
        if customer_id is not None:
            query = query.where(Order.customer_id == customer_id)
        if filters.status:
            query = query.where(Order.status == filters.status.value)
        if filters.payment_status:
            query = query.where(Order.payment_status == filters.payment_status.value)
        if filters.search:
            query = query.where(func.lower(Order.order_number).contains(filters.search.lower()))

        total = await db.scalar(select(func.count()).select_from(query.subquery()))

        sort_column = getattr(Order, filters.sort_by)
        order_by = sort_column.asc() if filters.sort_order == "asc" else sort_column.desc()
        result = await db.execute(
            query.order_by(order_by, Order.id.desc())
            .offset((filters.page - 1) * filters.limit)
            .limit(filters.limit)
        )
        return result.scalars().all(), total

    @staticmethod
    def _revenue_orders(start: datetime, end: Optional[datetime] = None):
        query = select(Order).where(
            Order.payment_status == PaymentStatus.PAID.value,
            Order.status.in_([s.value for s in REVENUE_STATUSES]),
            Order.order_date >= start,
        )
        if end is not None:
            query = query.where(Order.order_date < end)
        return query.subquery()

    @staticmethod
    async def revenue_between(db: AsyncSession, start: datetime, end: Optional[datetime] = None) -> int:
        orders = OrderRepository._revenue_orders(start, end)
        return int(await db.scalar(select(func.coalesce(func.sum(orders.c.total), 0))))

    @staticmethod
    async def revenue_rows(db: AsyncSession, start: datetime, end: Optional[datetime] = None):
        """(order_date, total) of every paid, revenue-bearing order in the window."""
        orders = OrderRepository._revenue_orders(start, end)
        result = await db.execute(select(orders.c.order_date, orders.c.total))
        return result.all()

    @staticmethod
    async def status_counts(db: AsyncSession, since: datetime) -> Dict[str, int]:
        result = await db.execute(
            select(Order.status, func.count(Order.id))
            .where(Order.order_date >= since)
            .group_by(Order.status)
        )
        return {status: count for status, count in result.all()}

    @staticmethod
    async def next_order_number(db: AsyncSession) -> str:
        """ORD-<1000 + count + 1>, or a timestamp-based number if that one is taken."""
        count = await db.scalar(select(func.count(Order.id)))
        candidate = f"ORD-{ORDER_NUMBER_BASE + count + 1:04d}"
        taken = await db.scalar(select(exists().where(Order.order_number == candidate)))
        if taken:
            return f"ORD-{int(time.time() * 1000)}"
        return candidate
