from typing import Optional

from sqlalchemy import exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import OrderItem
from .models import Product


class ProductRepository:

    @staticmethod
    async def create_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession,
        category: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 12,
    ):
        query = select(Product)
        if category:
            query = query.where(Product.category == category)
        if search:
            query = query.where(func.lower(Product.name).contains(search.lower()))
        if is_active is not None:
            query = query.where(Product.is_active == is_active)

        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(
            query.order_by(Product.created_at.desc(), Product.id.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all(), total

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int):
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalars().first()

    @staticmethod
    async def update_product(db: AsyncSession, product: Product):
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product: Product):
        await db.delete(product)
        await db.commit()

    @staticmethod
    async def is_referenced_by_orders(db: AsyncSession, product_id: int) -> bool:
        stmt = select(
            exists().where(OrderItem.item_type == "product", OrderItem.item_id == product_id)
        )
        return bool(await db.scalar(stmt))

    @staticmethod
    async def reduce_stock(db: AsyncSession, product_id: int, quantity: int) -> bool:
        """Atomically decrements stock; returns False when stock is insufficient."""
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
        )
        return result.rowcount == 1

    @staticmethod
    async def restore_stock(db: AsyncSession, product_id: int, quantity: int):
        await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + quantity)
        )
