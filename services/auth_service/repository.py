from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.order_service.models import Order, OrderStatus
from .models import User


class UserRepository:

    @staticmethod
    async def create(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def update(db: AsyncSession, user: User) -> User:
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    @staticmethod
    async def find_conflicting(db: AsyncSession, name: str, email: str, phone: str | None) -> Optional[User]:
        clauses = [User.name == name, User.email == email]
        if phone:
            clauses.append(User.phone == phone)
        result = await db.execute(select(User).where(or_(*clauses)))
        return result.scalars().first()

    @staticmethod
    async def get_order_stats(db: AsyncSession, user_id: int) -> tuple[int, int]:
        """Order count and total spent, derived from the customer's non-cancelled orders."""
        result = await db.execute(
            select(func.count(Order.id), func.coalesce(func.sum(Order.total), 0))
            .where(Order.customer_id == user_id)
            .where(Order.status != OrderStatus.CANCELLED.value)
        )
        count, total = result.one()
        return int(count), int(total)
