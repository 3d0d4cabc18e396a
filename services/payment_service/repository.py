from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from .models import PaymentTransaction

class PaymentRepository:
    @staticmethod
    async def create_transaction(db: AsyncSession, transaction: PaymentTransaction):
        db.add(transaction)
        await db.commit()
        await db.refresh(transaction)
        return transaction

    @staticmethod
    async def get_by_app_trans_id(db: AsyncSession, app_trans_id: str):
        result = await db.execute(
            select(PaymentTransaction).where(PaymentTransaction.app_trans_id == app_trans_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_latest_for_order(db: AsyncSession, order_id: int):
        result = await db.execute(
            select(PaymentTransaction)
            .where(PaymentTransaction.order_id == order_id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
        )
        return result.scalars().first()
