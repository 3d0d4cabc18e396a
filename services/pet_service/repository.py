from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Pet


class PetRepository:

    @staticmethod
    async def create_pet(db: AsyncSession, pet: Pet):
        db.add(pet)
        await db.commit()
        await db.refresh(pet)
        return pet

    @staticmethod
    async def list_pets(
        db: AsyncSession,
        is_available: Optional[bool] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 12,
    ):
        query = select(Pet)
        if is_available is not None:
            query = query.where(Pet.is_available == is_available)
        if search:
            term = search.lower()
            query = query.where(
                func.lower(Pet.name).contains(term) | func.lower(Pet.breed).contains(term)
            )

        total = await db.scalar(select(func.count()).select_from(query.subquery()))
        result = await db.execute(
            query.order_by(Pet.published_date.desc(), Pet.id.desc()).offset(offset).limit(limit)
        )
        return result.scalars().all(), total

    @staticmethod
    async def get_pet_by_id(db: AsyncSession, pet_id: int):
        result = await db.execute(select(Pet).where(Pet.id == pet_id))
        return result.scalars().first()

    @staticmethod
    async def update_pet(db: AsyncSession, pet: Pet):
        db.add(pet)
        await db.commit()
        await db.refresh(pet)
        return pet

    @staticmethod
    async def delete_pet(db: AsyncSession, pet: Pet):
        await db.delete(pet)
        await db.commit()

    @staticmethod
    async def set_availability(db: AsyncSession, pet_id: int, is_available: bool):
        await db.execute(update(Pet).where(Pet.id == pet_id).values(is_available=is_available))
