import math

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from services.product_service.schemas import Pagination
from shared.errors import ErrorCode, NotFoundException
from .models import Pet
from .repository import PetRepository
from .schemas import PetCreate, PetListResponse, PetResponse, PetUpdate

logger = structlog.get_logger(__name__)


class PetService:

    @staticmethod
    async def create_pet(db: AsyncSession, data: PetCreate):
        pet = await PetRepository.create_pet(db, Pet(**data.model_dump()))
        logger.info("pet_created", pet_id=pet.id)
        return pet

    @staticmethod
    async def list_pets(
        db: AsyncSession,
        page: int = 1,
        limit: int = 12,
        is_available: bool | None = None,
        search: str | None = None,
    ) -> PetListResponse:
        pets, total = await PetRepository.list_pets(
            db, is_available=is_available, search=search, offset=(page - 1) * limit, limit=limit
        )
        return PetListResponse(
            pets=[PetResponse.model_validate(p) for p in pets],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )

    @staticmethod
    async def get_pet_by_id(db: AsyncSession, pet_id: int) -> Pet:
        pet = await PetRepository.get_pet_by_id(db, pet_id)
        if not pet:
            raise NotFoundException(f"Pet with ID {pet_id} not found", ErrorCode.PET_NOT_FOUND)
        return pet

    @staticmethod
    async def update_pet(db: AsyncSession, pet_id: int, data: PetUpdate) -> Pet:
        pet = await PetService.get_pet_by_id(db, pet_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(pet, field, value)
        return await PetRepository.update_pet(db, pet)

    @staticmethod
    async def delete_pet(db: AsyncSession, pet_id: int):
        pet = await PetService.get_pet_by_id(db, pet_id)
        await PetRepository.delete_pet(db, pet)
        logger.info("pet_deleted", pet_id=pet_id)
