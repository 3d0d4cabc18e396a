from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import CurrentUser, require_roles
from .schemas import PetCreate, PetListResponse, PetResponse, PetUpdate
from .service import PetService

router = APIRouter(prefix="/pets", tags=["Pets"])

staff_only = require_roles("staff", "admin")


@router.post("/", response_model=PetResponse, status_code=status.HTTP_201_CREATED)
async def create_pet(
    pet: PetCreate,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await PetService.create_pet(db, pet)


@router.get("/", response_model=PetListResponse)
async def list_pets(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
    is_available: Optional[bool] = Query(default=None),
    search: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await PetService.list_pets(db, page=page, limit=limit, is_available=is_available, search=search)


@router.get("/{pet_id}", response_model=PetResponse)
async def get_pet(pet_id: int, db: AsyncSession = Depends(get_db)):
    return await PetService.get_pet_by_id(db, pet_id)


@router.put("/{pet_id}", response_model=PetResponse)
async def update_pet(
    pet_id: int,
    payload: PetUpdate,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await PetService.update_pet(db, pet_id, payload)


@router.delete("/{pet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_pet(
    pet_id: int,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    await PetService.delete_pet(db, pet_id)
