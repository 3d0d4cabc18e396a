from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from services.product_service.schemas import Pagination


class PetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    breed: str = Field(..., min_length=1, max_length=100)
    gender: Literal["Male", "Female"]
    age: str = Field(..., min_length=1)
    size: Literal["Small", "Medium", "Large"]
    color: str = Field(..., min_length=1, max_length=50)
    price: int = Field(..., ge=0)
    images: List[str] = Field(..., min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_vaccinated: bool = False
    is_dewormed: bool = False
    has_cert: bool = False
    has_microchip: bool = False
    location: str = Field(..., min_length=1)
    is_available: bool = True


class PetUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    breed: Optional[str] = Field(default=None, min_length=1, max_length=100)
    gender: Optional[Literal["Male", "Female"]] = None
    age: Optional[str] = None
    size: Optional[Literal["Small", "Medium", "Large"]] = None
    color: Optional[str] = Field(default=None, min_length=1, max_length=50)
    price: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_vaccinated: Optional[bool] = None
    is_dewormed: Optional[bool] = None
    has_cert: Optional[bool] = None
    has_microchip: Optional[bool] = None
    location: Optional[str] = None
    is_available: Optional[bool] = None


class PetResponse(BaseModel):
    id: int
    name: str
    breed: str
    gender: str
    age: str
    size: str
    color: str
    price: int
    images: List[str]
    description: Optional[str] = None
    is_vaccinated: bool
    is_dewormed: bool
    has_cert: bool
    has_microchip: bool
    location: str
    is_available: bool
    published_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class PetListResponse(BaseModel):
    pets: List[PetResponse]
    pagination: Pagination
