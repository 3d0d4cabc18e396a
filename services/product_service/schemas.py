from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ProductCategory = Literal["Food", "Toy", "Accessory", "Healthcare", "Grooming", "Other"]


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: ProductCategory
    brand: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0)
    original_price: Optional[int] = Field(default=None, ge=0)
    description: str = Field(..., min_length=1, max_length=2000)
    images: List[str] = Field(..., min_length=1)
    stock: int = Field(default=0, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[ProductCategory] = None
    brand: Optional[str] = Field(default=None, min_length=1, max_length=100)
    price: Optional[int] = Field(default=None, ge=0)
    original_price: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    images: Optional[List[str]] = Field(default=None, min_length=1)
    stock: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    category: str
    brand: str
    price: int
    original_price: Optional[int] = None
    discount: Optional[int] = None
    description: str
    images: List[str]
    stock: int
    is_in_stock: bool
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: Pagination
