from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.database import get_db
from shared.security import CurrentUser, require_roles
from .schemas import ProductCategory, ProductCreate, ProductListResponse, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

staff_only = require_roles("staff", "admin")


@router.get("/health")
async def health_check():
    return {"service": "product", "status": "running"}


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product: ProductCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(staff_only),
):
    return await ProductService.create_product(db, product, created_by=user.id)


@router.get("/", response_model=ProductListResponse)
async def list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1, le=100),
    category: Optional[ProductCategory] = Query(default=None),
    search: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await ProductService.list_products(
        db, page=page, limit=limit, category=category, search=search, is_active=is_active
    )


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductService.get_product_by_id(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await ProductService.update_product(db, product_id, payload)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    product = await ProductService.delete_product(db, product_id)
    if product is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return ProductResponse.model_validate(product)
