import math

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import ErrorCode, NotFoundException
from .models import Product
from .repository import ProductRepository
from .schemas import Pagination, ProductCreate, ProductListResponse, ProductResponse, ProductUpdate

logger = structlog.get_logger(__name__)


class ProductService:

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate, created_by: int | None = None):
        product = Product(**data.model_dump(), created_by=created_by)
        product.apply_discount()
        product = await ProductRepository.create_product(db, product)
        logger.info("product_created", product_id=product.id, stock=product.stock)
        return product

    @staticmethod
    async def list_products(
        db: AsyncSession,
        page: int = 1,
        limit: int = 12,
        category: str | None = None,
        search: str | None = None,
        is_active: bool | None = None,
    ) -> ProductListResponse:
        products, total = await ProductRepository.list_products(
            db,
            category=category,
            search=search,
            is_active=is_active,
            offset=(page - 1) * limit,
            limit=limit,
        )
        return ProductListResponse(
            products=[ProductResponse.model_validate(p) for p in products],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Product:
        product = await ProductRepository.get_product_by_id(db, product_id)
        if not product:
            raise NotFoundException(f"Product with ID {product_id} not found", ErrorCode.PRODUCT_NOT_FOUND)
        return product

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate) -> Product:
        product = await ProductService.get_product_by_id(db, product_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        product.apply_discount()
        return await ProductRepository.update_product(db, product)

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> Product | None:
        """Deletes a product, or deactivates it when orders still reference it."""
        product = await ProductService.get_product_by_id(db, product_id)
        if await ProductRepository.is_referenced_by_orders(db, product_id):
            product.is_active = False
            logger.info("product_deactivated", product_id=product_id)
            return await ProductRepository.update_product(db, product)
        await ProductRepository.delete_product(db, product)
        logger.info("product_deleted", product_id=product_id)
        return None
