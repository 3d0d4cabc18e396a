from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from services.payment_service.zalopay import ZaloPayClient, get_zalopay_client
from shared.config.database import get_db
from shared.config.settings import CHECKOUT_RATE_LIMIT
from shared.security import CurrentUser, get_current_user, limiter, require_roles

from .schemas import (
    DailyOrderStats,
    MonthlyOrderStats,
    OrderCreate,
    OrderFilters,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderSummaryResponse,
    RefundCreate,
    ReviewCreate,
)
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

customer_only = require_roles("customer")
staff_only = require_roles("staff", "admin")


@router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "order", "status": "running"}


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(CHECKOUT_RATE_LIMIT)
async def create_order(
    request: Request,
    payload: OrderCreate,
    db: AsyncSession = Depends(get_db),
    gateway: ZaloPayClient = Depends(get_zalopay_client),
    user: CurrentUser = Depends(customer_only),
):
    return await OrderService.create_order(db, user.id, payload, gateway)


@router.get("/", response_model=OrderListResponse)
async def list_orders(
    filters: Annotated[OrderFilters, Query()],
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    # Customers only ever see their own orders
    customer_id = user.id if user.is_customer else None
    return await OrderService.list_orders(db, filters, customer_id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    customer_id = user.id if user.is_customer else None
    return await OrderService.get_order(db, order_id, customer_id)


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(customer_only),
):
    return await OrderService.cancel_order(db, order_id, user.id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await OrderService.update_order_status(db, order_id, payload.status)


@router.patch("/{order_id}/refund", response_model=OrderResponse)
async def request_refund(
    order_id: int,
    payload: RefundCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(customer_only),
):
    return await OrderService.request_refund(db, order_id, user.id, payload)


@router.post("/{order_id}/review", response_model=OrderResponse)
async def add_review(
    order_id: int,
    payload: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(customer_only),
):
    return await OrderService.add_review(db, order_id, user.id, payload)


@router.delete("/{order_id}/review", response_model=OrderResponse)
async def delete_review(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    user: CurrentUser = Depends(customer_only),
):
    return await OrderService.remove_review(db, order_id, user.id)


admin_router = APIRouter(prefix="/admin/orders", tags=["Admin"])


@admin_router.get("/summary", response_model=OrderSummaryResponse)
async def order_summary(
    days: int = Query(default=7, ge=1, le=365),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await OrderService.get_summary(db, days)


@admin_router.get("/by-month", response_model=List[MonthlyOrderStats])
async def orders_by_month(
    year: Optional[int] = Query(default=None, ge=2000, le=9999),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await OrderService.orders_by_month(db, year)


@admin_router.get("/by-day", response_model=List[DailyOrderStats])
async def orders_by_day(
    days: int = Query(default=30, ge=1, le=366),
    db: AsyncSession = Depends(get_db),
    _: CurrentUser = Depends(staff_only),
):
    return await OrderService.orders_by_day(db, days)
