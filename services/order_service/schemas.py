from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from services.product_service.schemas import Pagination
from .lifecycle import OrderStatus, PaymentStatus


class OrderItemCreate(BaseModel):
    type: Literal["pet", "product"]
    item_id: int
    quantity: int = Field(..., ge=1)


class ShippingAddress(BaseModel):
    street: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    district: str = Field(..., min_length=1)

    @field_validator("street", "province", "district")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    notes: Optional[str] = Field(default=None, max_length=1000)
    payment_method: Literal["cod", "zalopay"] = "cod"


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class RefundCreate(BaseModel):
    reason: str = Field(..., min_length=1)
    bank_name: str = Field(..., min_length=1, max_length=100)
    account_number: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    images: List[str] = []


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Review content cannot be empty")
        return v


class OrderFilters(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=15, ge=1, le=100)
    sort_by: Literal["order_date", "total", "order_number"] = "order_date"
    sort_order: Literal["asc", "desc"] = "desc"


class OrderItemResponse(BaseModel):
    type: str = Field(validation_alias=AliasChoices("item_type", "type"))
    item_id: int
    name: str
    unit_price: int
    quantity: int
    subtotal: int
    image: str

    class Config:
        from_attributes = True


class OrderReviewResponse(BaseModel):
    user_id: int
    rating: int
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


class RefundInfoResponse(BaseModel):
    reason: str
    bank_name: str
    account_number: str
    description: str
    images: List[str]
    amount: int
    requested_at: datetime

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    customer_id: int
    items: List[OrderItemResponse]
    total_items: int
    subtotal: int
    tax: int
    shipping: int
    total: int
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: str
    shipping_address: ShippingAddress
    order_date: datetime
    estimated_delivery: Optional[datetime] = None
    notes: Optional[str] = None
    order_url: Optional[str] = None
    paid_at: Optional[datetime] = None
    reviews: List[OrderReviewResponse] = []
    refund_info: Optional[RefundInfoResponse] = Field(
        default=None, validation_alias=AliasChoices("refund", "refund_info")
    )

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]
    pagination: Pagination


class OrderSummaryResponse(BaseModel):
    days: int
    orders: int
    revenue: int
    status_breakdown: Dict[str, int]
    current_month_revenue: int
    last_month_revenue: int
    revenue_change: float  # percent against last month


class OrderStatsBucket(BaseModel):
    count: int = 0
    revenue: int = 0
    profit: int = 0


class MonthlyOrderStats(OrderStatsBucket):
    month: str


class DailyOrderStats(OrderStatsBucket):
    date: str  # YYYY-MM-DD, UTC
