from datetime import datetime, timedelta, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from shared.config.database import Base

from .lifecycle import OrderStatus, PaymentStatus, compute_totals

ESTIMATED_DELIVERY_DAYS = 7


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), unique=True, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    total_items = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)
    tax = Column(Integer, nullable=False)
    shipping = Column(Integer, nullable=False)
    total = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_method = Column(String(20), nullable=False, default="cod")
    shipping_address = Column(JSON, nullable=False)  # street, province, district
    order_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String(1000), nullable=True)
    order_url = Column(String(500), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem", back_populates="order", lazy="selectin", cascade="all, delete-orphan"
    )
    reviews = relationship(
        "OrderReview", back_populates="order", lazy="selectin", cascade="all, delete-orphan"
    )
    refund = relationship(
        "OrderRefund", back_populates="order", lazy="selectin", uselist=False,
        cascade="all, delete-orphan",
    )

    def recalculate_totals(self):
        """Recomputes the aggregate columns from the current line items."""
        totals = compute_totals((item.quantity, item.subtotal) for item in self.items)
        self.total_items = totals.total_items
        self.subtotal = totals.subtotal
        self.tax = totals.tax
        self.shipping = totals.shipping
        self.total = totals.total

    def set_estimated_delivery(self):
        if self.estimated_delivery is None:
            self.estimated_delivery = (self.order_date or utcnow()) + timedelta(days=ESTIMATED_DELIVERY_DAYS)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    item_type = Column(String(10), nullable=False)  # pet, product
    item_id = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    unit_price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)
    image = Column(String(500), nullable=False, default="")

    order = relationship("Order", back_populates="items")


class OrderReview(Base):
    __tablename__ = "order_reviews"
    __table_args__ = (UniqueConstraint("order_id", "user_id", name="uq_order_review_user"),)

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    order = relationship("Order", back_populates="reviews")


class OrderRefund(Base):
    __tablename__ = "order_refunds"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    reason = Column(Text, nullable=False)
    bank_name = Column(String(100), nullable=False)
    account_number = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")
    images = Column(JSON, nullable=False, default=list)
    amount = Column(Integer, nullable=False)
    requested_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    order = relationship("Order", back_populates="refund")
