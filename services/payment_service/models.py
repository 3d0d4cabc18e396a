from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from shared.config.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentTransaction(Base):
    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    app_trans_id = Column(String(64), unique=True, nullable=False)
    zp_trans_token = Column(String(255), nullable=False)
    order_url = Column(String(500), nullable=False, default="")
    amount = Column(Integer, nullable=False)
    description = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, success, failed
    zp_transaction_id = Column(String(64), nullable=True)
    payment_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
