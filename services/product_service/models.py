from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base

PRODUCT_CATEGORIES = ("Food", "Toy", "Accessory", "Healthcare", "Grooming", "Other")


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    category = Column(String(20), nullable=False, index=True)
    brand = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)  # VND
    original_price = Column(Integer, nullable=True)
    discount = Column(Integer, nullable=True)  # percent, derived from original_price
    description = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_in_stock(self) -> bool:
        return (self.stock or 0) > 0

    def apply_discount(self):
        if self.original_price and self.original_price > self.price:
            self.discount = round((self.original_price - self.price) / self.original_price * 100)
        else:
            self.discount = None
