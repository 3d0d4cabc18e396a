from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from shared.config.database import Base


class Pet(Base):
    __tablename__ = "pets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    breed = Column(String(100), nullable=False)
    gender = Column(String(10), nullable=False)  # Male, Female
    age = Column(String(50), nullable=False)
    size = Column(String(10), nullable=False)  # Small, Medium, Large
    color = Column(String(50), nullable=False)
    price = Column(Integer, nullable=False)  # VND
    images = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    is_vaccinated = Column(Boolean, nullable=False, default=False)
    is_dewormed = Column(Boolean, nullable=False, default=False)
    has_cert = Column(Boolean, nullable=False, default=False)
    has_microchip = Column(Boolean, nullable=False, default=False)
    location = Column(String(200), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True, index=True)
    published_date = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
