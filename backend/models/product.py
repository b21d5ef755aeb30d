# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Product
# A single produce listing owned by exactly one farmer.
# Rows are never removed: "deleting" clears is_active so that order items
# placed earlier keep pointing at a valid product.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    farmer_id = Column(Integer, ForeignKey("farmers.id"), nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)

    price = Column(Float, CheckConstraint("price > 0"), nullable=False)
    quantity_available = Column(Integer, CheckConstraint("quantity_available >= 0"), nullable=False)
    unit = Column(String, nullable=False)

    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    farmer = relationship("Farmer", back_populates="products")
