# backend/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product listing
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(gt=0)
    quantity_available: int = Field(ge=0)
    unit: str = Field(min_length=1)
    category: Optional[str] = None
    image_url: Optional[str] = None


# Schema for partial product updates
class ProductUpdate(BaseModel):
    """Schema for PUT requests - every field optional, only supplied ones are written."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    quantity_available: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    image_url: Optional[str] = None


# Catalog entry with the owning farmer's display data
class ProductResponse(ORMBase):
    id: int
    farmer_id: int
    name: str
    description: Optional[str] = None
    price: float
    quantity_available: int
    unit: str
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    farmer_name: Optional[str] = None
    farmer_location: Optional[str] = None


class ProductCreated(BaseModel):
    productId: int
    message: str
