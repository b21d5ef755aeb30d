from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)

# Request schema for updating a cart line; 0 removes the line
class CartUpdateItem(BaseModel):
    product_id: int
    quantity: int = Field(ge=0)

# Response schema for a single cart line with live product data
class CartItemOut(BaseModel):
    cart_id: int
    product_id: int
    quantity: int
    added_at: Optional[datetime] = None
    name: str
    description: Optional[str] = None
    price: float
    unit: str
    image_url: Optional[str] = None
    farmer_id: int
    farmer_name: Optional[str] = None
    farmer_location: Optional[str] = None
    line_total: float

# Response schema for the cart total
class CartTotal(BaseModel):
    total: float
