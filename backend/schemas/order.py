from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from models.order import OrderStatus


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    unit: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


# Delivery details supplied at checkout
class OrderCreatePayload(BaseModel):
    delivery_address: str = Field(min_length=1)
    delivery_city: str = Field(min_length=1)
    delivery_phone: str = Field(min_length=1)
    notes: Optional[str] = None


# Line item as materialised by checkout
class CreatedOrderItem(BaseModel):
    product_id: int
    quantity: int
    unit_price: float
    total_price: float


# One farmer-scoped order produced by checkout
class CreatedOrder(BaseModel):
    orderId: int
    farmerId: int
    totalAmount: float
    items: List[CreatedOrderItem]


class CheckoutResponse(BaseModel):
    message: str
    orders: List[CreatedOrder]


# Output schema representing an order with display names
class OrderResponse(BaseModel):
    id: int
    buyer_id: int
    farmer_id: int
    total_amount: float
    status: OrderStatus
    delivery_address: str
    delivery_city: str
    delivery_phone: str
    notes: Optional[str] = None
    order_date: Optional[datetime] = None
    buyer_name: Optional[str] = None
    farmer_name: Optional[str] = None
    farmer_location: Optional[str] = None


class OrderDetailResponse(OrderResponse):
    items: List[OrderItemOut]


# Flat row per order item, order columns repeated on every row
class OrderRow(OrderResponse):
    order_item_id: Optional[int] = None
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    unit: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: str


class MessageResponse(BaseModel):
    message: str
