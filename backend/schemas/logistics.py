from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from models.logistics import DeliveryStatus


# Assignment request; locations default to the farm and the delivery address
class LogisticsAssign(BaseModel):
    order_id: int
    delivery_agent_id: int
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    delivery_date: Optional[datetime] = None
    estimated_delivery: Optional[datetime] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


# Partial update; delivery_status only changes through the status endpoint
class LogisticsUpdate(BaseModel):
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    delivery_date: Optional[datetime] = None
    estimated_delivery: Optional[datetime] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class DeliveryStatusUpdate(BaseModel):
    status: str
    notes: Optional[str] = None


class LogisticsResponse(BaseModel):
    id: int
    order_id: int
    delivery_agent_id: int
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None
    delivery_status: DeliveryStatus
    delivery_date: Optional[datetime] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    delivery_agent_name: Optional[str] = None
    delivery_address: Optional[str] = None
    order_status: Optional[str] = None
