from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from models.payment import PaymentStatus


class PaymentCreate(BaseModel):
    order_id: int
    amount: float = Field(gt=0)
    payment_method: str = Field(min_length=1)
    transaction_id: str = Field(min_length=1)


# Admin decision body for approve/reject
class PaymentDecision(BaseModel):
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    order_id: int
    amount: float
    payment_method: str
    transaction_id: str
    payment_status: PaymentStatus
    processed_by: Optional[int] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = None
    order_amount: Optional[float] = None
    buyer_name: Optional[str] = None


class PaymentCreated(BaseModel):
    paymentId: int
    message: str
