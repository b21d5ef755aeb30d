# backend/models/payment.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from database import Base
from models.order import _enum_values
import enum

# Payment attempt states; an admin decision moves a payment out of PENDING once
class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

# One row per payment attempt against an order
class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_method = Column(String, nullable=False)
    transaction_id = Column(String, nullable=False)
    payment_status = Column(
        Enum(PaymentStatus, values_callable=_enum_values, native_enum=False, length=20),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )

    # Admin decision details
    processed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(String, nullable=True)

    payment_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    order = relationship("Order", back_populates="payments")
