# backend/models/logistics.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from database import Base
from models.order import _enum_values
import enum

# Progress of a delivery handled by a logistics agent
class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"

DELIVERY_TRANSITIONS = {
    DeliveryStatus.PENDING: {
        DeliveryStatus.PICKED_UP, DeliveryStatus.IN_TRANSIT,
        DeliveryStatus.DELIVERED, DeliveryStatus.FAILED,
    },
    DeliveryStatus.PICKED_UP: {DeliveryStatus.IN_TRANSIT, DeliveryStatus.DELIVERED, DeliveryStatus.FAILED},
    DeliveryStatus.IN_TRANSIT: {DeliveryStatus.DELIVERED, DeliveryStatus.FAILED},
    DeliveryStatus.DELIVERED: set(),
    DeliveryStatus.FAILED: set(),
}


def can_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    return target in DELIVERY_TRANSITIONS.get(current, set())


# Delivery assignment for an order, at most one per order.
# The one-per-order rule is checked by the logistics service before insert.
class Logistics(Base):
    __tablename__ = "logistics"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    delivery_agent_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    pickup_location = Column(String, nullable=True)
    dropoff_location = Column(String, nullable=True)
    delivery_status = Column(
        Enum(DeliveryStatus, values_callable=_enum_values, native_enum=False, length=20),
        default=DeliveryStatus.PENDING,
        nullable=False,
    )

    delivery_date = Column(DateTime(timezone=True), nullable=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=True)
    actual_delivery = Column(DateTime(timezone=True), nullable=True)
    tracking_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    order = relationship("Order", back_populates="logistics")
    agent = relationship("User")
