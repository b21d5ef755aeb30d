# backend/services/logistics.py
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session, joinedload

from models.logistics import DeliveryStatus, Logistics, can_transition
from models.order import OrderStatus
from models.users import User
from services.errors import BusinessRuleError, InvalidTransitionError, NotFoundError
from services.orders import OrderService
from utils.audit import write_log

logger = logging.getLogger(__name__)

# Order states from which a delivery can be arranged
ASSIGNABLE_ORDER_STATUSES = (OrderStatus.PENDING, OrderStatus.CONFIRMED)

# Fields the generic update may rewrite
UPDATABLE_FIELDS = (
    "pickup_location", "dropoff_location", "delivery_date",
    "estimated_delivery", "tracking_number", "notes",
)


class LogisticsService:
    """Delivery assignments; completing a delivery completes its order."""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderService(db)

    def _deliveries(self):
        return self.db.query(Logistics).options(
            joinedload(Logistics.agent),
            joinedload(Logistics.order),
        )

    def assign_order_to_agent(self, order_id: int, agent_id: int, data: dict = None,
                              user_id: int = None, ip: str = None) -> Logistics:
        data = data or {}
        order = self.orders.get_order_by_id(order_id)

        if order.status not in ASSIGNABLE_ORDER_STATUSES:
            raise BusinessRuleError(
                f"Order not ready for logistics assignment. Status: {order.status.value}"
            )

        # Check-then-insert: one delivery per order
        if self.db.query(Logistics).filter(Logistics.order_id == order.id).first():
            raise BusinessRuleError("Logistics already assigned to this order")

        agent = self.db.get(User, agent_id)
        if not agent:
            raise NotFoundError("Delivery agent not found")
        if agent.role != "logistics":
            raise BusinessRuleError("User is not a logistics agent")

        try:
            delivery = Logistics(
                order_id=order.id,
                delivery_agent_id=agent.id,
                pickup_location=data.get("pickup_location") or order.farmer.location,
                dropoff_location=data.get("dropoff_location")
                or f"{order.delivery_address}, {order.delivery_city}",
                delivery_status=DeliveryStatus.PENDING,
                delivery_date=data.get("delivery_date"),
                estimated_delivery=data.get("estimated_delivery"),
                tracking_number=data.get("tracking_number"),
                notes=data.get("notes"),
            )
            self.db.add(delivery)
            self.orders.transition(order, OrderStatus.SHIPPED)
            self.db.flush()

            write_log(
                self.db, user_id=user_id, action="LOGISTICS_ASSIGN", resource="logistics",
                resource_id=delivery.id, ip=ip, meta={"order_id": order.id, "agent_id": agent.id},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Assigning order %s to agent %s failed", order_id, agent_id)
            raise

        self.db.refresh(delivery)
        return delivery

    def update_delivery_status(self, logistics_id: int, status, notes: str = None,
                               user_id: int = None, ip: str = None) -> dict:
        delivery = self.get_logistics_by_id(logistics_id)
        try:
            new_status = DeliveryStatus(status)
        except ValueError:
            raise BusinessRuleError(f"Invalid delivery status: {status}")

        if not can_transition(delivery.delivery_status, new_status):
            raise InvalidTransitionError(
                f"Cannot change delivery status from {delivery.delivery_status.value} to {new_status.value}"
            )

        try:
            delivery.delivery_status = new_status
            if notes:
                delivery.notes = notes

            if new_status == DeliveryStatus.DELIVERED:
                delivery.actual_delivery = datetime.now(timezone.utc)
                self.orders.transition(delivery.order, OrderStatus.DELIVERED)

            write_log(
                self.db, user_id=user_id, action="DELIVERY_STATUS_CHANGE", resource="logistics",
                resource_id=delivery.id, ip=ip,
                meta={"order_id": delivery.order_id, "status": new_status.value},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Delivery %s status change to %s failed", logistics_id, new_status.value)
            raise

        return {"message": "Delivery status updated successfully"}

    def update_logistics(self, logistics_id: int, data: dict) -> dict:
        delivery = self.get_logistics_by_id(logistics_id)
        for field in UPDATABLE_FIELDS:
            if data.get(field) is not None:
                setattr(delivery, field, data[field])
        self.db.commit()
        return {"message": "Delivery updated successfully"}

    def delete_logistics(self, logistics_id: int, user_id: int = None, ip: str = None) -> dict:
        delivery = self.get_logistics_by_id(logistics_id)
        order = delivery.order
        try:
            # An unfinished delivery hands its order back to the assignment queue
            reopened = (
                order is not None
                and order.status == OrderStatus.SHIPPED
                and delivery.delivery_status != DeliveryStatus.DELIVERED
            )
            if reopened:
                order.status = OrderStatus.CONFIRMED

            self.db.delete(delivery)
            write_log(
                self.db, user_id=user_id, action="LOGISTICS_DELETE", resource="logistics",
                resource_id=logistics_id, ip=ip,
                meta={"order_id": delivery.order_id, "order_reopened": reopened},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Deleting delivery %s failed", logistics_id)
            raise
        return {"message": "Delivery deleted successfully"}

    def get_all_logistics(self):
        return self._deliveries().order_by(Logistics.id).all()

    def get_logistics_by_id(self, logistics_id: int) -> Logistics:
        delivery = self._deliveries().filter(Logistics.id == logistics_id).first()
        if not delivery:
            raise NotFoundError("Delivery not found")
        return delivery

    def get_deliveries_by_agent(self, agent_id: int):
        # Agent's own queue, newest first
        return (
            self._deliveries()
            .filter(Logistics.delivery_agent_id == agent_id)
            .order_by(Logistics.created_at.desc(), Logistics.id.desc())
            .all()
        )
