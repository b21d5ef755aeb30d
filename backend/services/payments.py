# backend/services/payments.py
import logging

from sqlalchemy.orm import Session, joinedload

from models.buyer import Buyer
from models.order import Order, OrderStatus, can_transition
from models.payment import Payment, PaymentStatus
from services.errors import BusinessRuleError, NotFoundError
from services.orders import OrderService
from utils.audit import write_log

logger = logging.getLogger(__name__)


class PaymentService:
    """Payment submissions and the admin decision that confirms or cancels an order."""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderService(db)

    def _payments(self):
        return self.db.query(Payment).options(
            joinedload(Payment.order).joinedload(Order.buyer).joinedload(Buyer.user)
        )

    def create_payment(self, data: dict, user_id: int = None, ip: str = None) -> dict:
        # Raises NotFoundError when the order does not exist
        order = self.orders.get_order_by_id(data["order_id"])

        payment = Payment(
            order_id=order.id,
            amount=data["amount"],
            payment_method=data["payment_method"],
            transaction_id=data["transaction_id"],
            payment_status=PaymentStatus.PENDING,
        )
        self.db.add(payment)
        self.db.flush()
        write_log(
            self.db, user_id=user_id, action="PAYMENT_CREATE", resource="payments",
            resource_id=payment.id, ip=ip, meta={"order_id": order.id, "amount": payment.amount},
            commit=False,
        )
        self.db.commit()
        return {"paymentId": payment.id, "message": "Payment created successfully"}

    def _decide(self, payment_id: int, admin_id: int, notes, payment_status: PaymentStatus,
                order_status: OrderStatus, action: str, ip: str = None) -> bool:
        """Record the decision on a pending payment; returns whether the order moved.

        The decision is always recorded. The order only follows when its
        current status allows the move, so a retried payment on a cancelled
        or already shipped order is still decided.
        """
        payment = self.get_payment_by_id(payment_id)

        # A payment is decided exactly once
        if payment.payment_status != PaymentStatus.PENDING:
            raise BusinessRuleError("Payment is not in pending status")

        order = payment.order
        order_moved = can_transition(order.status, order_status)
        try:
            payment.payment_status = payment_status
            payment.processed_by = admin_id
            if notes:
                payment.notes = notes

            if order_moved:
                self.orders.transition(order, order_status)

            write_log(
                self.db, user_id=admin_id, action=action, resource="payments",
                resource_id=payment.id, ip=ip,
                meta={"order_id": payment.order_id, "order_status": order.status.value,
                      "order_moved": order_moved},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("%s failed for payment %s", action, payment_id)
            raise

        if not order_moved:
            logger.info("Payment %s decided, order %s stays %s", payment_id, order.id, order.status.value)
        logger.info("Payment %s -> %s by admin %s", payment_id, payment_status.value, admin_id)
        return order_moved

    def approve_payment(self, payment_id: int, admin_id: int, notes: str = None, ip: str = None) -> dict:
        if self._decide(payment_id, admin_id, notes, PaymentStatus.COMPLETED, OrderStatus.CONFIRMED,
                        "PAYMENT_APPROVE", ip=ip):
            return {"message": "Payment approved and order confirmed"}
        return {"message": "Payment approved, order status unchanged"}

    def reject_payment(self, payment_id: int, admin_id: int, notes: str = None, ip: str = None) -> dict:
        if self._decide(payment_id, admin_id, notes, PaymentStatus.FAILED, OrderStatus.CANCELLED,
                        "PAYMENT_REJECT", ip=ip):
            return {"message": "Payment rejected and order cancelled"}
        return {"message": "Payment rejected, order status unchanged"}

    def get_all_payments(self):
        return self._payments().order_by(Payment.payment_date.desc(), Payment.id.desc()).all()

    def get_payment_by_id(self, payment_id: int) -> Payment:
        payment = self._payments().filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def get_payments_by_order(self, order_id: int):
        return (
            self.db.query(Payment)
            .filter(Payment.order_id == order_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all()
        )

    def get_pending_payments(self):
        # Admin approval queue, oldest first
        return (
            self._payments()
            .filter(Payment.payment_status == PaymentStatus.PENDING)
            .order_by(Payment.payment_date.asc(), Payment.id.asc())
            .all()
        )
