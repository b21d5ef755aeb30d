# backend/services/orders.py
"""Order workflow.

Checkout turns a buyer's cart into one order per farmer, snapshotting the
live product price into each order item, then empties the cart. The order
status is also the coordination point for the payment and logistics
workflows, which move it through ``transition``.
"""
import logging

from sqlalchemy.orm import Session, joinedload

from models.buyer import Buyer
from models.cart import CartItem
from models.farmer import Farmer
from models.logistics import Logistics
from models.order import Order, OrderItem, OrderStatus, can_transition
from models.product import Product
from services.errors import BusinessRuleError, InvalidTransitionError, NotFoundError
from utils.audit import write_log

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def _orders(self):
        return self.db.query(Order).options(
            joinedload(Order.buyer).joinedload(Buyer.user),
            joinedload(Order.farmer).joinedload(Farmer.user),
        )

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------
    def create_order_from_cart(self, buyer_id: int, delivery_info: dict, user_id: int = None, ip: str = None):
        lines = (
            self.db.query(CartItem)
            .join(CartItem.product)
            .options(joinedload(CartItem.product))
            .filter(CartItem.buyer_id == buyer_id, Product.is_active.is_(True))
            .order_by(CartItem.id)
            .all()
        )
        if not lines:
            raise BusinessRuleError("Cart is empty")

        # Group lines by the farmer owning the product, first-seen order
        farmer_lines = {}
        for line in lines:
            farmer_lines.setdefault(line.product.farmer_id, []).append(line)

        created = []
        try:
            for farmer_id, group in farmer_lines.items():
                items = [
                    {
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                        "unit_price": line.product.price,
                        "total_price": round(line.product.price * line.quantity, 2),
                    }
                    for line in group
                ]
                total_amount = round(sum(item["total_price"] for item in items), 2)

                order = Order(
                    buyer_id=buyer_id,
                    farmer_id=farmer_id,
                    total_amount=total_amount,
                    status=OrderStatus.PENDING,
                    delivery_address=delivery_info["delivery_address"],
                    delivery_city=delivery_info["delivery_city"],
                    delivery_phone=delivery_info["delivery_phone"],
                    notes=delivery_info.get("notes"),
                )
                order.items = [OrderItem(**item) for item in items]
                self.db.add(order)
                self.db.flush()

                created.append({
                    "orderId": order.id,
                    "farmerId": farmer_id,
                    "totalAmount": total_amount,
                    "items": items,
                })

            self.db.query(CartItem).filter(CartItem.buyer_id == buyer_id).delete()

            write_log(
                self.db, user_id=user_id, action="ORDER_CREATE", resource="orders", ip=ip,
                meta={"buyer_id": buyer_id, "order_ids": [o["orderId"] for o in created]},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Checkout failed for buyer %s", buyer_id)
            raise

        logger.info("Buyer %s checked out %d order(s)", buyer_id, len(created))
        return created

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def transition(self, order: Order, target: OrderStatus):
        """Move an order along the workflow; the caller commits."""
        if not can_transition(order.status, target):
            raise InvalidTransitionError(
                f"Cannot change order status from {order.status.value} to {target.value}"
            )
        order.status = target

    def update_order_status(self, order_id: int, status, user_id: int = None, ip: str = None) -> dict:
        order = self.get_order_by_id(order_id)
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise BusinessRuleError(f"Invalid order status: {status}")

        old_status = order.status
        try:
            # Any known status is accepted here, predecessor rules only bind the workflows
            order.status = new_status
            write_log(
                self.db, user_id=user_id, action="ORDER_STATUS_CHANGE", resource="orders",
                resource_id=order.id, ip=ip, meta={"old": old_status.value, "new": new_status.value},
                commit=False,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.warning("Order %s status change to %s failed", order_id, new_status.value)
            raise
        return {"message": "Order status updated successfully"}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_all_orders(self):
        return self._orders().order_by(Order.order_date.desc(), Order.id.desc()).all()

    def get_order_by_id(self, order_id: int) -> Order:
        order = (
            self._orders()
            .options(joinedload(Order.items).joinedload(OrderItem.product))
            .filter(Order.id == order_id)
            .first()
        )
        if not order:
            raise NotFoundError("Order not found")
        return order

    def get_orders_by_buyer(self, buyer_id: int):
        return (
            self._orders()
            .filter(Order.buyer_id == buyer_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .all()
        )

    def get_orders_by_farmer(self, farmer_id: int):
        return (
            self._orders()
            .filter(Order.farmer_id == farmer_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .all()
        )

    def get_orders_for_logistics(self):
        # Work queue: confirmed orders nobody has been assigned to, oldest first
        has_logistics = self.db.query(Logistics.id).filter(Logistics.order_id == Order.id).exists()
        return (
            self._orders()
            .filter(Order.status == OrderStatus.CONFIRMED, ~has_logistics)
            .order_by(Order.order_date.asc(), Order.id.asc())
            .all()
        )
