# backend/routes/orders.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.order import Order
from models.users import User
from schemas.order import (
    CheckoutResponse, MessageResponse, OrderCreatePayload, OrderDetailResponse,
    OrderItemOut, OrderResponse, OrderRow, OrderStatusPatch,
)
from services.buyers import BuyerService
from services.errors import BusinessRuleError, NotFoundError
from services.farmers import FarmerService
from services.orders import OrderService
from utils.audit import client_ip
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/orders", tags=["Orders"])

# Staff roles see every order
def _is_staff(user: User) -> bool:
    return user.role in {"admin", "logistics"}

# Map Order model to OrderResponse fields
def _order_fields(order: Order) -> dict:
    buyer, farmer = order.buyer, order.farmer
    return dict(
        id=order.id,
        buyer_id=order.buyer_id,
        farmer_id=order.farmer_id,
        total_amount=round(order.total_amount, 2),
        status=order.status,
        delivery_address=order.delivery_address,
        delivery_city=order.delivery_city,
        delivery_phone=order.delivery_phone,
        notes=order.notes,
        order_date=order.order_date,
        buyer_name=buyer.user.full_name if buyer and buyer.user else None,
        farmer_name=farmer.user.full_name if farmer and farmer.user else None,
        farmer_location=farmer.location if farmer else None,
    )

def _order_to_out(order: Order) -> OrderResponse:
    return OrderResponse(**_order_fields(order))

def _item_fields(item) -> dict:
    return dict(
        product_id=item.product_id,
        product_name=item.product.name if item.product else None,
        unit=item.product.unit if item.product else None,
        quantity=item.quantity,
        unit_price=item.unit_price,
        total_price=item.total_price,
    )

def _order_to_detail(order: Order) -> OrderDetailResponse:
    items: List[OrderItemOut] = [OrderItemOut(id=it.id, **_item_fields(it)) for it in order.items]
    return OrderDetailResponse(**_order_fields(order), items=items)

# One flat row per order item; an order without items yields a single row
def _order_to_rows(order: Order) -> List[OrderRow]:
    base = _order_fields(order)
    if not order.items:
        return [OrderRow(**base)]
    return [OrderRow(**base, order_item_id=it.id, **_item_fields(it)) for it in order.items]

# Buyers and farmers may only read orders they take part in
def ensure_can_view_order(db: Session, order: Order, user: User):
    if _is_staff(user):
        return
    if user.role == "buyer":
        buyer = BuyerService(db).get_by_user_id(user.id)
        if buyer and buyer.id == order.buyer_id:
            return
    if user.role == "farmer":
        farmer = FarmerService(db).get_by_user_id(user.id)
        if farmer and farmer.id == order.farmer_id:
            return
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found or forbidden")


# Checkout: turn the buyer's cart into one order per farmer
@router.post("", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("buyer")),
):
    buyer = BuyerService(db).get_by_user_id(current_user.id)
    if not buyer:
        raise BusinessRuleError("Buyer profile not found")

    orders = OrderService(db).create_order_from_cart(
        buyer.id, payload.model_dump(), user_id=current_user.id, ip=client_ip(request)
    )
    return {"message": "Orders created successfully", "orders": orders}


# All orders (Admin only)
@router.get("", response_model=List[OrderResponse])
def get_all_orders(db: Session = Depends(get_db), current_user: User = Depends(role_required("admin"))):
    return [_order_to_out(o) for o in OrderService(db).get_all_orders()]


# Orders of the current buyer or farmer
@router.get("/my/orders", response_model=List[OrderResponse])
def get_my_orders(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    service = OrderService(db)
    if current_user.role == "buyer":
        buyer = BuyerService(db).get_by_user_id(current_user.id)
        if not buyer:
            raise NotFoundError("Buyer profile not found")
        orders = service.get_orders_by_buyer(buyer.id)
    elif current_user.role == "farmer":
        farmer = FarmerService(db).get_by_user_id(current_user.id)
        if not farmer:
            raise NotFoundError("Farmer profile not found")
        orders = service.get_orders_by_farmer(farmer.id)
    else:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return [_order_to_out(o) for o in orders]


# Confirmed orders still waiting for a delivery agent
@router.get("/logistics/pending", response_model=List[OrderResponse])
def get_orders_for_logistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin", "logistics")),
):
    return [_order_to_out(o) for o in OrderService(db).get_orders_for_logistics()]


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderDetailResponse)
def get_order_detail(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    order = OrderService(db).get_order_by_id(order_id)
    ensure_can_view_order(db, order, current_user)
    return _order_to_detail(order)


# Same order as a flat row-per-item result set
@router.get("/{order_id}/rows", response_model=List[OrderRow])
def get_order_rows(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    order = OrderService(db).get_order_by_id(order_id)
    ensure_can_view_order(db, order, current_user)
    return _order_to_rows(order)


# Manually set order status (Admin, or the farmer owning the order)
@router.put("/{order_id}/status", response_model=MessageResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin", "farmer")),
):
    service = OrderService(db)
    order = service.get_order_by_id(order_id)
    if current_user.role == "farmer":
        farmer = FarmerService(db).get_by_user_id(current_user.id)
        if not farmer or farmer.id != order.farmer_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")

    return service.update_order_status(order_id, payload.status, user_id=current_user.id, ip=client_ip(request))
