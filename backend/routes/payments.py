# backend/routes/payments.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.payment import Payment
from models.users import User
from routes.orders import ensure_can_view_order
from schemas.order import MessageResponse
from schemas.payment import PaymentCreate, PaymentCreated, PaymentDecision, PaymentResponse
from services.orders import OrderService
from services.payments import PaymentService
from utils.audit import client_ip
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/payments", tags=["Payments"])

admin_only = role_required("admin")


def _payment_to_out(payment: Payment) -> PaymentResponse:
    order = payment.order
    buyer = order.buyer if order else None
    return PaymentResponse(
        id=payment.id,
        order_id=payment.order_id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        transaction_id=payment.transaction_id,
        payment_status=payment.payment_status,
        processed_by=payment.processed_by,
        notes=payment.notes,
        payment_date=payment.payment_date,
        order_amount=order.total_amount if order else None,
        buyer_name=buyer.user.full_name if buyer and buyer.user else None,
    )


# Submit a payment for an order the buyer placed (admins may record any)
@router.post("", response_model=PaymentCreated, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("buyer", "admin")),
):
    order = OrderService(db).get_order_by_id(payload.order_id)
    ensure_can_view_order(db, order, current_user)
    return PaymentService(db).create_payment(payload.model_dump(), user_id=current_user.id, ip=client_ip(request))


@router.get("", response_model=List[PaymentResponse])
def get_all_payments(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    return [_payment_to_out(p) for p in PaymentService(db).get_all_payments()]


# Approval queue, oldest first
@router.get("/pending/approvals", response_model=List[PaymentResponse])
def get_pending_payments(db: Session = Depends(get_db), current_user: User = Depends(admin_only)):
    return [_payment_to_out(p) for p in PaymentService(db).get_pending_payments()]


# Payments are visible to whoever may see the order they pay for
@router.get("/order/{order_id}", response_model=List[PaymentResponse])
def get_payments_by_order(order_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    order = OrderService(db).get_order_by_id(order_id)
    ensure_can_view_order(db, order, current_user)
    return [_payment_to_out(p) for p in PaymentService(db).get_payments_by_order(order_id)]


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    payment = PaymentService(db).get_payment_by_id(payment_id)
    ensure_can_view_order(db, payment.order, current_user)
    return _payment_to_out(payment)


# Approve: payment completed, order confirmed
@router.put("/{payment_id}/approve", response_model=MessageResponse)
def approve_payment(
    payment_id: int,
    request: Request,
    payload: PaymentDecision = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    notes = payload.notes if payload else None
    return PaymentService(db).approve_payment(payment_id, current_user.id, notes, ip=client_ip(request))


# Reject: payment failed, order cancelled
@router.put("/{payment_id}/reject", response_model=MessageResponse)
def reject_payment(
    payment_id: int,
    request: Request,
    payload: PaymentDecision = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_only),
):
    notes = payload.notes if payload else None
    return PaymentService(db).reject_payment(payment_id, current_user.id, notes, ip=client_ip(request))
