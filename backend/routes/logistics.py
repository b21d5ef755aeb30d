# backend/routes/logistics.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.logistics import Logistics
from models.users import User
from schemas.logistics import DeliveryStatusUpdate, LogisticsAssign, LogisticsResponse, LogisticsUpdate
from schemas.order import MessageResponse
from services.logistics import LogisticsService
from utils.audit import client_ip
from utils.tokenJWT import role_required

router = APIRouter(prefix="/api/logistics", tags=["Logistics"])

staff = role_required("admin", "logistics")


def _delivery_to_out(delivery: Logistics) -> LogisticsResponse:
    out = LogisticsResponse.model_validate(delivery, from_attributes=True)
    out.delivery_agent_name = delivery.agent.full_name if delivery.agent else None
    if delivery.order:
        out.delivery_address = delivery.order.delivery_address
        out.order_status = delivery.order.status.value
    return out


@router.get("", response_model=List[LogisticsResponse])
def get_all_logistics(db: Session = Depends(get_db), current_user: User = Depends(staff)):
    return [_delivery_to_out(d) for d in LogisticsService(db).get_all_logistics()]


# Assign a pending or confirmed order to a delivery agent
@router.post("/assign-order", response_model=LogisticsResponse, status_code=status.HTTP_201_CREATED)
def assign_order_to_agent(
    payload: LogisticsAssign,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff),
):
    data = payload.model_dump(exclude={"order_id", "delivery_agent_id"})
    delivery = LogisticsService(db).assign_order_to_agent(
        payload.order_id, payload.delivery_agent_id, data,
        user_id=current_user.id, ip=client_ip(request),
    )
    return _delivery_to_out(delivery)


# The current agent's own deliveries, newest first
@router.get("/agent/my-deliveries", response_model=List[LogisticsResponse])
def get_my_deliveries(db: Session = Depends(get_db), current_user: User = Depends(role_required("logistics"))):
    return [_delivery_to_out(d) for d in LogisticsService(db).get_deliveries_by_agent(current_user.id)]


@router.get("/{logistics_id}", response_model=LogisticsResponse)
def get_logistics(logistics_id: int, db: Session = Depends(get_db), current_user: User = Depends(staff)):
    return _delivery_to_out(LogisticsService(db).get_logistics_by_id(logistics_id))


@router.put("/{logistics_id}", response_model=MessageResponse)
def update_logistics(
    logistics_id: int,
    payload: LogisticsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff),
):
    return LogisticsService(db).update_logistics(logistics_id, payload.model_dump(exclude_unset=True))


# Delivery progress; "delivered" also completes the order
@router.put("/{logistics_id}/status", response_model=MessageResponse)
def update_delivery_status(
    logistics_id: int,
    payload: DeliveryStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(staff),
):
    return LogisticsService(db).update_delivery_status(
        logistics_id, payload.status, payload.notes, user_id=current_user.id, ip=client_ip(request)
    )


# Removing an unfinished delivery returns its order to the ready queue
@router.delete("/{logistics_id}", response_model=MessageResponse)
def delete_logistics(
    logistics_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    return LogisticsService(db).delete_logistics(logistics_id, user_id=current_user.id, ip=client_ip(request))
