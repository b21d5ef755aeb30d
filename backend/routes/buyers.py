# backend/routes/buyers.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.buyer import Buyer
from models.users import User
from schemas.buyer import BuyerResponse, BuyerUpdate
from schemas.order import MessageResponse
from services.buyers import BuyerService
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/buyers", tags=["Buyers"])


def _buyer_to_out(buyer: Buyer) -> BuyerResponse:
    return BuyerResponse(
        id=buyer.id,
        user_id=buyer.user_id,
        location=buyer.location,
        full_name=buyer.user.full_name if buyer.user else None,
    )


@router.get("", response_model=List[BuyerResponse])
def get_all_buyers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [_buyer_to_out(b) for b in BuyerService(db).get_all_buyers()]


@router.get("/{buyer_id}", response_model=BuyerResponse)
def get_buyer(buyer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _buyer_to_out(BuyerService(db).get_buyer_by_id(buyer_id))


@router.put("/{buyer_id}", response_model=MessageResponse)
def update_buyer(
    buyer_id: int,
    payload: BuyerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = BuyerService(db)
    buyer = service.get_buyer_by_id(buyer_id)
    if current_user.role != "admin" and buyer.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return service.update_buyer(buyer_id, payload.model_dump(exclude_unset=True))


@router.delete("/{buyer_id}", response_model=MessageResponse)
def delete_buyer(buyer_id: int, db: Session = Depends(get_db), current_user: User = Depends(role_required("admin"))):
    return BuyerService(db).delete_buyer(buyer_id)
