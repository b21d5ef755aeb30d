# backend/routes/farmers.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from database import get_db
from models.farmer import Farmer
from models.users import User
from schemas.farmer import FarmerResponse, FarmerUpdate
from schemas.order import MessageResponse
from services.farmers import FarmerService
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/farmers", tags=["Farmers"])


def _farmer_to_out(farmer: Farmer) -> FarmerResponse:
    return FarmerResponse(
        id=farmer.id,
        user_id=farmer.user_id,
        location=farmer.location,
        product=farmer.product,
        full_name=farmer.user.full_name if farmer.user else None,
    )


@router.get("", response_model=List[FarmerResponse])
def get_all_farmers(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return [_farmer_to_out(f) for f in FarmerService(db).get_all_farmers()]


@router.get("/{farmer_id}", response_model=FarmerResponse)
def get_farmer(farmer_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _farmer_to_out(FarmerService(db).get_farmer_by_id(farmer_id))


# Farmers edit their own profile, admins any
@router.put("/{farmer_id}", response_model=MessageResponse)
def update_farmer(
    farmer_id: int,
    payload: FarmerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    service = FarmerService(db)
    farmer = service.get_farmer_by_id(farmer_id)
    if current_user.role != "admin" and farmer.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
    return service.update_farmer(farmer_id, payload.model_dump(exclude_unset=True))


@router.delete("/{farmer_id}", response_model=MessageResponse)
def delete_farmer(farmer_id: int, db: Session = Depends(get_db), current_user: User = Depends(role_required("admin"))):
    return FarmerService(db).delete_farmer(farmer_id)
