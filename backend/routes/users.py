# backend/routes/users.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.user import UserResponse, UserUpdate
from schemas.order import MessageResponse
from services.users import UserService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/users", tags=["Users"])


def _ensure_self_or_admin(user_id: int, current_user: User):
    if current_user.role != "admin" and current_user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")


# List every account (Admin only)
@router.get("", response_model=List[UserResponse])
def get_all_users(db: Session = Depends(get_db), current_user: User = Depends(role_required("admin"))):
    return UserService(db).get_all_users()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return UserService(db).get_user_by_id(user_id)


# Update own account; changing a role is reserved for admins
@router.put("/{user_id}", response_model=MessageResponse)
def update_user(
    user_id: int,
    payload: UserUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_self_or_admin(user_id, current_user)
    data = payload.model_dump(exclude_unset=True)
    if "role" in data and current_user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change roles")

    result = UserService(db).update_user(user_id, data)
    write_log(db, user_id=current_user.id, action="USER_UPDATE", resource="users", resource_id=user_id,
              ip=client_ip(request), meta={"fields": sorted(data)})
    return result


# Delete a user account (Admin only)
@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("admin")),
):
    # Prevent self-deletion
    if user_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    result = UserService(db).delete_user(user_id)
    write_log(db, user_id=current_user.id, action="USER_DELETE", resource="users", resource_id=user_id,
              ip=client_ip(request))
    return result
