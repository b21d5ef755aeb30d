# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas import user as schemas
from services.users import AuthService
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# Register a new account together with its farmer/buyer profile
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserCreate, request: Request, db: Session = Depends(get_db)):
    result = AuthService(db).register(payload.model_dump())
    write_log(
        db,
        user_id=result["user"]["user_id"],
        action="REGISTER",
        resource="auth",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"email": result["user"]["email"], "role": result["user"]["role"]},
    )
    return result


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.AuthResponse)
def login(payload: schemas.UserLogin, request: Request, db: Session = Depends(get_db)):
    result = AuthService(db).login(payload.email, payload.password)
    write_log(db, user_id=result["user"]["user_id"], action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": result["user"]["email"]})
    return result


# Retrieve current authenticated user details
@router.get("/profile", response_model=schemas.UserResponse)
def profile(current_user: User = Depends(get_current_user)):
    return current_user
