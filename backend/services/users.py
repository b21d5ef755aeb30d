# backend/services/users.py
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.buyer import Buyer
from models.farmer import Farmer
from models.users import User
from services.errors import BusinessRuleError, NotFoundError
from utils.hashing import get_password_hash, verify_password
from utils.tokenJWT import create_user_token

logger = logging.getLogger(__name__)


def _summary(user: User) -> dict:
    return {"user_id": user.id, "full_name": user.full_name, "email": user.email, "role": user.role}


class AuthService:
    """Registration and login; issues bearer tokens for the API."""

    def __init__(self, db: Session):
        self.db = db

    def register(self, data: dict) -> dict:
        full_name = (data.get("full_name") or "").strip()
        email = (data.get("email") or "").strip().lower()
        location = (data.get("location") or "").strip()
        phone = (data.get("phone") or "").strip() or None
        password = data.get("password")
        role = data.get("role")

        if not full_name:
            raise BusinessRuleError("Full name is required")
        if not email:
            raise BusinessRuleError("Email is required")
        if not password:
            raise BusinessRuleError("Password is required")
        if not location:
            raise BusinessRuleError("Location is required")
        if not role:
            raise BusinessRuleError("Role is required")

        confirm_password = data.get("confirm_password") or password
        if password != confirm_password:
            raise BusinessRuleError("Passwords do not match")

        # Only one admin account may self-register
        if role == "admin" and self.db.query(User).filter(User.role == "admin").first():
            raise BusinessRuleError("Cannot register as admin")

        if self.db.query(User).filter(func.lower(User.email) == email).first():
            raise BusinessRuleError("Email already registered")

        user = User(
            full_name=full_name,
            email=email,
            phone=phone,
            role=role,
            password_hash=get_password_hash(password),
            # No email verification step, accounts are verified on creation
            is_verified=True,
        )
        if role == "farmer":
            user.farmer = Farmer(location=location)
        elif role == "buyer":
            user.buyer = Buyer(location=location)

        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s with role %s", user.id, role)

        return {
            "message": "User registered successfully",
            "token": create_user_token(user),
            "user": _summary(user),
        }

    def login(self, email: str, password: str) -> dict:
        email = (email or "").strip().lower()
        if not email:
            raise BusinessRuleError("Email is required")
        if not password:
            raise BusinessRuleError("Password is required")

        user = self.db.query(User).filter(func.lower(User.email) == email).first()
        if not user or not verify_password(password, user.password_hash):
            raise BusinessRuleError("Invalid credentials")

        return {"message": "Login successful", "token": create_user_token(user), "user": _summary(user)}


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_all_users(self):
        return self.db.query(User).order_by(User.id).all()

    def get_user_by_id(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_user(self, user_id: int, data: dict) -> dict:
        user = self.get_user_by_id(user_id)
        for field in ("full_name", "phone", "role"):
            if data.get(field) is not None:
                setattr(user, field, data[field].strip() if isinstance(data[field], str) else data[field])
        self.db.commit()
        return {"message": "User updated successfully"}

    def delete_user(self, user_id: int) -> dict:
        user = self.get_user_by_id(user_id)
        try:
            self.db.delete(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BusinessRuleError("User has related records and cannot be deleted")
        return {"message": "User deleted successfully"}
