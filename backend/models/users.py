# backend/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Roles recognised by the marketplace
USER_ROLES = ("farmer", "buyer", "logistics", "admin")

# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, index=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Role profiles, at most one of each per user
    farmer = relationship("Farmer", back_populates="user", uselist=False, cascade="all, delete-orphan")
    buyer = relationship("Buyer", back_populates="user", uselist=False, cascade="all, delete-orphan")
