# backend/models/buyer.py
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from database import Base

# Purchasing profile attached to a user with the "buyer" role
class Buyer(Base):
    __tablename__ = "buyers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    location = Column(String, nullable=True)

    user = relationship("User", back_populates="buyer")
    cart_items = relationship("CartItem", back_populates="buyer", cascade="all, delete-orphan")
