# backend/models/farmer.py
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from database import Base

# Seller profile attached to a user with the "farmer" role
class Farmer(Base):
    __tablename__ = "farmers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    location = Column(String, nullable=False)
    product = Column(String, nullable=True) # Main produce, free text

    user = relationship("User", back_populates="farmer")
    products = relationship("Product", back_populates="farmer")
