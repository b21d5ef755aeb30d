# backend/models/cart.py
from sqlalchemy import Column, Integer, ForeignKey, DateTime, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# A single product + quantity held in a buyer's cart until checkout
class CartItem(Base):
    __tablename__ = "cart_items" # Table name

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, ForeignKey("buyers.id"), index=True, nullable=False) # Owning buyer
    product_id = Column(Integer, ForeignKey("products.id"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    buyer = relationship("Buyer", back_populates="cart_items")
    product = relationship("Product") # Live product, price is not snapshotted here

    __table_args__ = (
        # One line per product in a buyer's cart
        UniqueConstraint("buyer_id", "product_id", name="uq_cartitem_buyer_product"),
    )
