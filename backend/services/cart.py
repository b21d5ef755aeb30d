# backend/services/cart.py
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.cart import CartItem
from models.farmer import Farmer
from models.product import Product
from services.errors import BusinessRuleError, NotFoundError


class CartService:
    """Per-buyer cart lines. Prices are read live from the catalog."""

    def __init__(self, db: Session):
        self.db = db

    def _line(self, buyer_id: int, product_id: int):
        return (
            self.db.query(CartItem)
            .filter(CartItem.buyer_id == buyer_id, CartItem.product_id == product_id)
            .first()
        )

    def add_to_cart(self, buyer_id: int, product_id: int, quantity: int) -> dict:
        if quantity <= 0:
            raise BusinessRuleError("Quantity must be greater than zero")

        product = (
            self.db.query(Product)
            .filter(Product.id == product_id, Product.is_active.is_(True))
            .first()
        )
        if not product:
            raise NotFoundError("Product not found")

        item = self._line(buyer_id, product_id)
        if item:
            # Adding an existing product accumulates its quantity
            item.quantity += quantity
            message = "Cart item quantity updated successfully"
        else:
            item = CartItem(buyer_id=buyer_id, product_id=product_id, quantity=quantity)
            self.db.add(item)
            message = "Item added to cart successfully"

        self.db.commit()
        return {"message": message}

    def get_cart(self, buyer_id: int):
        return (
            self.db.query(CartItem)
            .join(CartItem.product)
            .options(joinedload(CartItem.product).joinedload(Product.farmer).joinedload(Farmer.user))
            .filter(CartItem.buyer_id == buyer_id, Product.is_active.is_(True))
            .order_by(CartItem.added_at.desc(), CartItem.id.desc())
            .all()
        )

    def update_cart_item(self, buyer_id: int, product_id: int, quantity: int) -> dict:
        if quantity < 0:
            raise BusinessRuleError("Quantity cannot be negative")

        if quantity == 0:
            return self.remove_from_cart(buyer_id, product_id, message="Item removed from cart")

        item = self._line(buyer_id, product_id)
        if not item:
            raise NotFoundError("Cart item not found")

        item.quantity = quantity
        self.db.commit()
        return {"message": "Cart item updated successfully"}

    def remove_from_cart(self, buyer_id: int, product_id: int, message="Item removed from cart successfully") -> dict:
        self.db.query(CartItem).filter(
            CartItem.buyer_id == buyer_id, CartItem.product_id == product_id
        ).delete()
        self.db.commit()
        return {"message": message}

    def clear_cart(self, buyer_id: int) -> dict:
        self.db.query(CartItem).filter(CartItem.buyer_id == buyer_id).delete()
        self.db.commit()
        return {"message": "Cart cleared successfully"}

    def get_cart_total(self, buyer_id: int) -> float:
        total = (
            self.db.query(func.sum(CartItem.quantity * Product.price))
            .join(Product, CartItem.product_id == Product.id)
            .filter(CartItem.buyer_id == buyer_id, Product.is_active.is_(True))
            .scalar()
        )
        return round(total or 0, 2)
