# backend/services/products.py
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from models.farmer import Farmer
from models.product import Product
from models.users import User
from services.errors import NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

# Columns a farmer may change after listing a product
UPDATABLE_FIELDS = ("name", "description", "price", "quantity_available", "unit", "category", "image_url")
# Of those, the ones that may be cleared with an explicit null
NULLABLE_FIELDS = {"description", "category", "image_url"}


class ProductService:
    """Catalog of farmer listings. Every read is restricted to active products."""

    def __init__(self, db: Session):
        self.db = db

    def _active(self):
        return (
            self.db.query(Product)
            .options(joinedload(Product.farmer).joinedload(Farmer.user))
            .filter(Product.is_active.is_(True))
        )

    def create_product(self, farmer_id: int, data: dict) -> Product:
        product = Product(
            farmer_id=farmer_id,
            name=data["name"],
            description=data.get("description"),
            price=data["price"],
            quantity_available=data["quantity_available"],
            unit=data["unit"],
            category=data.get("category"),
            image_url=data.get("image_url"),
            is_active=True,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Farmer %s listed product %s", farmer_id, product.id)
        return product

    def get_all_products(self):
        return self._active().order_by(Product.created_at.desc(), Product.id.desc()).all()

    def get_product_by_id(self, product_id: int) -> Product:
        product = self._active().filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_products_by_farmer(self, farmer_id: int):
        return (
            self._active()
            .filter(Product.farmer_id == farmer_id)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .all()
        )

    def ensure_owner(self, product: Product, user: User):
        if user.role == "admin":
            return
        if user.farmer is None or user.farmer.id != product.farmer_id:
            raise PermissionDeniedError("You can only modify your own products")

    def update_product(self, product_id: int, data: dict, user: User = None) -> dict:
        product = self.get_product_by_id(product_id)
        if user is not None:
            self.ensure_owner(product, user)

        # Partial update: keys absent from data are left untouched
        for field in UPDATABLE_FIELDS:
            if field not in data:
                continue
            if data[field] is None and field not in NULLABLE_FIELDS:
                continue
            setattr(product, field, data[field])
        self.db.commit()
        return {"message": "Product updated successfully"}

    def delete_product(self, product_id: int, user: User = None) -> dict:
        product = self.get_product_by_id(product_id)
        if user is not None:
            self.ensure_owner(product, user)

        # Soft delete keeps the row for historical order items
        product.is_active = False
        self.db.commit()
        return {"message": "Product deleted successfully"}

    def search_products(self, term: str, category: str = None):
        like = f"%{term or ''}%"
        query = self._active().filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.category.ilike(like),
            )
        )
        if category:
            query = query.filter(Product.category == category)
        return query.order_by(Product.created_at.desc(), Product.id.desc()).all()
