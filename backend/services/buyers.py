# backend/services/buyers.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.buyer import Buyer
from services.errors import BusinessRuleError, NotFoundError


class BuyerService:
    def __init__(self, db: Session):
        self.db = db

    def get_all_buyers(self):
        return self.db.query(Buyer).options(joinedload(Buyer.user)).order_by(Buyer.id).all()

    def get_buyer_by_id(self, buyer_id: int) -> Buyer:
        buyer = self.db.get(Buyer, buyer_id)
        if not buyer:
            raise NotFoundError("Buyer not found")
        return buyer

    def get_by_user_id(self, user_id: int):
        return self.db.query(Buyer).filter(Buyer.user_id == user_id).first()

    def update_buyer(self, buyer_id: int, data: dict) -> dict:
        buyer = self.get_buyer_by_id(buyer_id)
        if data.get("location"):
            buyer.location = data["location"].strip()
        self.db.commit()
        return {"message": "Buyer updated successfully"}

    def delete_buyer(self, buyer_id: int) -> dict:
        buyer = self.get_buyer_by_id(buyer_id)
        try:
            self.db.delete(buyer)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BusinessRuleError("Buyer has orders and cannot be deleted")
        return {"message": "Buyer deleted successfully"}
