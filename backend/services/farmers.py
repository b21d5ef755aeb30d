# backend/services/farmers.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from models.farmer import Farmer
from services.errors import BusinessRuleError, NotFoundError


class FarmerService:
    def __init__(self, db: Session):
        self.db = db

    def get_all_farmers(self):
        return self.db.query(Farmer).options(joinedload(Farmer.user)).order_by(Farmer.id).all()

    def get_farmer_by_id(self, farmer_id: int) -> Farmer:
        farmer = self.db.get(Farmer, farmer_id)
        if not farmer:
            raise NotFoundError("Farmer not found")
        return farmer

    def get_by_user_id(self, user_id: int):
        return self.db.query(Farmer).filter(Farmer.user_id == user_id).first()

    def update_farmer(self, farmer_id: int, data: dict) -> dict:
        farmer = self.get_farmer_by_id(farmer_id)
        # Strings are trimmed; anything else keeps the stored value
        if isinstance(data.get("location"), str):
            farmer.location = data["location"].strip()
        if isinstance(data.get("product"), str):
            farmer.product = data["product"].strip()
        self.db.commit()
        return {"message": "Farmer updated successfully"}

    def delete_farmer(self, farmer_id: int) -> dict:
        farmer = self.get_farmer_by_id(farmer_id)
        try:
            self.db.delete(farmer)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BusinessRuleError("Farmer has products or orders and cannot be deleted")
        return {"message": "Farmer deleted successfully"}
