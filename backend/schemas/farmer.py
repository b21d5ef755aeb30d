from pydantic import BaseModel
from typing import Optional


class FarmerResponse(BaseModel):
    id: int
    user_id: int
    location: str
    product: Optional[str] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


# Only the supplied fields are changed
class FarmerUpdate(BaseModel):
    location: Optional[str] = None
    product: Optional[str] = None
