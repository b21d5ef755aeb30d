from pydantic import BaseModel
from typing import Optional


class BuyerResponse(BaseModel):
    id: int
    user_id: int
    location: Optional[str] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class BuyerUpdate(BaseModel):
    location: Optional[str] = None
