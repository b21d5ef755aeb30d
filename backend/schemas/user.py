from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime

Role = Literal["farmer", "buyer", "logistics", "admin"]

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user registration requests
class UserCreate(UserBase):
    full_name: str
    password: str = Field(min_length=1)
    confirm_password: Optional[str] = None
    phone: Optional[str] = None
    location: str
    role: Role

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    full_name: str
    phone: Optional[str] = None
    role: str
    is_verified: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Partial update of a user account
class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None

# Short user summary returned with a token
class UserSummary(BaseModel):
    user_id: int
    full_name: str
    email: str
    role: str

# Token plus the authenticated user
class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserSummary
