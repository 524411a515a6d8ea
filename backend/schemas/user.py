from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from models.users import UserRole

# Schema for user authentication credentials
class UserLogin(BaseModel):
    username: str
    password: str

# Schema for account creation requests (admin only)
class UserCreate(BaseModel):
    username: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    role: UserRole

# Output schema for user profile details
class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    role: UserRole
    active: bool
    registration_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[UserResponse] = None
