from pydantic import BaseModel, Field


class UserBase(BaseModel):
    """Base user model with common fields"""
    name: str = Field(..., min_length=1, max_length=20)
    email: str
    image: str | None = None


class UserCreate(UserBase):
    """Model for creating a new user"""
    hashed_password: str
