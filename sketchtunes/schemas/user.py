"""
User-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel, Field


# ==================== REQUEST SCHEMAS ====================

class SignupRequest(BaseModel):
    """Request schema for creating an account"""
    name: str = Field(..., min_length=1, max_length=20)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=20)


# ==================== RESPONSE SCHEMAS ====================

class UserResponse(BaseModel):
    """Public user fields"""
    id: str
    name: str
    email: str | None = None
    image: str | None = None


class UserLookupResponse(BaseModel):
    """Response schema for user lookup by email; user is null when unknown"""
    user: UserResponse | None = None


class SignupResponse(BaseModel):
    """Response schema for signup"""
    message: str
