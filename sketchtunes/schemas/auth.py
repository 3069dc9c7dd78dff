"""
Authentication-related request and response schemas for API endpoints.
"""
from pydantic import BaseModel, Field


# ==================== REQUEST SCHEMAS ====================

class LoginRequest(BaseModel):
    """Request schema for email/password login"""
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


# ==================== RESPONSE SCHEMAS ====================

class TokenResponse(BaseModel):
    """Response schema for a successful login"""
    access_token: str
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    """Response schema for logout"""
    message: str
