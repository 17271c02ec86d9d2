"""
Pydantic schemas for authentication endpoints.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime


class UserLogin(BaseModel):
    """Login request schema."""
    username: str
    password: str


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    """User information response."""
    id: int
    username: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""
    token: Token
    user: UserResponse
