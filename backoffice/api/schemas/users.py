"""
Schemas for administrative user management endpoints.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from backoffice.api.schemas.auth import UserResponse
from backoffice.api.schemas.shared import PaginationMeta


class AdminCreateUserRequest(BaseModel):
    """Payload for creating a user as an administrator."""

    username: str = Field(min_length=3, max_length=120)
    password: str
    role: Literal["admin", "operator"] = "operator"
    is_active: bool = True


class AdminUpdateUserRequest(BaseModel):
    """Partial update; omitted fields are left untouched."""

    username: Optional[str] = Field(default=None, min_length=3, max_length=120)
    password: Optional[str] = None
    role: Optional[Literal["admin", "operator"]] = None
    is_active: Optional[bool] = None


class AdminListUsersResponse(BaseModel):
    """One page of users."""

    data: List[UserResponse]
    meta: PaginationMeta
