# app/schemas/admin.py
"""
Pydantic schemas for user management endpoints (/api/users, /api/admin/users).
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from app.schemas.auth import UserOut

class AdminUserListOut(BaseModel):
    """Paginated user list."""
    items: List[UserOut]
    offset: int
    limit: int
    total: int

class AdminUserDetailOut(BaseModel):
    user: UserOut

class AdminUserCreateIn(BaseModel):
    name: Optional[str] = None
    username: str = Field(min_length=1)
    email: Optional[str] = None
    password: str = Field(min_length=6)
    role: Literal["user", "admin"] = "user"

class AdminUserUpdateIn(BaseModel):
    """All fields optional; only provided ones change."""
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None  # "" clears the email
    role: Optional[Literal["user", "admin"]] = None

class ProfileUpdateIn(BaseModel):
    """Self-service update; role cannot be changed here."""
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
