# app/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field

class LoginRequest(BaseModel):
    """Credentials posted to /api/login."""
    username: str
    password: str

class UserOut(BaseModel):
    """User as returned by the API (no password hash)."""
    id: int
    name: Optional[str] = None
    username: str
    email: Optional[str] = None
    role: str = "user"
    created_at: Optional[str] = None

class LoginResponse(BaseModel):
    """Shape the frontend session handler expects: user + api_token."""
    user: UserOut
    api_token: str

class ChangePasswordIn(BaseModel):
    current_password: Optional[str] = None  # Required when changing your own password
    new_password: str = Field(min_length=6)
