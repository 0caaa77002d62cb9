# app/models/user.py
"""
Database model for users.
A user account with credentials and a role used for admin-only routes.
"""
from tortoise import fields, models

ROLES = ("user", "admin")

class User(models.Model):
    """
    User account.

    Security:
    - Password is stored as an Argon2 hash, never in plain text
    - Username must be unique across all users
    - Role decides access to /api/admin/*
    """
    id = fields.IntField(pk=True)
    name = fields.CharField(max_length=255, null=True)  # Display name
    username = fields.CharField(max_length=191, unique=True, index=True)
    email = fields.CharField(max_length=191, null=True, unique=True)
    password_hash = fields.CharField(max_length=255)
    role = fields.CharField(max_length=16, default="user")  # "user" or "admin"
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "users"

    def to_dict(self) -> dict:
        """Public representation (never includes the password hash)."""
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
