# app/models/__init__.py
"""
Database models.
- User: account, credentials and role
"""
from .user import User
