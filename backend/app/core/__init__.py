# app/core/__init__.py
"""
Core application modules.
- bootstrap: database seeders (default admin account)
- db: Tortoise ORM / Aerich configuration and connection management
- security: password hashing and API token signing
"""
