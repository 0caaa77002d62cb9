# app/core/bootstrap.py
"""
Database seeders.
Run by `python -m app.seed`, which the container entrypoint invokes once per
environment (guarded by a marker file under storage/app).
"""
import os
import logging
from typing import Optional

from app.models.user import User
from app.core.security import hash_password

logger = logging.getLogger("uvicorn.error")

async def ensure_default_admin() -> Optional[User]:
    """
    Create the first admin account if there is none.

    Environment variables:
      ADMIN_USERNAME (default: "admin")
      ADMIN_EMAIL    (default: "admin@example.com")
      ADMIN_PASSWORD (required, otherwise nothing is created)

    Returns:
        The created admin, or None when nothing was created
    """
    if await User.filter(role="admin").exists():
        logger.info("[bootstrap] Admin already present, nothing to seed")
        return None

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present, but ADMIN_PASSWORD not set -> skip creating default admin.")
        return None

    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")

    # Someone may already have taken the name with a regular account
    base_username = admin_username
    suffix = 1
    while await User.filter(username=admin_username).exists():
        suffix += 1
        admin_username = f"{base_username}{suffix}"

    u = await User.create(
        username=admin_username,
        email=admin_email,
        password_hash=hash_password(admin_password),
        role="admin",
    )
    logger.warning("[bootstrap] Created default admin -> username=%s email=%s id=%s",
                   u.username, u.email, u.id)
    return u

async def run_seeders() -> None:
    """All seeders, in order."""
    await ensure_default_admin()
