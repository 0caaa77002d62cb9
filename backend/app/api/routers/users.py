# app/api/routers/users.py
"""
Self-service account routes: users may edit their own profile and password,
admins may do the same for anyone.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import ensure_self_or_admin, get_current_user
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.schemas.admin import AdminUserDetailOut, ProfileUpdateIn
from app.schemas.auth import ChangePasswordIn

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(user_id: int) -> User:
    u = await User.get_or_none(id=user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="USER_NOT_FOUND")
    return u


async def apply_identity_changes(u: User, username: str | None, email: str | None, name: str | None) -> None:
    """Apply username/email/name edits with uniqueness checks (shared with admin routes)."""
    if username and username != u.username:
        if await User.filter(username=username).exclude(id=u.id).exists():
            raise HTTPException(
                status_code=400,
                detail={"code": "USERNAME_EXISTS", "message": "Username already exists"},
            )
        u.username = username

    if email is not None and email != u.email:
        if email == "":
            u.email = None
        else:
            if await User.filter(email=email).exclude(id=u.id).exists():
                raise HTTPException(
                    status_code=400,
                    detail={"code": "EMAIL_EXISTS", "message": "Email already registered"},
                )
            u.email = email

    if name is not None:
        u.name = name or None


@router.patch("/{user_id}", response_model=AdminUserDetailOut)
async def update_profile(
    user_id: int,
    body: ProfileUpdateIn,
    current: User = Depends(get_current_user),
):
    ensure_self_or_admin(current, user_id)
    u = await _get_user_or_404(user_id)
    await apply_identity_changes(u, body.username, body.email, body.name)
    await u.save()
    return {"user": u.to_dict()}


@router.patch("/{user_id}/change-password")
async def change_password(
    user_id: int,
    body: ChangePasswordIn,
    current: User = Depends(get_current_user),
):
    """
    Change a password.

    Changing your own password requires `current_password`; an admin
    changing someone else's does not.
    """
    ensure_self_or_admin(current, user_id)
    u = await _get_user_or_404(user_id)

    if current.id == u.id:
        if not body.current_password or not verify_password(body.current_password, u.password_hash):
            raise HTTPException(
                status_code=400,
                detail={"code": "CURRENT_PASSWORD_INVALID", "message": "Current password is incorrect"},
            )

    u.password_hash = hash_password(body.new_password)
    await u.save()
    return {"success": True, "data": {"ok": True}}
