# app/api/routers/admin.py
from __future__ import annotations

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    status,
)
from tortoise.expressions import Q

from app.api.deps import require_admin
from app.api.routers.users import apply_identity_changes
from app.core.security import hash_password
from app.models.user import User
from app.schemas.admin import (
    AdminUserCreateIn,
    AdminUserDetailOut,
    AdminUserListOut,
    AdminUserUpdateIn,
)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _count_admins() -> int:
    """Used to refuse removing or demoting the last admin."""
    return await User.filter(role="admin").count()


async def _get_user_or_404(user_id: int) -> User:
    u = await User.get_or_none(id=user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="USER_NOT_FOUND")
    return u


# ==============================================================================
# User resource: /api/admin/users (index, store, show, update, destroy)
# ==============================================================================
@router.get(
    "/users",
    response_model=AdminUserListOut,
    dependencies=[Depends(require_admin)],
)
async def list_users(
    q: str | None = Query(default=None, description="Fuzzy search by username/email/name"),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """Paginated user list, newest first."""
    qs = User.all().order_by("-created_at", "-id")
    if q:
        qs = qs.filter(Q(username__icontains=q) | Q(email__icontains=q) | Q(name__icontains=q))

    total = await qs.count()
    rows = await qs.offset(offset).limit(limit)
    return {"items": [u.to_dict() for u in rows], "offset": offset, "limit": limit, "total": total}


@router.post(
    "/users",
    response_model=AdminUserDetailOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_user(body: AdminUserCreateIn):
    """
    Create an account.

    Raises:
        HTTPException (400): USERNAME_EXISTS or EMAIL_EXISTS
    """
    if await User.filter(username=body.username).exists():
        raise HTTPException(
            status_code=400,
            detail={"code": "USERNAME_EXISTS", "message": "Username already exists"},
        )
    if body.email and await User.filter(email=body.email).exists():
        raise HTTPException(
            status_code=400,
            detail={"code": "EMAIL_EXISTS", "message": "Email already registered"},
        )
    u = await User.create(
        name=body.name,
        username=body.username,
        email=body.email or None,
        password_hash=hash_password(body.password),
        role=body.role,
    )
    return {"user": u.to_dict()}


@router.get(
    "/users/{user_id}",
    response_model=AdminUserDetailOut,
    dependencies=[Depends(require_admin)],
)
async def get_user_detail(user_id: int):
    return {"user": (await _get_user_or_404(user_id)).to_dict()}


@router.api_route(
    "/users/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=AdminUserDetailOut,
)
async def update_user(
    user_id: int,
    body: AdminUserUpdateIn,
    current_admin: User = Depends(require_admin),
):
    """
    Update name, username, email or role.

    Raises:
        HTTPException (400): USERNAME_EXISTS, EMAIL_EXISTS, CANNOT_DEMOTE_SELF,
            LAST_ADMIN_FORBIDDEN
        HTTPException (404): USER_NOT_FOUND
    """
    u = await _get_user_or_404(user_id)
    await apply_identity_changes(u, body.username, body.email, body.name)

    if body.role and body.role != u.role:
        if current_admin.id == u.id and body.role != "admin":
            raise HTTPException(
                status_code=400,
                detail={"code": "CANNOT_DEMOTE_SELF", "message": "Cannot demote yourself"},
            )
        if u.role == "admin" and await _count_admins() <= 1:
            raise HTTPException(
                status_code=400,
                detail={"code": "LAST_ADMIN_FORBIDDEN", "message": "Cannot demote the last admin"},
            )
        u.role = body.role

    await u.save()
    return {"user": u.to_dict()}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    current_admin: User = Depends(require_admin),
):
    """
    Delete an account.

    Raises:
        HTTPException (400): CANNOT_DELETE_SELF, LAST_ADMIN_FORBIDDEN
        HTTPException (404): USER_NOT_FOUND
    """
    u = await _get_user_or_404(user_id)

    if current_admin.id == u.id:
        raise HTTPException(
            status_code=400,
            detail={"code": "CANNOT_DELETE_SELF", "message": "Cannot delete yourself"},
        )
    if u.role == "admin" and await _count_admins() <= 1:
        raise HTTPException(
            status_code=400,
            detail={"code": "LAST_ADMIN_FORBIDDEN", "message": "Cannot delete the last admin"},
        )

    await u.delete()
    return {"success": True, "data": {"ok": True}}
