# app/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import TOKEN_COOKIE, get_current_user
from app.core.security import create_access_token, verify_password
from app.models.user import User
from app.schemas.auth import LoginRequest, LoginResponse

router = APIRouter(tags=["auth"])

@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, response: Response):
    """
    Exchange username/password for an API token.

    The token is returned as `api_token` (what the frontend session stores)
    and also set as an HttpOnly cookie.

    Raises:
        HTTPException (401): AUTH_INVALID_CREDENTIALS
    """
    user = await User.get_or_none(username=payload.username)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail={"code": "AUTH_INVALID_CREDENTIALS",
                                    "message": "Incorrect username or password"})
    token = create_access_token(str(user.id), user.role)
    response.set_cookie(TOKEN_COOKIE, token, httponly=True, secure=False, samesite="lax")
    return {"user": user.to_dict(), "api_token": token}

@router.post("/logout")
async def logout(response: Response, user: User = Depends(get_current_user)):
    """
    Clear the token cookie.

    Tokens are stateless, so a copied token stays valid until it expires.
    """
    response.delete_cookie(TOKEN_COOKIE)
    return {"success": True}

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"user": user.to_dict()}
