# app/core/security.py
"""
Password hashing and API token signing.

Tokens are signed with APP_KEY, the same key the container entrypoint
resolves and persists into the base-directory .env before the server starts.
A `base64:` prefixed key is decoded to its raw bytes first.
"""
import base64
import binascii
import os
import datetime as dt
from typing import Union

import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import load_env_file

load_env_file()

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

JWT_ALG = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))


def signing_key(app_key: str) -> Union[str, bytes]:
    """Turn an APP_KEY value into HMAC key material."""
    if not app_key:
        raise RuntimeError("APP_KEY is not set; run the container entrypoint or add it to .env")
    if app_key.startswith("base64:"):
        try:
            return base64.b64decode(app_key[len("base64:"):], validate=True)
        except (binascii.Error, ValueError):
            # Not valid base64 after all; sign with the literal value
            return app_key
    return app_key


def current_signing_key() -> Union[str, bytes]:
    """Key material for the APP_KEY currently in the environment."""
    return signing_key(os.getenv("APP_KEY", ""))


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, role: str) -> str:
    """
    Issue the `api_token` returned by /api/login.

    Claims: sub (user id as string), role, iat, exp.
    """
    issued = dt.datetime.now(dt.timezone.utc)
    expires = issued + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": user_id, "role": role, "iat": issued, "exp": expires}
    return jwt.encode(claims, current_signing_key(), algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Verify signature and expiry, returning the claims.

    Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError.
    """
    return jwt.decode(token, current_signing_key(), algorithms=[JWT_ALG])
