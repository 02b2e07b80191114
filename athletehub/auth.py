# athletehub/auth.py
from datetime import datetime, timedelta, timezone
import hashlib
import secrets
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from passlib.context import CryptContext

from athletehub import db
from athletehub.settings import (
    SECRET_KEY,
    JWT_ALG,
    ACCESS_TOKEN_EXPIRE_MIN,
    BCRYPT_ROUNDS,
)
from athletehub.utils.audit import Actor

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


# --- password utils ----------------------------------------------------------
def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# --- opaque tokens -----------------------------------------------------------
def new_refresh_token() -> str:
    return secrets.token_hex(40)


def new_verification_token() -> str:
    return secrets.token_hex(32)


def hash_token(raw: str) -> str:
    """Reset tokens are stored hashed; only the emailed copy is usable."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


# --- JWT helpers -------------------------------------------------------------
def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: dict) -> str:
    iat = _now_utc()
    exp = iat + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MIN)
    payload = {
        "sub": str(user["_id"]),
        "role": user.get("role", "athlete"),
        "type": "access",
        "iat": int(iat.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALG)


def decode_token(raw: str) -> dict:
    try:
        return jwt.decode(raw, SECRET_KEY, algorithms=[JWT_ALG])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")


def issue_session(user: dict, previous_refresh: Optional[str] = None) -> dict:
    """
    Mint an access token plus a fresh refresh token. The refresh token is
    stored on the user, replacing (and so invalidating) any previous one.

    With `previous_refresh` the swap only happens if that token is still the
    stored one, so a refresh token can be redeemed once.
    """
    refresh_token = new_refresh_token()
    query = {"_id": user["_id"]}
    if previous_refresh is not None:
        query["refresh_token"] = previous_refresh
    result = db.users().update_one(
        query,
        {"$set": {"refresh_token": refresh_token, "updated_at": _now_utc()}},
    )
    if result.matched_count == 0:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")
    return {
        "token": create_access_token(user),
        "refresh_token": refresh_token,
        "token_type": "bearer",
    }


# --- dependency used by the routes -------------------------------------------
def get_current_user(request: Request) -> dict:
    auth_header = request.headers.get("Authorization")
    token = None
    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()

    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized, no token")

    payload = decode_token(token)

    if payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Wrong token type")

    try:
        user = db.users().find_one({"_id": ObjectId(payload.get("sub"))})
    except (InvalidId, TypeError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid subject")

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if not user.get("is_active", True):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User account is deactivated")

    # picked up by AuditMiddleware
    request.state.actor = Actor.from_user(user)
    return user


def get_current_actor(user: dict = Depends(get_current_user)) -> Actor:
    return Actor.from_user(user)


# --- simple auth helper for router ------------------------------------------
def authenticate_user(email: str, password: str) -> Optional[dict]:
    user = db.users().find_one({"email": (email or "").strip().lower()})
    if not user or not user.get("password"):
        return None
    if not verify_password(password, user["password"]):
        return None
    return user
