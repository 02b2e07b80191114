# athletehub/utils/serialize.py
from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Mongo hands back naive datetimes; treat them as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_object_id(raw: str, label: str = "resource") -> ObjectId:
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail=f"Invalid {label} id")


def clean(value: Any) -> Any:
    """Make Mongo documents JSON friendly (ObjectId -> str, datetime -> ISO)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, dict):
        return {k: clean(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [clean(v) for v in value]
    return value


def public_user(user: dict) -> dict:
    hidden = {
        "password",
        "refresh_token",
        "verification_token",
        "verification_token_expiry",
        "reset_password_token",
        "reset_password_expiry",
    }
    return clean({k: v for k, v in user.items() if k not in hidden})
