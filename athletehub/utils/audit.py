# athletehub/utils/audit.py
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Dict, Optional

from athletehub import db

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly to handlers and the policy engine."""
    id: str
    role: str
    email: Optional[str] = None

    @staticmethod
    def from_user(user: dict) -> "Actor":
        return Actor(
            id=str(user["_id"]),
            role=(user.get("role") or "athlete").strip().lower(),
            email=user.get("email"),
        )

    def to_dict(self) -> dict:
        return {"user_id": self.id, "role": self.role, "email": self.email}


def ensure_audit_indexes() -> None:
    events = db.audit_events()
    events.create_index([("ts", 1)])
    events.create_index([("action", 1)])
    events.create_index([("actor.user_id", 1)])
    events.create_index([("request.request_id", 1)])


def write_audit_event(
    *,
    action: str,
    ok: bool,
    actor: Optional[Actor] = None,
    err: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    request_ctx: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write one normalized audit event. Best-effort (never raises).

    Event schema:
    {
      ts, action, ok, err,
      actor: {user_id, role, email},
      meta: {...},
      request: {request_id, method, path, ip, ua}
    }
    """
    try:
        db.audit_events().insert_one({
            "ts": _utcnow(),
            "action": action,
            "ok": ok,
            "err": err,
            "actor": actor.to_dict() if actor else {},
            "meta": meta or {},
            "request": request_ctx or {},
        })
    except Exception:
        # Never block requests due to audit failure.
        logger.exception("audit write failed (%s)", action)
