# athletehub/middleware/audit_middleware.py
import logging
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from athletehub.utils.audit import write_audit_event

logger = logging.getLogger(__name__)


def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else ""


def _request_ctx(request: Request, request_id: str) -> dict:
    return {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "ip": _client_ip(request),
        "ua": request.headers.get("user-agent", ""),
    }


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Stamps every response with x-request-id and records security-relevant
    outcomes (401, 403, 5xx) in audit_events. Successful requests are not
    audited; routes log business events through log_activity instead.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception as e:
            # the app-level handler renders the 500; record it here first
            write_audit_event(
                action="server_error",
                ok=False,
                actor=getattr(request.state, "actor", None),
                err=repr(e),
                request_ctx=_request_ctx(request, request_id),
            )
            raise

        response.headers["x-request-id"] = request_id

        status = response.status_code
        if status in (401, 403) or status >= 500:
            if status == 403:
                action = "permission_denied"
            elif status == 401:
                action = "auth_missing_or_invalid"
            else:
                action = "server_error"
            write_audit_event(
                action=action,
                ok=False,
                actor=getattr(request.state, "actor", None),
                err=f"HTTP {status}",
                request_ctx=_request_ctx(request, request_id),
            )
            logger.info("%s %s -> %s [%s]", request.method, request.url.path, status, request_id)

        return response
