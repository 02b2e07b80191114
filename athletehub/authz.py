# athletehub/authz.py
from typing import Callable, Iterable, Optional

from fastapi import Depends, HTTPException, status

from athletehub.auth import get_current_actor
from athletehub.security.policy import Action, ResourceType, authorize
from athletehub.utils.audit import Actor


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.get("/", dependencies=[Depends(require_role("admin", "coach"))])
        def list_things(...):
            ...
    """
    allowed = set(r.strip().lower() for r in allowed_roles if r)

    def _dep(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {actor.role} is not authorized to access this route",
            )
        return actor

    return _dep


def enforce(
    actor: Actor,
    owner_user_id: Optional[str],
    resource_type: ResourceType,
    action: Action,
    coaches: Iterable[str] = (),
    item_creator_id: Optional[str] = None,
) -> None:
    """Evaluate the policy and turn a deny into a 403 carrying its reason."""
    decision = authorize(actor, owner_user_id, resource_type, action, coaches, item_creator_id)
    if not decision.allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=decision.reason)
