# athletehub/security/policy.py
"""
Declarative authorization for every resource the API exposes.

One table maps (resource type, action) to the clauses that grant access.
Clauses are OR'ed; anything not granted is denied. The only table-level
exclusion is a per-resource set of roles that can never be granted
(coaches on financial data).

`authorize` is pure: same inputs, same Decision, no I/O.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from athletehub.utils.audit import Actor


class Role(str, Enum):
    ATHLETE = "athlete"
    COACH = "coach"
    ADMIN = "admin"
    ORGANIZATION = "organization"
    SCOUT = "scout"
    PHYSIOTHERAPIST = "physiotherapist"
    NUTRITIONIST = "nutritionist"
    FINANCIAL_ADVISOR = "financial_advisor"


class ResourceType(str, Enum):
    ATHLETE = "athlete"
    # achievements hanging off an athlete
    ATHLETE_COLLECTION = "athlete_collection"
    # documents and the coach list
    ATHLETE_ACCESS = "athlete_access"
    PERFORMANCE = "performance"
    FINANCIAL = "financial"
    INJURY = "injury"
    CAREER = "career"
    # coach-authored items: skill assessments, training programs
    ASSESSMENT = "assessment"
    # notes on performance videos by the recording user or a listed coach
    ANNOTATION = "annotation"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VERIFY = "verify"


@dataclass(frozen=True)
class Rule:
    any_authenticated: bool = False
    owner: bool = False
    coach_member: bool = False
    creator: bool = False
    roles: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ResourcePolicy:
    noun: str
    rules: Dict[Action, Rule]
    excluded_roles: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


def _roles(*roles: Role) -> FrozenSet[str]:
    return frozenset(r.value for r in roles)


_ANY = Rule(any_authenticated=True)
_ADMIN = _roles(Role.ADMIN)

POLICIES: Dict[ResourceType, ResourcePolicy] = {
    ResourceType.ATHLETE: ResourcePolicy(
        noun="athlete profile",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(owner=True, roles=_ADMIN),
            Action.UPDATE: Rule(owner=True, roles=_ADMIN),
            Action.DELETE: Rule(owner=True, roles=_ADMIN),
            Action.VERIFY: Rule(owner=True, roles=_roles(Role.ADMIN, Role.ORGANIZATION)),
        },
    ),
    ResourceType.ATHLETE_COLLECTION: ResourcePolicy(
        noun="athlete profile",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(owner=True, roles=_roles(Role.ADMIN, Role.COACH)),
            Action.UPDATE: Rule(owner=True, roles=_roles(Role.ADMIN, Role.COACH)),
            Action.DELETE: Rule(owner=True, roles=_roles(Role.ADMIN, Role.COACH)),
        },
    ),
    ResourceType.ATHLETE_ACCESS: ResourcePolicy(
        noun="athlete profile",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(owner=True, roles=_ADMIN),
            Action.UPDATE: Rule(owner=True, roles=_ADMIN),
            Action.DELETE: Rule(owner=True, roles=_ADMIN),
        },
    ),
    ResourceType.PERFORMANCE: ResourcePolicy(
        noun="performance record",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(owner=True, coach_member=True, roles=_ADMIN),
            Action.UPDATE: Rule(owner=True, coach_member=True, creator=True, roles=_ADMIN),
            Action.DELETE: Rule(owner=True, coach_member=True, creator=True, roles=_ADMIN),
        },
    ),
    ResourceType.FINANCIAL: ResourcePolicy(
        noun="financial data",
        rules={
            Action.READ: Rule(owner=True, roles=_roles(Role.ADMIN, Role.FINANCIAL_ADVISOR)),
            Action.CREATE: Rule(owner=True, roles=_roles(Role.ADMIN, Role.FINANCIAL_ADVISOR)),
            Action.UPDATE: Rule(owner=True, creator=True, roles=_roles(Role.ADMIN, Role.FINANCIAL_ADVISOR)),
            Action.DELETE: Rule(owner=True, creator=True, roles=_roles(Role.ADMIN, Role.FINANCIAL_ADVISOR)),
        },
        excluded_roles=_roles(Role.COACH),
    ),
    ResourceType.INJURY: ResourcePolicy(
        noun="injury record",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(coach_member=True, roles=_roles(Role.ADMIN, Role.PHYSIOTHERAPIST)),
            Action.UPDATE: Rule(coach_member=True, creator=True, roles=_roles(Role.ADMIN, Role.PHYSIOTHERAPIST)),
            Action.DELETE: Rule(roles=_roles(Role.ADMIN, Role.PHYSIOTHERAPIST)),
        },
    ),
    ResourceType.CAREER: ResourcePolicy(
        noun="career data",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(owner=True, coach_member=True, roles=_ADMIN),
            Action.UPDATE: Rule(owner=True, coach_member=True, creator=True, roles=_ADMIN),
            Action.DELETE: Rule(owner=True, coach_member=True, creator=True, roles=_ADMIN),
        },
    ),
    ResourceType.ASSESSMENT: ResourcePolicy(
        noun="assessment",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(coach_member=True, roles=_ADMIN),
            Action.UPDATE: Rule(creator=True, roles=_ADMIN),
            Action.DELETE: Rule(creator=True, roles=_ADMIN),
        },
    ),
    ResourceType.ANNOTATION: ResourcePolicy(
        noun="annotation",
        rules={
            Action.READ: _ANY,
            Action.CREATE: Rule(coach_member=True, creator=True, roles=_ADMIN),
        },
    ),
}


def _deny_reason(noun: str, action: Action) -> str:
    if action == Action.CREATE:
        return f"Not authorized to add {noun} for this athlete"
    verb = "view" if action == Action.READ else action.value
    return f"Not authorized to {verb} this {noun}"


def authorize(
    actor: Optional[Actor],
    owner_user_id: Optional[str],
    resource_type: ResourceType,
    action: Action,
    coaches: Iterable[str] = (),
    item_creator_id: Optional[str] = None,
) -> Decision:
    """
    Decide whether `actor` may perform `action` on a resource of `resource_type`.

    owner_user_id   - user id owning the athlete the resource hangs off
    coaches         - user ids in that athlete's coach list
    item_creator_id - user id that created the record/line item, if any
    """
    if actor is None or not actor.id:
        return Decision(False, "Authentication required")

    policy = POLICIES[ResourceType(resource_type)]
    action = Action(action)
    reason = _deny_reason(policy.noun, action)

    if actor.role in policy.excluded_roles:
        return Decision(False, reason)

    rule = policy.rules.get(action)
    if rule is None:
        return Decision(False, reason)

    actor_id = str(actor.id)
    if rule.any_authenticated:
        return Decision(True)
    if actor.role in rule.roles:
        return Decision(True)
    if rule.owner and owner_user_id is not None and str(owner_user_id) == actor_id:
        return Decision(True)
    if rule.coach_member and actor_id in {str(c) for c in coaches}:
        return Decision(True)
    if rule.creator and item_creator_id is not None and str(item_creator_id) == actor_id:
        return Decision(True)
    return Decision(False, reason)


def allowed_actions(actor: Actor, owner_user_id: Optional[str], resource_type: ResourceType,
                    coaches: Iterable[str] = (), item_creator_id: Optional[str] = None) -> Tuple[Action, ...]:
    """Every action the actor may take; handy for UIs deciding which buttons to show."""
    coaches = tuple(coaches)
    return tuple(
        a for a in POLICIES[ResourceType(resource_type)].rules
        if authorize(actor, owner_user_id, resource_type, a, coaches, item_creator_id).allowed
    )
