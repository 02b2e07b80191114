import pytest
from bson import ObjectId
from fastapi import HTTPException

from athletehub.security.ownership import chain_for
from athletehub.security.policy import (
    POLICIES,
    Action,
    ResourceType,
    Role,
    allowed_actions,
    authorize,
)
from athletehub.utils.audit import Actor

OWNER = Actor(id="u-owner", role="athlete")
COACH = Actor(id="u-coach", role="coach")
OTHER_COACH = Actor(id="u-coach-2", role="coach")
ADMIN = Actor(id="u-admin", role="admin")
ADVISOR = Actor(id="u-adv", role="financial_advisor")
ADVISOR_2 = Actor(id="u-adv-2", role="financial_advisor")
PHYSIO = Actor(id="u-physio", role="physiotherapist")
SCOUT = Actor(id="u-scout", role="scout")

COACHES = ("u-coach",)

# (resource, action) pairs where the owner is intentionally not granted access
OWNER_EXCLUDED = {
    (ResourceType.INJURY, Action.CREATE),
    (ResourceType.INJURY, Action.UPDATE),
    (ResourceType.INJURY, Action.DELETE),
    (ResourceType.ASSESSMENT, Action.CREATE),
    (ResourceType.ASSESSMENT, Action.UPDATE),
    (ResourceType.ASSESSMENT, Action.DELETE),
    (ResourceType.ANNOTATION, Action.CREATE),
}

ALL_RULES = [(rt, action) for rt, policy in POLICIES.items() for action in policy.rules]


@pytest.mark.parametrize("resource_type,action", ALL_RULES)
def test_owner_allowed_unless_excluded(resource_type, action):
    decision = authorize(OWNER, OWNER.id, resource_type, action, COACHES)
    assert decision.allowed is ((resource_type, action) not in OWNER_EXCLUDED)


@pytest.mark.parametrize("resource_type,action", ALL_RULES)
def test_admin_allowed_everything(resource_type, action):
    assert authorize(ADMIN, OWNER.id, resource_type, action, COACHES).allowed


@pytest.mark.parametrize("action", list(POLICIES[ResourceType.FINANCIAL].rules))
def test_coach_never_allowed_financial(action):
    # member of the coach list, and even the creator of the item
    decision = authorize(COACH, OWNER.id, ResourceType.FINANCIAL, action, COACHES, item_creator_id=COACH.id)
    assert not decision.allowed
    assert decision.reason


def test_authorize_is_deterministic():
    args = (COACH, OWNER.id, ResourceType.PERFORMANCE, Action.CREATE, COACHES)
    assert authorize(*args) == authorize(*args) == authorize(*args)


def test_unauthenticated_denied():
    decision = authorize(None, OWNER.id, ResourceType.ATHLETE, Action.READ)
    assert not decision
    assert decision.reason == "Authentication required"


def test_coach_member_performance_vs_financial():
    assert authorize(COACH, OWNER.id, ResourceType.PERFORMANCE, Action.CREATE, COACHES).allowed
    denied = authorize(COACH, OWNER.id, ResourceType.FINANCIAL, Action.CREATE, COACHES)
    assert not denied.allowed
    assert denied.reason == "Not authorized to add financial data for this athlete"


def test_non_member_coach_cannot_create_performance():
    decision = authorize(OTHER_COACH, OWNER.id, ResourceType.PERFORMANCE, Action.CREATE, COACHES)
    assert not decision.allowed
    assert decision.reason == "Not authorized to add performance record for this athlete"


def test_advisor_income_scenario():
    # U3 created the income entry; U4 is another advisor; coach is in the coach list
    assert authorize(ADVISOR, OWNER.id, ResourceType.FINANCIAL, Action.CREATE, COACHES).allowed
    assert authorize(ADVISOR, OWNER.id, ResourceType.FINANCIAL, Action.UPDATE, COACHES,
                     item_creator_id=ADVISOR.id).allowed
    assert authorize(ADVISOR_2, OWNER.id, ResourceType.FINANCIAL, Action.UPDATE, COACHES,
                     item_creator_id=ADVISOR.id).allowed
    assert not authorize(COACH, OWNER.id, ResourceType.FINANCIAL, Action.UPDATE, COACHES,
                         item_creator_id=ADVISOR.id).allowed


def test_injury_rules():
    assert authorize(PHYSIO, OWNER.id, ResourceType.INJURY, Action.CREATE).allowed
    assert authorize(COACH, OWNER.id, ResourceType.INJURY, Action.CREATE, COACHES).allowed
    assert not authorize(OWNER, OWNER.id, ResourceType.INJURY, Action.CREATE, COACHES).allowed
    # delete is role-only, a coach who recorded it still can't
    assert not authorize(COACH, OWNER.id, ResourceType.INJURY, Action.DELETE, COACHES,
                         item_creator_id=COACH.id).allowed
    assert authorize(PHYSIO, OWNER.id, ResourceType.INJURY, Action.DELETE).allowed


def test_injury_update_by_creator_outside_coach_list():
    decision = authorize(OTHER_COACH, OWNER.id, ResourceType.INJURY, Action.UPDATE, COACHES,
                         item_creator_id=OTHER_COACH.id)
    assert decision.allowed


def test_assessment_rules():
    assert authorize(COACH, OWNER.id, ResourceType.ASSESSMENT, Action.CREATE, COACHES).allowed
    assert not authorize(OTHER_COACH, OWNER.id, ResourceType.ASSESSMENT, Action.CREATE, COACHES).allowed
    assert authorize(COACH, OWNER.id, ResourceType.ASSESSMENT, Action.UPDATE, COACHES,
                     item_creator_id=COACH.id).allowed
    # coach membership alone doesn't let you edit someone else's assessment
    assert not authorize(COACH, OWNER.id, ResourceType.ASSESSMENT, Action.UPDATE, COACHES,
                         item_creator_id=OTHER_COACH.id).allowed


def test_verify_athlete():
    org = Actor(id="u-org", role=Role.ORGANIZATION.value)
    assert authorize(org, OWNER.id, ResourceType.ATHLETE, Action.VERIFY).allowed
    assert not authorize(SCOUT, OWNER.id, ResourceType.ATHLETE, Action.VERIFY).allowed
    assert authorize(SCOUT, OWNER.id, ResourceType.ATHLETE, Action.VERIFY).reason == \
        "Not authorized to verify this athlete profile"


def test_athlete_collection_any_coach_role():
    assert authorize(OTHER_COACH, OWNER.id, ResourceType.ATHLETE_COLLECTION, Action.CREATE, COACHES).allowed
    assert not authorize(SCOUT, OWNER.id, ResourceType.ATHLETE_COLLECTION, Action.CREATE).allowed


def test_coach_list_and_documents_owner_or_admin():
    for action in (Action.CREATE, Action.DELETE):
        assert authorize(OWNER, OWNER.id, ResourceType.ATHLETE_ACCESS, action).allowed
        assert authorize(ADMIN, OWNER.id, ResourceType.ATHLETE_ACCESS, action).allowed
        assert not authorize(OTHER_COACH, OWNER.id, ResourceType.ATHLETE_ACCESS, action, COACHES).allowed
    # even a listed coach cannot change who else is listed
    assert not authorize(COACH, OWNER.id, ResourceType.ATHLETE_ACCESS, Action.CREATE, COACHES).allowed


def test_read_any_authenticated_except_financial():
    assert authorize(SCOUT, OWNER.id, ResourceType.PERFORMANCE, Action.READ).allowed
    assert authorize(SCOUT, OWNER.id, ResourceType.CAREER, Action.READ).allowed
    decision = authorize(SCOUT, OWNER.id, ResourceType.FINANCIAL, Action.READ)
    assert not decision.allowed
    assert decision.reason == "Not authorized to view this financial data"


def test_allowed_actions():
    assert allowed_actions(SCOUT, OWNER.id, ResourceType.ATHLETE) == (Action.READ,)
    assert set(allowed_actions(OWNER, OWNER.id, ResourceType.ATHLETE)) == set(Action)
    assert allowed_actions(COACH, OWNER.id, ResourceType.FINANCIAL, COACHES) == ()


def test_string_inputs_accepted():
    assert authorize(OWNER, OWNER.id, "performance", "update").allowed


def test_owner_chain_normalizes_ids():
    owner_oid, coach_oid = ObjectId(), ObjectId()
    chain = chain_for({"_id": ObjectId(), "user": owner_oid, "coaches": [coach_oid]})
    assert chain.owner_user_id == str(owner_oid)
    assert chain.coaches == (str(coach_oid),)

    chain.enforce(Actor(id=str(owner_oid), role="athlete"), ResourceType.PERFORMANCE, Action.CREATE)
    chain.enforce(Actor(id=str(coach_oid), role="coach"), ResourceType.PERFORMANCE, Action.CREATE)
    with pytest.raises(HTTPException) as exc:
        chain.enforce(OTHER_COACH, ResourceType.PERFORMANCE, Action.CREATE)
    assert exc.value.status_code == 403
