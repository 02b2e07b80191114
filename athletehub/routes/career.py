# athletehub/routes/career.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from athletehub import db
from athletehub.analytics import career as career_analytics
from athletehub.auth import get_current_actor
from athletehub.db import line_items
from athletehub.routes.items import mount_line_items
from athletehub.schemas.career import (
    CareerProfileIn,
    CompetitionIn,
    CompetitionUpdate,
    GoalIn,
    GoalUpdate,
    MentorIn,
    MentorUpdate,
    OpportunityIn,
    OpportunityUpdate,
    SkillIn,
    SkillUpdate,
    TrainingProgramIn,
    TrainingProgramUpdate,
)
from athletehub.security.ownership import find_by_athlete, get_or_create, resolve_athlete
from athletehub.security.policy import Action, ResourceType
from athletehub.storage.uploads import delete_upload, save_upload
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import utcnow

router = APIRouter(prefix="/api/career", tags=["career"])

CAREER = ResourceType.CAREER
LABEL = "Career profile"


def _defaults() -> dict:
    return {
        "current_status": "amateur",
        "goals": [],
        "skills": [],
        "competitions": [],
        "training_programs": [],
        "mentors": [],
        "opportunities": [],
        "documents": [],
    }


# ---------- Profile ----------
@router.get("/athlete/{athlete_id}")
def get_career(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, CAREER, Action.READ)
    return success(career=find_by_athlete(db.careers(), chain, LABEL))


@router.post("/athlete/{athlete_id}")
def save_career(
    athlete_id: str,
    body: CareerProfileIn,
    response: Response,
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    exists = db.careers().find_one({"athlete": chain.athlete_id}) is not None
    chain.enforce(actor, CAREER, Action.UPDATE if exists else Action.CREATE)

    career = get_or_create(db.careers(), chain, _defaults())
    changes = body.changes()
    changes["updated_at"] = utcnow()
    db.careers().update_one({"_id": career["_id"]}, {"$set": changes})

    if not exists:
        response.status_code = 201
    log_activity(user_id=actor.id, action="save_career", metadata={"athlete_id": athlete_id, "created": not exists})
    return success(career=db.careers().find_one({"_id": career["_id"]}))


@router.delete("/athlete/{athlete_id}")
def delete_career(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, CAREER, Action.DELETE)
    career = find_by_athlete(db.careers(), chain, LABEL)

    db.careers().delete_one({"_id": career["_id"]})
    for doc in career.get("documents") or []:
        delete_upload(doc.get("url"))

    log_activity(user_id=actor.id, action="delete_career", metadata={"athlete_id": athlete_id})
    return success("Career profile deleted")


# ---------- Line items ----------
for path, field, key, label, create_model, update_model, resource_type, creator in (
    ("goals", "goals", "goal", "Goal", GoalIn, GoalUpdate, CAREER, "created_by"),
    ("competitions", "competitions", "competition", "Competition", CompetitionIn, CompetitionUpdate,
     CAREER, "created_by"),
    ("mentors", "mentors", "mentor", "Mentor", MentorIn, MentorUpdate, CAREER, "created_by"),
    ("opportunities", "opportunities", "opportunity", "Opportunity", OpportunityIn, OpportunityUpdate,
     CAREER, "created_by"),
    ("skills", "skills", "skill", "Skill", SkillIn, SkillUpdate, ResourceType.ASSESSMENT, "assessed_by"),
    ("training", "training_programs", "training_program", "Training program",
     TrainingProgramIn, TrainingProgramUpdate, ResourceType.ASSESSMENT, "created_by"),
):
    mount_line_items(
        router,
        path=path,
        field=field,
        key=key,
        label=label,
        create_model=create_model,
        update_model=update_model,
        collection=db.careers,
        parent_label=LABEL,
        resource_type=resource_type,
        creator_field=creator,
        defaults=_defaults,
    )


# ---------- Documents ----------
@router.post("/athlete/{athlete_id}/documents", status_code=201)
def upload_career_document(
    athlete_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    document_type: str = Form("other"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, CAREER, Action.CREATE)

    career = get_or_create(db.careers(), chain, _defaults())
    meta = save_upload(file, "career")
    document = line_items.new_item(
        {"title": title or meta["original_name"], "type": document_type, **meta},
        "uploaded_by",
        actor.id,
    )
    line_items.push_item(db.careers(), career["_id"], "documents", document)
    return success(document=document)


# ---------- Insights ----------
@router.get("/athlete/{athlete_id}/recommendations")
def career_recommendations(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, CAREER, Action.READ)
    return success(recommendations=career_analytics.recommendations())


@router.get("/athlete/{athlete_id}/analytics")
def career_analytics_view(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, CAREER, Action.READ)

    career = find_by_athlete(db.careers(), chain, LABEL)
    return success(analytics=career_analytics.summarize(career, utcnow()))
