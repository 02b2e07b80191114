# athletehub/routes/athletes.py
import re
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pymongo.errors import DuplicateKeyError

from athletehub import db
from athletehub.auth import get_current_actor
from athletehub.authz import enforce, require_role
from athletehub.db import line_items
from athletehub.schemas.athlete import AchievementIn, AchievementUpdate, AthleteCreate, AthleteUpdate, CoachIn
from athletehub.security.ownership import resolve_athlete
from athletehub.security.policy import Action, ResourceType, Role, allowed_actions
from athletehub.storage.uploads import IMAGE_CONTENT_TYPES, delete_upload, save_upload
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import to_object_id, utcnow

router = APIRouter(prefix="/api/athletes", tags=["athletes"])

COLLECTION = ResourceType.ATHLETE_COLLECTION
ACCESS = ResourceType.ATHLETE_ACCESS


@router.get("/")
def list_athletes(actor: Actor = Depends(require_role("admin", "coach", "organization"))):
    athletes = list(db.athletes().find().sort("created_at", -1))
    return success(results=len(athletes), athletes=athletes)


@router.get("/search")
def search_athletes(
    query: Optional[str] = None,
    sport: Optional[str] = None,
    country: Optional[str] = None,
    verified: Optional[bool] = None,
    actor: Actor = Depends(get_current_actor),
):
    q = {}
    if query:
        pattern = re.compile(re.escape(query), re.IGNORECASE)
        q["$or"] = [{"display_name": pattern}, {"current_team": pattern}]
    if sport:
        q["sports"] = sport
    if country:
        q["address.country"] = country
    if verified is not None:
        q["verified"] = verified

    athletes = list(db.athletes().find(q))
    return success(results=len(athletes), athletes=athletes)


@router.post("/", status_code=201)
def create_athlete(body: AthleteCreate, actor: Actor = Depends(get_current_actor)):
    enforce(actor, actor.id, ResourceType.ATHLETE, Action.CREATE)
    if db.athletes().find_one({"user": actor.id}):
        raise HTTPException(status_code=400, detail="Athlete profile already exists for this user")

    now = utcnow()
    doc = body.model_dump(mode="python", exclude_none=True)
    doc.update({
        "user": actor.id,
        "coaches": [],
        "achievements": [],
        "documents": [],
        "verified": False,
        "created_at": now,
        "updated_at": now,
    })
    try:
        db.athletes().insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Athlete profile already exists for this user")

    log_activity(user_id=actor.id, action="create_athlete", metadata={"athlete_id": str(doc["_id"])})
    return success(athlete=doc)


@router.get("/{athlete_id}")
def get_athlete(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.READ)
    permissions = allowed_actions(actor, chain.owner_user_id, ResourceType.ATHLETE, chain.coaches)
    return success(athlete=chain.athlete, permissions=[a.value for a in permissions])


@router.put("/{athlete_id}")
def update_athlete(athlete_id: str, body: AthleteUpdate, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.UPDATE)

    changes = body.model_dump(mode="python", exclude_unset=True, exclude_none=True)
    changes["updated_at"] = utcnow()
    db.athletes().update_one({"_id": chain.athlete_id}, {"$set": changes})

    log_activity(user_id=actor.id, action="update_athlete", metadata={"athlete_id": athlete_id})
    return success(athlete=db.athletes().find_one({"_id": chain.athlete_id}))


@router.delete("/{athlete_id}")
def delete_athlete(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.DELETE)

    # records hang off the athlete, they go with it
    for col in (db.performances(), db.injuries(), db.careers(), db.financials()):
        col.delete_many({"athlete": chain.athlete_id})
    db.athletes().delete_one({"_id": chain.athlete_id})

    log_activity(user_id=actor.id, action="delete_athlete", metadata={"athlete_id": athlete_id})
    return success("Athlete profile deleted")


@router.post("/{athlete_id}/profile-picture")
def upload_profile_picture(
    athlete_id: str,
    file: UploadFile = File(...),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.UPDATE)

    meta = save_upload(file, "profile-pictures", allowed=IMAGE_CONTENT_TYPES)
    old = chain.athlete.get("profile_picture")
    db.athletes().update_one(
        {"_id": chain.athlete_id},
        {"$set": {"profile_picture": meta["url"], "updated_at": utcnow()}},
    )
    delete_upload(old)
    return success("Profile picture uploaded", profile_picture=meta["url"])


# ---------- Achievements ----------
@router.post("/{athlete_id}/achievements", status_code=201)
def add_achievement(athlete_id: str, body: AchievementIn, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, COLLECTION, Action.CREATE)

    item = line_items.new_item(body.model_dump(), "created_by", actor.id)
    line_items.push_item(db.athletes(), chain.athlete_id, "achievements", item)
    return success(achievement=item)


@router.put("/{athlete_id}/achievements/{achievement_id}")
def update_achievement(
    athlete_id: str,
    achievement_id: str,
    body: AchievementUpdate,
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, COLLECTION, Action.UPDATE)

    _, item = line_items.replace_item(
        db.athletes(), chain.athlete, "achievements", achievement_id, body.changes(), "Achievement"
    )
    return success(achievement=item)


@router.delete("/{athlete_id}/achievements/{achievement_id}")
def delete_achievement(athlete_id: str, achievement_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, COLLECTION, Action.DELETE)

    line_items.remove_item(db.athletes(), chain.athlete, "achievements", achievement_id, "Achievement")
    return success("Achievement deleted")


# ---------- Documents ----------
@router.post("/{athlete_id}/documents", status_code=201)
def add_document(
    athlete_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    document_type: str = Form("other"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ACCESS, Action.CREATE)

    meta = save_upload(file, "documents")
    item = line_items.new_item(
        {"title": title or meta["original_name"], "type": document_type, **meta},
        "uploaded_by",
        actor.id,
    )
    line_items.push_item(db.athletes(), chain.athlete_id, "documents", item)
    return success(document=item)


@router.delete("/{athlete_id}/documents/{document_id}")
def delete_document(athlete_id: str, document_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ACCESS, Action.DELETE)

    doc = line_items.find_item(chain.athlete, "documents", document_id, "Document")
    line_items.remove_item(db.athletes(), chain.athlete, "documents", document_id, "Document")
    delete_upload(doc.get("url"))
    return success("Document deleted")


# ---------- Coaches ----------
@router.post("/{athlete_id}/coaches")
def add_coach(athlete_id: str, body: CoachIn, actor: Actor = Depends(get_current_actor)):
    if not body.coach_id:
        raise HTTPException(status_code=400, detail="Coach ID is required")

    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ACCESS, Action.CREATE)

    coach = db.users().find_one({"_id": to_object_id(body.coach_id, "coach")})
    if not coach:
        raise HTTPException(status_code=404, detail="Coach not found")
    if coach.get("role") != Role.COACH.value:
        raise HTTPException(status_code=400, detail="User is not a coach")
    if body.coach_id in chain.coaches:
        raise HTTPException(status_code=400, detail="Coach is already added to this athlete")

    db.athletes().update_one(
        {"_id": chain.athlete_id},
        {"$addToSet": {"coaches": body.coach_id}, "$set": {"updated_at": utcnow()}},
    )
    log_activity(user_id=actor.id, action="add_coach", metadata={"athlete_id": athlete_id, "coach_id": body.coach_id})
    return success("Coach added successfully")


@router.delete("/{athlete_id}/coaches/{coach_id}")
def remove_coach(athlete_id: str, coach_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ACCESS, Action.DELETE)

    if coach_id not in chain.coaches:
        raise HTTPException(status_code=404, detail="Coach not found for this athlete")

    db.athletes().update_one(
        {"_id": chain.athlete_id},
        {"$pull": {"coaches": coach_id}, "$set": {"updated_at": utcnow()}},
    )
    log_activity(user_id=actor.id, action="remove_coach", metadata={"athlete_id": athlete_id, "coach_id": coach_id})
    return success("Coach removed successfully")


# ---------- Statistics / verification ----------
@router.get("/{athlete_id}/statistics")
def athlete_statistics(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.READ)

    athlete = chain.athlete
    statistics = {
        "total_achievements": len(athlete.get("achievements") or []),
        "total_documents": len(athlete.get("documents") or []),
        "total_coaches": len(chain.coaches),
        "performance_records": db.performances().count_documents({"athlete": chain.athlete_id}),
        "active_injuries": db.injuries().count_documents(
            {"athlete": chain.athlete_id, "status": {"$in": ["active", "recovering"]}}
        ),
    }
    return success(statistics=statistics)


@router.put("/{athlete_id}/verify")
def verify_athlete(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, ResourceType.ATHLETE, Action.VERIFY)

    now = utcnow()
    db.athletes().update_one(
        {"_id": chain.athlete_id},
        {"$set": {"verified": True, "verified_at": now, "verified_by": actor.id, "updated_at": now}},
    )
    log_activity(user_id=actor.id, action="verify_athlete", metadata={"athlete_id": athlete_id})
    return success("Athlete verified successfully", verified=True, verified_at=now)
