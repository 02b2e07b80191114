# athletehub/routes/injury.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pymongo import DESCENDING

from athletehub import db
from athletehub.analytics import injury as injury_analytics
from athletehub.analytics.periods import period_start, within
from athletehub.auth import get_current_actor
from athletehub.db import line_items
from athletehub.schemas.injury import (
    InjuryCreate,
    InjuryUpdate,
    ProgressNoteIn,
    RehabPhaseIn,
    RehabPhaseUpdate,
    ReturnToPlayIn,
)
from athletehub.security.ownership import resolve_athlete, resolve_record
from athletehub.security.policy import Action, ResourceType
from athletehub.storage.uploads import delete_upload, save_upload
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import as_utc, utcnow

router = APIRouter(prefix="/api/injury", tags=["injury"])

INJURY = ResourceType.INJURY
LABEL = "Injury record"


def _injuries(chain) -> list:
    return list(db.injuries().find({"athlete": chain.athlete_id}).sort("date_of_injury", DESCENDING))


# ---------- Per-athlete views ----------
@router.get("/athlete/{athlete_id}")
def list_injuries(
    athlete_id: str,
    status: Optional[Literal["active", "recovering", "resolved"]] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, INJURY, Action.READ)

    injuries = _injuries(chain)
    if status:
        injuries = [i for i in injuries if i.get("status") == status]
    if start_date or end_date:
        injuries = within(injuries, "date_of_injury", as_utc(start_date), as_utc(end_date))
    return success(results=len(injuries), injuries=injuries)


@router.get("/athlete/{athlete_id}/analytics")
def injury_analytics_view(
    athlete_id: str,
    period: str = Query("all", pattern="^(year|6months|all|career)$"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, INJURY, Action.READ)

    now = utcnow()
    injuries = within(_injuries(chain), "date_of_injury", period_start(period, now), now)
    return success(analytics=injury_analytics.summarize(injuries))


@router.get("/athlete/{athlete_id}/risk-assessment")
def risk_assessment(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, INJURY, Action.READ)

    return success(risk_assessment=injury_analytics.risk_assessment(_injuries(chain), utcnow()))


# ---------- Records ----------
@router.post("/", status_code=201)
def create_injury(body: InjuryCreate, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(body.athlete_id)
    chain.enforce(actor, INJURY, Action.CREATE)

    now = utcnow()
    doc = body.model_dump(mode="python", exclude={"athlete_id"}, exclude_none=True)
    doc.update({
        "athlete": chain.athlete_id,
        "recorded_by": actor.id,
        "medical_documents": [],
        "rehabilitation_plan": [],
        "progress_notes": [],
        "return_to_play": None,
        "created_at": now,
        "updated_at": now,
    })
    db.injuries().insert_one(doc)

    log_activity(user_id=actor.id, action="create_injury", metadata={"injury_id": str(doc["_id"])})
    return success(injury=doc)


@router.get("/{injury_id}")
def get_injury(injury_id: str, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.READ)
    return success(injury=injury)


@router.put("/{injury_id}")
def update_injury(injury_id: str, body: InjuryUpdate, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=injury.get("recorded_by"))

    changes = body.model_dump(mode="python", exclude_unset=True, exclude_none=True)
    changes["updated_at"] = utcnow()
    db.injuries().update_one({"_id": injury["_id"]}, {"$set": changes})

    log_activity(user_id=actor.id, action="update_injury", metadata={"injury_id": injury_id})
    return success(injury=db.injuries().find_one({"_id": injury["_id"]}))


@router.delete("/{injury_id}")
def delete_injury(injury_id: str, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.DELETE)

    db.injuries().delete_one({"_id": injury["_id"]})
    for doc in injury.get("medical_documents") or []:
        delete_upload(doc.get("url"))

    log_activity(user_id=actor.id, action="delete_injury", metadata={"injury_id": injury_id})
    return success("Injury record deleted")


# ---------- Medical documents ----------
@router.post("/{injury_id}/documents", status_code=201)
def upload_medical_document(
    injury_id: str,
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    document_type: Literal["report", "scan", "prescription", "other"] = Form("other"),
    actor: Actor = Depends(get_current_actor),
):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=injury.get("recorded_by"))

    meta = save_upload(file, "medical")
    document = line_items.new_item(
        {"name": name or meta["original_name"], "type": document_type, **meta},
        "uploaded_by",
        actor.id,
    )
    line_items.push_item(db.injuries(), injury["_id"], "medical_documents", document)
    return success(document=document)


@router.delete("/{injury_id}/documents/{document_id}")
def delete_medical_document(injury_id: str, document_id: str, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    document = line_items.find_item(injury, "medical_documents", document_id, "Document")
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=document.get("uploaded_by"))

    line_items.remove_item(db.injuries(), injury, "medical_documents", document_id, "Document")
    delete_upload(document.get("url"))
    return success("Document deleted")


# ---------- Rehabilitation ----------
@router.post("/{injury_id}/rehabilitation", status_code=201)
def add_rehab_phase(injury_id: str, body: RehabPhaseIn, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=injury.get("recorded_by"))

    phase = line_items.new_item(body.model_dump(), "created_by", actor.id)
    line_items.push_item(db.injuries(), injury["_id"], "rehabilitation_plan", phase)
    if injury.get("status") == "active":
        db.injuries().update_one({"_id": injury["_id"]}, {"$set": {"status": "recovering"}})
    return success(phase=phase)


@router.put("/{injury_id}/rehabilitation/{phase_id}")
def update_rehab_phase(
    injury_id: str,
    phase_id: str,
    body: RehabPhaseUpdate,
    actor: Actor = Depends(get_current_actor),
):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    current = line_items.find_item(injury, "rehabilitation_plan", phase_id, "Rehabilitation phase")
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=current.get("created_by"))

    _, phase = line_items.replace_item(
        db.injuries(), injury, "rehabilitation_plan", phase_id, body.changes(), "Rehabilitation phase"
    )
    return success(phase=phase)


@router.post("/{injury_id}/progress", status_code=201)
def add_progress_note(injury_id: str, body: ProgressNoteIn, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=injury.get("recorded_by"))

    note = line_items.new_item(body.model_dump(), "added_by", actor.id)
    line_items.push_item(db.injuries(), injury["_id"], "progress_notes", note)
    return success(note=note)


@router.put("/{injury_id}/return-to-play")
def update_return_to_play(injury_id: str, body: ReturnToPlayIn, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.UPDATE, item_creator_id=injury.get("recorded_by"))

    now = utcnow()
    assessment = body.model_dump(mode="python")
    assessment.update({"assessed_by": actor.id, "assessed_at": now})
    changes = {"return_to_play": assessment, "updated_at": now}
    if body.is_cleared:
        changes["status"] = "resolved"
    db.injuries().update_one({"_id": injury["_id"]}, {"$set": changes})

    log_activity(
        user_id=actor.id,
        action="return_to_play",
        metadata={"injury_id": injury_id, "cleared": body.is_cleared},
    )
    return success(injury=db.injuries().find_one({"_id": injury["_id"]}))


@router.get("/{injury_id}/rehabilitation-progress")
def rehabilitation_progress(injury_id: str, actor: Actor = Depends(get_current_actor)):
    injury, chain = resolve_record(db.injuries(), injury_id, LABEL)
    chain.enforce(actor, INJURY, Action.READ)

    return success(progress=injury_analytics.rehab_progress(injury, utcnow()))
