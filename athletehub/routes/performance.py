# athletehub/routes/performance.py
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pymongo import DESCENDING

from athletehub import db
from athletehub.analytics import performance as perf_analytics
from athletehub.analytics.periods import months_ago, period_start, within
from athletehub.auth import get_current_actor
from athletehub.db import line_items
from athletehub.schemas.performance import (
    AnnotationIn,
    PerformanceCreate,
    PerformanceUpdate,
    SkillAssessmentIn,
    SkillAssessmentUpdate,
)
from athletehub.security.ownership import resolve_athlete, resolve_record
from athletehub.security.policy import Action, ResourceType
from athletehub.storage.uploads import VIDEO_CONTENT_TYPES, delete_upload, save_upload
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import as_utc, utcnow

router = APIRouter(prefix="/api/performance", tags=["performance"])

PERFORMANCE = ResourceType.PERFORMANCE
RECENT_LIMIT = 10


def _records(chain, limit: int = 0) -> list:
    cur = db.performances().find({"athlete": chain.athlete_id}).sort("date", DESCENDING)
    if limit:
        cur = cur.limit(limit)
    return list(cur)


# ---------- Per-athlete views ----------
@router.get("/athlete/{athlete_id}")
def list_performances(
    athlete_id: str,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    type: Optional[str] = None,
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.READ)

    records = _records(chain)
    if start_date or end_date:
        records = within(records, "date", as_utc(start_date), as_utc(end_date))
    if type:
        records = [r for r in records if r.get("type") == type]
    return success(results=len(records), performances=records)


@router.get("/athlete/{athlete_id}/analytics")
def performance_analytics(
    athlete_id: str,
    period: Optional[str] = Query(None, pattern="^(week|month|year)$"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.READ)

    now = utcnow()
    records = within(_records(chain), "date", period_start(period, now), now)
    return success(analytics=perf_analytics.summarize(records))


@router.get("/athlete/{athlete_id}/compare")
def compare_with_benchmarks(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.READ)

    comparison = perf_analytics.compare_with_benchmarks(_records(chain, RECENT_LIMIT))
    return success(comparison=comparison)


@router.get("/athlete/{athlete_id}/trends")
def performance_trends(
    athlete_id: str,
    metric: Optional[str] = None,
    period: int = Query(6, ge=1, le=120, description="months"),
    interval: Optional[str] = Query(None, pattern="^(day|week|month)$"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.READ)

    now = utcnow()
    records = within(_records(chain), "date", months_ago(now, period), now)
    return success(trends=perf_analytics.trends(records, metric=metric, interval=interval))


@router.get("/athlete/{athlete_id}/recommendations")
def performance_recommendations(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.READ)

    return success(recommendations=perf_analytics.recommendations(_records(chain, RECENT_LIMIT)))


# ---------- Records ----------
@router.post("/", status_code=201)
def create_performance(body: PerformanceCreate, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(body.athlete_id)
    chain.enforce(actor, PERFORMANCE, Action.CREATE)

    now = utcnow()
    doc = body.model_dump(mode="python", exclude={"athlete_id"}, exclude_none=True)
    doc.update({
        "athlete": chain.athlete_id,
        "date": body.date or now,
        "recorded_by": actor.id,
        "videos": [],
        "skill_assessments": [],
        "created_at": now,
        "updated_at": now,
    })
    db.performances().insert_one(doc)

    log_activity(user_id=actor.id, action="create_performance", metadata={"performance_id": str(doc["_id"])})
    return success(performance=doc)


@router.get("/{performance_id}")
def get_performance(performance_id: str, actor: Actor = Depends(get_current_actor)):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, PERFORMANCE, Action.READ)
    return success(performance=record)


@router.put("/{performance_id}")
def update_performance(performance_id: str, body: PerformanceUpdate, actor: Actor = Depends(get_current_actor)):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, PERFORMANCE, Action.UPDATE, item_creator_id=record.get("recorded_by"))

    changes = body.model_dump(mode="python", exclude_unset=True, exclude_none=True)
    changes["updated_at"] = utcnow()
    db.performances().update_one({"_id": record["_id"]}, {"$set": changes})

    log_activity(user_id=actor.id, action="update_performance", metadata={"performance_id": performance_id})
    return success(performance=db.performances().find_one({"_id": record["_id"]}))


@router.delete("/{performance_id}")
def delete_performance(performance_id: str, actor: Actor = Depends(get_current_actor)):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, PERFORMANCE, Action.DELETE, item_creator_id=record.get("recorded_by"))

    db.performances().delete_one({"_id": record["_id"]})
    for video in record.get("videos") or []:
        delete_upload(video.get("url"))

    log_activity(user_id=actor.id, action="delete_performance", metadata={"performance_id": performance_id})
    return success("Performance record deleted")


# ---------- Video analysis ----------
@router.post("/{performance_id}/video", status_code=201)
def upload_video(
    performance_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    duration: Optional[float] = Form(None),
    actor: Actor = Depends(get_current_actor),
):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, PERFORMANCE, Action.UPDATE, item_creator_id=record.get("recorded_by"))

    meta = save_upload(file, "videos", allowed=VIDEO_CONTENT_TYPES)
    video = line_items.new_item(
        {"title": title or meta["original_name"], "duration": duration, "annotations": [], **meta},
        "uploaded_by",
        actor.id,
    )
    line_items.push_item(db.performances(), record["_id"], "videos", video)
    return success(video=video)


@router.post("/{performance_id}/video/{video_id}/annotations", status_code=201)
def add_annotation(
    performance_id: str,
    video_id: str,
    body: AnnotationIn,
    actor: Actor = Depends(get_current_actor),
):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, ResourceType.ANNOTATION, Action.CREATE, item_creator_id=record.get("recorded_by"))

    video = line_items.find_item(record, "videos", video_id, "Video")
    annotation = line_items.new_item(body.model_dump(), "created_by", actor.id)
    annotations = list(video.get("annotations") or []) + [annotation]
    line_items.replace_item(db.performances(), record, "videos", video_id, {"annotations": annotations}, "Video")
    return success(annotation=annotation)


# ---------- Skill assessments ----------
@router.post("/{performance_id}/skill-assessment", status_code=201)
def add_skill_assessment(performance_id: str, body: SkillAssessmentIn, actor: Actor = Depends(get_current_actor)):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    chain.enforce(actor, ResourceType.ASSESSMENT, Action.CREATE)

    assessment = line_items.new_item(body.model_dump(), "assessed_by", actor.id)
    line_items.push_item(db.performances(), record["_id"], "skill_assessments", assessment)
    return success(assessment=assessment)


@router.put("/{performance_id}/skill-assessment/{assessment_id}")
def update_skill_assessment(
    performance_id: str,
    assessment_id: str,
    body: SkillAssessmentUpdate,
    actor: Actor = Depends(get_current_actor),
):
    record, chain = resolve_record(db.performances(), performance_id, "Performance record")
    current = line_items.find_item(record, "skill_assessments", assessment_id, "Skill assessment")
    chain.enforce(actor, ResourceType.ASSESSMENT, Action.UPDATE, item_creator_id=current.get("assessed_by"))

    _, assessment = line_items.replace_item(
        db.performances(), record, "skill_assessments", assessment_id, body.changes(), "Skill assessment"
    )
    return success(assessment=assessment)
