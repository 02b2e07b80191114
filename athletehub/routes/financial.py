# athletehub/routes/financial.py
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile

from athletehub import db
from athletehub.analytics import financial as financial_analytics
from athletehub.auth import get_current_actor
from athletehub.db import line_items
from athletehub.routes.items import mount_line_items
from athletehub.schemas.financial import (
    ExpenseIn,
    ExpenseUpdate,
    FinancialGoalIn,
    FinancialGoalUpdate,
    FinancialProfileIn,
    IncomeIn,
    IncomeUpdate,
    InvestmentIn,
    InvestmentUpdate,
    SponsorshipIn,
    SponsorshipUpdate,
)
from athletehub.security.ownership import find_by_athlete, get_or_create, resolve_athlete
from athletehub.security.policy import Action, ResourceType
from athletehub.storage.uploads import delete_upload, save_upload
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success
from athletehub.utils.serialize import utcnow

router = APIRouter(prefix="/api/financial", tags=["financial"])

FINANCIAL = ResourceType.FINANCIAL
LABEL = "Financial profile"


def _defaults() -> dict:
    return {
        "currency": "INR",
        "income": [],
        "expenses": [],
        "sponsorships": [],
        "investments": [],
        "goals": [],
        "documents": [],
    }


def _load(athlete_id: str, actor: Actor):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, FINANCIAL, Action.READ)
    return find_by_athlete(db.financials(), chain, LABEL)


# ---------- Profile ----------
@router.get("/athlete/{athlete_id}")
def get_financial(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    return success(financial=_load(athlete_id, actor))


@router.post("/athlete/{athlete_id}")
def save_financial(
    athlete_id: str,
    body: FinancialProfileIn,
    response: Response,
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    exists = db.financials().find_one({"athlete": chain.athlete_id}) is not None
    chain.enforce(actor, FINANCIAL, Action.UPDATE if exists else Action.CREATE)

    financial = get_or_create(db.financials(), chain, _defaults())
    changes = body.changes()
    if "currency" in changes:
        changes["currency"] = changes["currency"].upper()
    changes["updated_at"] = utcnow()
    db.financials().update_one({"_id": financial["_id"]}, {"$set": changes})

    if not exists:
        response.status_code = 201
    log_activity(user_id=actor.id, action="save_financial", metadata={"athlete_id": athlete_id, "created": not exists})
    return success(financial=db.financials().find_one({"_id": financial["_id"]}))


@router.delete("/athlete/{athlete_id}")
def delete_financial(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, FINANCIAL, Action.DELETE)
    financial = find_by_athlete(db.financials(), chain, LABEL)

    db.financials().delete_one({"_id": financial["_id"]})
    for doc in financial.get("documents") or []:
        delete_upload(doc.get("url"))

    log_activity(user_id=actor.id, action="delete_financial", metadata={"athlete_id": athlete_id})
    return success("Financial profile deleted")


# ---------- Line items ----------
for field, key, label, create_model, update_model in (
    ("income", "income", "Income entry", IncomeIn, IncomeUpdate),
    ("expenses", "expense", "Expense", ExpenseIn, ExpenseUpdate),
    ("sponsorships", "sponsorship", "Sponsorship", SponsorshipIn, SponsorshipUpdate),
    ("investments", "investment", "Investment", InvestmentIn, InvestmentUpdate),
    ("goals", "goal", "Financial goal", FinancialGoalIn, FinancialGoalUpdate),
):
    mount_line_items(
        router,
        path=key,
        field=field,
        key=key,
        label=label,
        create_model=create_model,
        update_model=update_model,
        collection=db.financials,
        parent_label=LABEL,
        resource_type=FINANCIAL,
        creator_field="recorded_by",
        defaults=_defaults,
    )


# ---------- Documents ----------
@router.post("/athlete/{athlete_id}/documents", status_code=201)
def upload_financial_document(
    athlete_id: str,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    document_type: str = Form("other"),
    actor: Actor = Depends(get_current_actor),
):
    chain = resolve_athlete(athlete_id)
    chain.enforce(actor, FINANCIAL, Action.CREATE)

    financial = get_or_create(db.financials(), chain, _defaults())
    meta = save_upload(file, "financial")
    document = line_items.new_item(
        {"title": title or meta["original_name"], "type": document_type, **meta},
        "uploaded_by",
        actor.id,
    )
    line_items.push_item(db.financials(), financial["_id"], "documents", document)
    return success(document=document)


@router.delete("/athlete/{athlete_id}/documents/{document_id}")
def delete_financial_document(athlete_id: str, document_id: str, actor: Actor = Depends(get_current_actor)):
    chain = resolve_athlete(athlete_id)
    financial = find_by_athlete(db.financials(), chain, LABEL)
    document = line_items.find_item(financial, "documents", document_id, "Document")
    chain.enforce(actor, FINANCIAL, Action.DELETE, item_creator_id=document.get("uploaded_by"))

    line_items.remove_item(db.financials(), financial, "documents", document_id, "Document")
    delete_upload(document.get("url"))
    return success("Document deleted")


# ---------- Insights ----------
@router.get("/athlete/{athlete_id}/analytics")
def financial_analytics_view(
    athlete_id: str,
    year: Optional[int] = Query(None, ge=1900, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    actor: Actor = Depends(get_current_actor),
):
    financial = _load(athlete_id, actor)
    return success(analytics=financial_analytics.summarize(financial, year=year, month=month))


@router.get("/athlete/{athlete_id}/tax-summary")
def tax_summary(
    athlete_id: str,
    year: Optional[int] = Query(None, ge=1900, le=2100),
    actor: Actor = Depends(get_current_actor),
):
    if year is None:
        raise HTTPException(status_code=400, detail="Tax year is required")
    financial = _load(athlete_id, actor)
    return success(tax_summary=financial_analytics.tax_summary(financial, year))


@router.get("/athlete/{athlete_id}/recommendations")
def financial_recommendations(athlete_id: str, actor: Actor = Depends(get_current_actor)):
    financial = _load(athlete_id, actor)
    return success(**financial_analytics.recommendations(financial, utcnow()))
