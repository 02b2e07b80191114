# athletehub/security/ownership.py
"""
Ownership chain resolution: record -> athlete -> owning user.

Every route that touches athlete data goes through here, so "is this actor
the subject of the record" is answered in exactly one place, and a missing
record or athlete is a 404 before any policy is evaluated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.collection import Collection

from athletehub import db
from athletehub.authz import enforce
from athletehub.security.policy import Action, ResourceType
from athletehub.utils.audit import Actor
from athletehub.utils.serialize import to_object_id, utcnow


@dataclass(frozen=True)
class OwnerChain:
    athlete_id: ObjectId
    owner_user_id: str
    coaches: Tuple[str, ...] = ()
    athlete: dict = field(default_factory=dict, compare=False, repr=False)

    def enforce(self, actor: Actor, resource_type: ResourceType, action: Action,
                item_creator_id: Optional[str] = None) -> None:
        enforce(actor, self.owner_user_id, resource_type, action, self.coaches, item_creator_id)


def chain_for(athlete: dict) -> OwnerChain:
    return OwnerChain(
        athlete_id=athlete["_id"],
        owner_user_id=str(athlete.get("user")),
        coaches=tuple(str(c) for c in athlete.get("coaches") or ()),
        athlete=athlete,
    )


def resolve_athlete(athlete_id) -> OwnerChain:
    oid = athlete_id if isinstance(athlete_id, ObjectId) else to_object_id(athlete_id, "athlete")
    athlete = db.athletes().find_one({"_id": oid})
    if not athlete:
        raise HTTPException(status_code=404, detail="Athlete not found")
    return chain_for(athlete)


def resolve_record(collection: Collection, record_id: str, label: str) -> Tuple[dict, OwnerChain]:
    """Load a record by id together with the chain of the athlete it belongs to."""
    record = collection.find_one({"_id": to_object_id(record_id, label.lower())})
    if not record:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return record, resolve_athlete(record["athlete"])


def find_by_athlete(collection: Collection, chain: OwnerChain, label: str) -> dict:
    doc = collection.find_one({"athlete": chain.athlete_id})
    if not doc:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return doc


def get_or_create(collection: Collection, chain: OwnerChain, defaults: Optional[dict] = None) -> dict:
    """
    Idempotently materialize the single per-athlete document (career, financial)
    so line items always have a parent to attach to.
    """
    now = utcnow()
    on_insert = {"athlete": chain.athlete_id, "created_at": now}
    on_insert.update(defaults or {})
    return collection.find_one_and_update(
        {"athlete": chain.athlete_id},
        {"$setOnInsert": on_insert},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
