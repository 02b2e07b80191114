# athletehub/db/line_items.py
"""
Embedded line items (goals, income entries, rehab phases, ...).

Adds are a single atomic $push. Updates and removals rewrite the whole
array from the copy the caller read, so two concurrent edits of the same
parent can lose one of them (last writer wins).
"""
from typing import Optional, Tuple

from bson import ObjectId
from fastapi import HTTPException
from pymongo import ReturnDocument
from pymongo.collection import Collection

from athletehub.utils.serialize import to_object_id, utcnow


def new_item(data: dict, creator_field: Optional[str], actor_id: Optional[str]) -> dict:
    now = utcnow()
    item = {k: v for k, v in data.items() if v is not None}
    item["_id"] = ObjectId()
    if creator_field:
        item[creator_field] = actor_id
    item["created_at"] = now
    item["updated_at"] = now
    return item


def push_item(collection: Collection, parent_id: ObjectId, field: str, item: dict) -> dict:
    return collection.find_one_and_update(
        {"_id": parent_id},
        {"$push": {field: item}, "$set": {"updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )


def find_item(doc: dict, field: str, item_id: str, label: str) -> dict:
    oid = to_object_id(item_id, label.lower())
    for item in doc.get(field) or []:
        if item.get("_id") == oid:
            return item
    raise HTTPException(status_code=404, detail=f"{label} not found")


def replace_item(collection: Collection, doc: dict, field: str, item_id: str,
                 changes: dict, label: str) -> Tuple[dict, dict]:
    """Merge `changes` into one item; returns (updated parent, updated item)."""
    target = find_item(doc, field, item_id, label)
    updated = dict(target)
    updated.update({k: v for k, v in changes.items() if v is not None})
    updated["updated_at"] = utcnow()

    items = [updated if i.get("_id") == target["_id"] else i for i in doc.get(field) or []]
    parent = _set_items(collection, doc["_id"], field, items)
    return parent, updated


def remove_item(collection: Collection, doc: dict, field: str, item_id: str, label: str) -> dict:
    target = find_item(doc, field, item_id, label)
    items = [i for i in doc.get(field) or [] if i.get("_id") != target["_id"]]
    return _set_items(collection, doc["_id"], field, items)


def _set_items(collection: Collection, parent_id: ObjectId, field: str, items: list) -> dict:
    return collection.find_one_and_update(
        {"_id": parent_id},
        {"$set": {field: items, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
