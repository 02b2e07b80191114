# athletehub/routes/items.py
"""
Add / update / delete routes for the embedded lists of the per-athlete
career and financial documents.

Adding materializes the parent document first; updating or deleting needs
it to exist already.
"""
from typing import Callable, Type

from fastapi import APIRouter, Depends
from pymongo.collection import Collection

from athletehub.auth import get_current_actor
from athletehub.db import line_items
from athletehub.schemas.common import Payload
from athletehub.security.ownership import find_by_athlete, get_or_create, resolve_athlete
from athletehub.security.policy import Action, ResourceType
from athletehub.utils.audit import Actor
from athletehub.utils.logger import log_activity
from athletehub.utils.responses import success


def mount_line_items(
    router: APIRouter,
    *,
    path: str,
    field: str,
    key: str,
    label: str,
    create_model: Type[Payload],
    update_model: Type[Payload],
    collection: Callable[[], Collection],
    parent_label: str,
    resource_type: ResourceType,
    creator_field: str,
    defaults: Callable[[], dict] = dict,
) -> None:
    base = "/athlete/{athlete_id}/" + path

    def add(athlete_id: str, body: create_model, actor: Actor = Depends(get_current_actor)):
        chain = resolve_athlete(athlete_id)
        chain.enforce(actor, resource_type, Action.CREATE)

        parent = get_or_create(collection(), chain, defaults())
        item = line_items.new_item(body.model_dump(mode="python"), creator_field, actor.id)
        line_items.push_item(collection(), parent["_id"], field, item)

        log_activity(user_id=actor.id, action=f"add_{key}", metadata={"athlete_id": athlete_id})
        return success(**{key: item})

    def update(athlete_id: str, item_id: str, body: update_model, actor: Actor = Depends(get_current_actor)):
        chain = resolve_athlete(athlete_id)
        parent = find_by_athlete(collection(), chain, parent_label)
        current = line_items.find_item(parent, field, item_id, label)
        chain.enforce(actor, resource_type, Action.UPDATE, item_creator_id=current.get(creator_field))

        _, item = line_items.replace_item(collection(), parent, field, item_id, body.changes(), label)
        log_activity(user_id=actor.id, action=f"update_{key}", metadata={"athlete_id": athlete_id})
        return success(**{key: item})

    def delete(athlete_id: str, item_id: str, actor: Actor = Depends(get_current_actor)):
        chain = resolve_athlete(athlete_id)
        parent = find_by_athlete(collection(), chain, parent_label)
        current = line_items.find_item(parent, field, item_id, label)
        chain.enforce(actor, resource_type, Action.DELETE, item_creator_id=current.get(creator_field))

        line_items.remove_item(collection(), parent, field, item_id, label)
        log_activity(user_id=actor.id, action=f"delete_{key}", metadata={"athlete_id": athlete_id})
        return success(f"{label} deleted")

    router.add_api_route(base, add, methods=["POST"], status_code=201, name=f"add_{key}")
    router.add_api_route(base + "/{item_id}", update, methods=["PUT"], name=f"update_{key}")
    router.add_api_route(base + "/{item_id}", delete, methods=["DELETE"], name=f"delete_{key}")
