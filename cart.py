import logging
from datetime import datetime, timezone
from typing import Dict

from pymongo import ReturnDocument

import database
from auth import user_object_id
from errors import UnknownUser

logger = logging.getLogger(__name__)


def _field(item_id) -> str:
    return f"cartData.{item_id}"


def _users():
    return database.get_db()["user"]


def _require_user(oid) -> None:
    if _users().count_documents({"_id": oid}, limit=1) == 0:
        raise UnknownUser()


def add_to_cart(user_id: str, item_id: int) -> int:
    """Increment the quantity for item_id and return the new quantity."""
    oid = user_object_id(user_id)
    doc = _users().find_one_and_update(
        {"_id": oid},
        {"$inc": {_field(item_id): 1}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        projection={"cartData": 1},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        raise UnknownUser()
    return int(doc["cartData"][str(item_id)])


def remove_from_cart(user_id: str, item_id: int) -> int:
    """Decrement the quantity for item_id, never below zero."""
    oid = user_object_id(user_id)
    doc = _users().find_one_and_update(
        {"_id": oid, _field(item_id): {"$gt": 0}},
        {"$inc": {_field(item_id): -1}, "$set": {"updated_at": datetime.now(timezone.utc)}},
        projection={"cartData": 1},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        # either nothing to remove or no such user
        _require_user(oid)
        return 0
    return int(doc["cartData"][str(item_id)])


def get_cart(user_id: str) -> Dict[str, int]:
    doc = _users().find_one({"_id": user_object_id(user_id)}, {"cartData": 1})
    if doc is None:
        raise UnknownUser()
    return {k: int(v) for k, v in (doc.get("cartData") or {}).items()}


def set_quantity(user_id: str, item_id: int, quantity: int) -> None:
    if quantity < 0:
        raise ValueError("quantity must not be negative")
    now = datetime.now(timezone.utc)
    if quantity == 0:
        update = {"$unset": {_field(item_id): ""}, "$set": {"updated_at": now}}
    else:
        update = {"$set": {_field(item_id): quantity, "updated_at": now}}
    res = _users().update_one({"_id": user_object_id(user_id)}, update)
    if res.matched_count == 0:
        raise UnknownUser()


def clear_cart(user_id: str) -> None:
    res = _users().update_one(
        {"_id": user_object_id(user_id)},
        {"$set": {"cartData": {}, "updated_at": datetime.now(timezone.utc)}},
    )
    if res.matched_count == 0:
        raise UnknownUser()
    logger.info("Cleared cart for user %s", user_id)
