import logging
from typing import List, Optional

from pymongo import DESCENDING

import database
from database import create_document, get_documents
from schemas import Product as ProductSchema

logger = logging.getLogger(__name__)

NEW_COLLECTION_SIZE = 8
SHOWCASE_SIZE = 4


def _public(doc: dict) -> dict:
    doc.pop("_id", None)
    return doc


def list_all() -> List[dict]:
    return [_public(d) for d in get_documents("product")]


def list_new_collections() -> List[dict]:
    # positional: the last products in store order, not the newest by date
    return list_all()[-NEW_COLLECTION_SIZE:]


def list_related(category: str) -> List[dict]:
    return [_public(d) for d in get_documents("product", {"category": category}, limit=SHOWCASE_SIZE)]


def list_popular_in_women() -> List[dict]:
    return list_related("women")


def next_product_id() -> int:
    # max + 1 is racy: two concurrent inserts can read the same max
    last = database.get_db()["product"].find_one({}, {"id": 1}, sort=[("id", DESCENDING)])
    return int(last["id"]) + 1 if last else 1


def add_product(fields: dict) -> dict:
    product = ProductSchema(id=next_product_id(), **fields)
    create_document("product", product)
    logger.info("Added product %s (%s)", product.id, product.name)
    return product.model_dump()


def remove_product(product_id: int) -> Optional[str]:
    """Delete a product by id. Returns its name, or None when it did not exist."""
    doc = database.get_db()["product"].find_one_and_delete({"id": product_id})
    if doc is None:
        return None
    logger.info("Removed product %s", product_id)
    return doc.get("name")
