import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel
from pymongo import ASCENDING, MongoClient

import config
from errors import DatabaseUnavailable

logger = logging.getLogger(__name__)

client: Optional[MongoClient] = None
db = None

if config.DATABASE_URL:
    client = MongoClient(config.DATABASE_URL)
    db = client[config.DATABASE_NAME]
else:
    logger.warning("DATABASE_URL not set, running without a database")


def get_db():
    if db is None:
        raise DatabaseUnavailable()
    return db


def create_document(collection_name: str, data: Union[BaseModel, Dict[str, Any]]) -> str:
    """Insert a document and return its id as a string."""
    if db is None:
        raise DatabaseUnavailable()
    if isinstance(data, BaseModel):
        data = data.model_dump()
    doc = dict(data)
    now = datetime.now(timezone.utc)
    doc["created_at"] = now
    doc["updated_at"] = now
    result = db[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[dict]:
    if db is None:
        raise DatabaseUnavailable()
    cursor = db[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def ensure_indexes() -> None:
    if db is None:
        return
    db["user"].create_index([("email", ASCENDING)], unique=True)
