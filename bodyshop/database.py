# bodyshop/database.py
from typing import Any, Dict, Optional

import certifi
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from bodyshop.core.config import Settings


def create_database(settings: Settings) -> AsyncIOMotorDatabase:
    if settings.MONGO_TLS:
        client = AsyncIOMotorClient(settings.MONGO_URL, tlsCAFile=certifi.where())
    else:
        client = AsyncIOMotorClient(settings.MONGO_URL)
    return client[settings.MONGO_DB_NAME]


def get_db(request: Request) -> AsyncIOMotorDatabase:
    return request.app.state.db


async def next_id(db, name: str) -> int:
    """Atomically hand out the next integer id for a collection."""
    counter = await db.counters.find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return counter["seq"]


def serialize(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = doc.pop("_id")
    return doc
