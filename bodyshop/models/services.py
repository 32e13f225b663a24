from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bodyshop.database import next_id, serialize


def _service_filter(category_id: Optional[int] = None, active_only: bool = True) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if active_only:
        query["is_active"] = True
    if category_id is not None:
        query["category_id"] = category_id
    return query


async def create_service(db, data: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    service_id = await next_id(db, "services")
    doc = {"_id": service_id, **data, "created_at": now, "updated_at": now}
    await db.services.insert_one(doc)
    return serialize(doc)


async def get_service(db, service_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.services.find_one({"_id": service_id}))


async def get_services_by_ids(db, service_ids: List[int]) -> Dict[int, Dict[str, Any]]:
    docs = await db.services.find({"_id": {"$in": list(service_ids)}}).to_list(length=None)
    return {doc["_id"]: serialize(doc) for doc in docs}


async def find_services(db, limit: int = 10, offset: int = 0, **filters) -> List[Dict[str, Any]]:
    docs = await db.services.find(
        _service_filter(**filters), sort=[("name", 1)], skip=offset, limit=limit
    ).to_list(length=None)
    return [serialize(doc) for doc in docs]


async def count_services(db, **filters) -> int:
    return await db.services.count_documents(_service_filter(**filters))


async def update_service(db, service_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if changes:
        await db.services.update_one(
            {"_id": service_id},
            {"$set": {**changes, "updated_at": datetime.now(timezone.utc)}},
        )
    return await get_service(db, service_id)


async def delete_service(db, service_id: int) -> bool:
    result = await db.services.delete_one({"_id": service_id})
    return result.deleted_count > 0


# -----------------------------
# Categories
# -----------------------------
async def create_category(db, data: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    category_id = await next_id(db, "service_categories")
    doc = {"_id": category_id, **data, "created_at": now, "updated_at": now}
    await db.service_categories.insert_one(doc)
    return serialize(doc)


async def get_category(db, category_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.service_categories.find_one({"_id": category_id}))


async def get_category_by_name(db, name: str) -> Optional[Dict[str, Any]]:
    return serialize(await db.service_categories.find_one({"name": name}))


async def get_categories(db) -> List[Dict[str, Any]]:
    docs = await db.service_categories.find({}, sort=[("name", 1)]).to_list(length=None)
    return [serialize(doc) for doc in docs]


async def update_category(db, category_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    await db.service_categories.update_one(
        {"_id": category_id},
        {"$set": {**changes, "updated_at": datetime.now(timezone.utc)}},
    )
    return await get_category(db, category_id)


async def delete_category(db, category_id: int) -> bool:
    result = await db.service_categories.delete_one({"_id": category_id})
    return result.deleted_count > 0


async def count_services_in_category(db, category_id: int) -> int:
    return await db.services.count_documents({"category_id": category_id})
