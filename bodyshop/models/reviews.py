from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bodyshop.database import next_id, serialize

APPROVED = "approved"
NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


def _review_filter(
    user_id: Optional[int] = None,
    service_id: Optional[int] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if user_id is not None:
        query["user_id"] = user_id
    if service_id is not None:
        query["service_id"] = service_id
    if status:
        query["status"] = status
    return query


async def create_review(db, data: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    review_id = await next_id(db, "reviews")
    doc = {"_id": review_id, "status": "pending", **data, "created_at": now, "updated_at": now}
    await db.reviews.insert_one(doc)
    return serialize(doc)


async def get_review(db, review_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.reviews.find_one({"_id": review_id}))


async def find_reviews(db, limit: int = 10, offset: int = 0, **filters) -> List[Dict[str, Any]]:
    docs = await db.reviews.find(
        _review_filter(**filters), sort=NEWEST_FIRST, skip=offset, limit=limit
    ).to_list(length=None)
    return [serialize(doc) for doc in docs]


async def count_reviews(db, **filters) -> int:
    return await db.reviews.count_documents(_review_filter(**filters))


async def update_review(db, review_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    await db.reviews.update_one(
        {"_id": review_id},
        {"$set": {**changes, "updated_at": datetime.now(timezone.utc)}},
    )
    return await get_review(db, review_id)


async def delete_review(db, review_id: int) -> bool:
    result = await db.reviews.delete_one({"_id": review_id})
    return result.deleted_count > 0
