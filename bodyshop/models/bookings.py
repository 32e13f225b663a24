from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bodyshop.database import next_id, serialize

NEWEST_FIRST = [("booking_date", -1), ("start_time", -1)]


def _booking_filter(
    user_id: Optional[int] = None,
    status: Optional[str] = None,
    booking_date: Optional[str] = None,
    staff_id: Optional[int] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if user_id is not None:
        query["user_id"] = user_id
    if status:
        query["status"] = status
    if booking_date:
        query["booking_date"] = booking_date
    if staff_id is not None:
        query["staff_id"] = staff_id
    return query


async def create_booking(db, data: Dict[str, Any]) -> int:
    now = datetime.now(timezone.utc)
    booking_id = await next_id(db, "bookings")
    await db.bookings.insert_one({
        "_id": booking_id,
        "status": "pending",
        "staff_id": None,
        "total_price": 0.0,
        **data,
        "created_at": now,
        "updated_at": now,
    })
    return booking_id


async def get_booking(db, booking_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.bookings.find_one({"_id": booking_id}))


async def find_bookings(db, limit: int = 10, offset: int = 0, **filters) -> List[Dict[str, Any]]:
    cursor = db.bookings.find(
        _booking_filter(**filters), sort=NEWEST_FIRST, skip=offset, limit=limit
    )
    return [serialize(doc) for doc in await cursor.to_list(length=None)]


async def count_bookings(db, **filters) -> int:
    return await db.bookings.count_documents(_booking_filter(**filters))


async def get_active_bookings_for_date(db, booking_date: str) -> List[Dict[str, Any]]:
    cursor = db.bookings.find(
        {"booking_date": booking_date, "status": {"$ne": "cancelled"}},
        {"start_time": 1, "end_time": 1, "status": 1},
    )
    return await cursor.to_list(length=None)


async def count_bookings_for_vehicle(db, vehicle_id: int) -> int:
    return await db.bookings.count_documents({"vehicle_id": vehicle_id})


async def update_booking(db, booking_id: int, changes: Dict[str, Any]) -> bool:
    if not changes:
        return False
    result = await db.bookings.update_one(
        {"_id": booking_id},
        {"$set": {**changes, "updated_at": datetime.now(timezone.utc)}},
    )
    return result.matched_count > 0


async def delete_booking(db, booking_id: int) -> bool:
    await db.booking_items.delete_many({"booking_id": booking_id})
    result = await db.bookings.delete_one({"_id": booking_id})
    return result.deleted_count > 0


# -----------------------------
# Line items
# -----------------------------
async def add_service(db, booking_id: int, service_id: int, price: float, quantity: int = 1) -> int:
    item_id = await next_id(db, "booking_items")
    await db.booking_items.insert_one({
        "_id": item_id,
        "booking_id": booking_id,
        "service_id": service_id,
        "quantity": quantity,
        "price": price,
    })
    await update_booking_total(db, booking_id)
    return item_id


async def remove_services(db, booking_id: int) -> int:
    result = await db.booking_items.delete_many({"booking_id": booking_id})
    await update_booking_total(db, booking_id)
    return result.deleted_count


async def get_booking_services(db, booking_id: int) -> List[Dict[str, Any]]:
    items = await db.booking_items.find({"booking_id": booking_id}, sort=[("_id", 1)]).to_list(length=None)
    return [serialize(item) for item in items]


async def count_items_for_service(db, service_id: int) -> int:
    return await db.booking_items.count_documents({"service_id": service_id})


async def update_booking_total(db, booking_id: int) -> float:
    items = await db.booking_items.find({"booking_id": booking_id}).to_list(length=None)
    total = float(sum(item["price"] * item["quantity"] for item in items))
    await db.bookings.update_one({"_id": booking_id}, {"$set": {"total_price": total}})
    return total


# -----------------------------
# Statistics
# -----------------------------
async def get_statistics(db, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
    date_range: Dict[str, str] = {}
    if start_date:
        date_range["$gte"] = start_date
    if end_date:
        date_range["$lte"] = end_date
    match: Dict[str, Any] = {"booking_date": date_range} if date_range else {}

    by_status = {}
    for status in ("pending", "confirmed", "in_progress", "completed", "cancelled"):
        by_status[status] = await db.bookings.count_documents({**match, "status": status})

    revenue_rows = await db.bookings.aggregate([
        {"$match": match},
        {"$group": {"_id": None, "total": {"$sum": "$total_price"}, "average": {"$avg": "$total_price"}}},
    ]).to_list(length=None)
    revenue = revenue_rows[0] if revenue_rows else {}

    date_rows = await db.bookings.aggregate([
        {"$match": match},
        {"$group": {"_id": "$booking_date", "count": {"$sum": 1}}},
        {"$sort": {"_id": -1}},
        {"$limit": 30},
    ]).to_list(length=None)

    return {
        "total": await db.bookings.count_documents(match),
        "by_status": by_status,
        "by_date": [{"date": row["_id"], "count": row["count"]} for row in date_rows],
        "revenue": {
            "total": float(revenue.get("total") or 0),
            "average_per_booking": float(revenue.get("average") or 0),
        },
    }
