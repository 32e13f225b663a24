from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bodyshop.database import next_id, serialize


async def create_vehicle(db, data: Dict[str, Any]) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    vehicle_id = await next_id(db, "vehicles")
    doc = {"_id": vehicle_id, **data, "created_at": now, "updated_at": now}
    await db.vehicles.insert_one(doc)
    return serialize(doc)


async def get_vehicle(db, vehicle_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.vehicles.find_one({"_id": vehicle_id}))


async def get_user_vehicles(db, user_id: int) -> List[Dict[str, Any]]:
    vehicles = await db.vehicles.find({"user_id": user_id}, sort=[("created_at", -1)]).to_list(length=None)
    return [serialize(v) for v in vehicles]


async def get_all_vehicles(db, limit: int = 10, offset: int = 0) -> List[Dict[str, Any]]:
    vehicles = await db.vehicles.find({}, sort=[("created_at", -1)], skip=offset, limit=limit).to_list(length=None)
    return [serialize(v) for v in vehicles]


async def count_vehicles(db) -> int:
    return await db.vehicles.count_documents({})


async def update_vehicle(db, vehicle_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if changes:
        await db.vehicles.update_one(
            {"_id": vehicle_id},
            {"$set": {**changes, "updated_at": datetime.now(timezone.utc)}},
        )
    return await get_vehicle(db, vehicle_id)


async def delete_vehicle(db, vehicle_id: int) -> bool:
    result = await db.vehicles.delete_one({"_id": vehicle_id})
    return result.deleted_count > 0
