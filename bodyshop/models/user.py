# bodyshop/models/user.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bodyshop.database import next_id, serialize


async def create_user(db, data: Dict[str, Any]) -> int:
    user_id = await next_id(db, "users")
    await db.users.insert_one({"_id": user_id, **data, "created_at": datetime.now(timezone.utc)})
    return user_id


async def get_user_by_email(db, email: str) -> Optional[Dict[str, Any]]:
    return serialize(await db.users.find_one({"email": email}))


async def get_user(db, user_id: int) -> Optional[Dict[str, Any]]:
    return serialize(await db.users.find_one({"_id": user_id}))


async def set_user_role(db, user_id: int, role: str) -> int:
    result = await db.users.update_one({"_id": user_id}, {"$set": {"role": role}})
    return result.matched_count
