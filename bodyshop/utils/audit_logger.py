# bodyshop/utils/audit_logger.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request

from bodyshop.database import next_id, serialize

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


async def create_audit_log(
    db,
    *,
    user_id: int,
    action: str,
    table_name: str,
    record_id: Optional[int] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Optional[int]:
    """
    Records who changed what. A failure here is logged and swallowed so it
    never changes the outcome of the operation being audited.
    """
    try:
        log_id = await next_id(db, "audit_logs")
        await db.audit_logs.insert_one({
            "_id": log_id,
            "user_id": user_id,
            "action": action,
            "table_name": table_name,
            "record_id": record_id,
            "old_values": old_values,
            "new_values": new_values,
            "ip_address": ip_address,
            "metadata": metadata,
            "created_at": datetime.now(timezone.utc),
        })
    except Exception:
        logger.exception("Error creating audit log for %s on %s", action, table_name)
        return None

    logger.info("Audit log created for %s on %s", action, table_name)
    return log_id


def _audit_filter(
    table_name: Optional[str] = None,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    record_id: Optional[int] = None,
) -> Dict[str, Any]:
    query: Dict[str, Any] = {}
    if table_name:
        query["table_name"] = table_name
    if action:
        query["action"] = action
    if user_id is not None:
        query["user_id"] = user_id
    if record_id is not None:
        query["record_id"] = record_id
    return query


async def get_audit_logs(db, limit: int = 100, offset: int = 0, **filters) -> List[Dict[str, Any]]:
    docs = await db.audit_logs.find(
        _audit_filter(**filters), sort=[("created_at", -1), ("_id", -1)], skip=offset, limit=limit
    ).to_list(length=None)
    return [serialize(doc) for doc in docs]


async def count_audit_logs(db, **filters) -> int:
    return await db.audit_logs.count_documents(_audit_filter(**filters))
