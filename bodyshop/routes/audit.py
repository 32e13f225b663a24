from typing import Optional

from fastapi import APIRouter, Depends

from bodyshop.database import get_db
from bodyshop.middleware.rbac import is_admin
from bodyshop.utils.audit_logger import count_audit_logs, get_audit_logs
from bodyshop.utils.pagination import Pagination, get_pagination, paginated_response

audit_router = APIRouter(tags=["Audit"])


@audit_router.get("")
async def list_audit_logs(
    table_name: Optional[str] = None,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    record_id: Optional[int] = None,
    pagination: Pagination = Depends(get_pagination),
    admin=Depends(is_admin),
    db=Depends(get_db),
):
    filters = {"table_name": table_name, "action": action, "user_id": user_id, "record_id": record_id}
    logs = await get_audit_logs(db, pagination.limit, pagination.offset, **filters)
    total = await count_audit_logs(db, **filters)
    return paginated_response("audit_logs", logs, pagination, total)
