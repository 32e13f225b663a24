from typing import Optional

from fastapi import APIRouter, Depends, Request, status

from bodyshop.core.errors import Conflict, NotFound, ValidationError
from bodyshop.database import get_db
from bodyshop.middleware.rbac import is_admin
from bodyshop.models import bookings as booking_model
from bodyshop.models import services as service_model
from bodyshop.schemas.services import (
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    ServiceCreate,
    ServiceOut,
    ServiceUpdate,
)
from bodyshop.utils.audit_logger import client_ip, create_audit_log
from bodyshop.utils.pagination import Pagination, get_pagination, paginated_response

service_router = APIRouter(tags=["Services"])


async def _ensure_category(db, category_id: Optional[int]):
    if category_id is not None and not await service_model.get_category(db, category_id):
        raise NotFound(f"Service category with ID {category_id} not found")


# -----------------------------
# Categories
# -----------------------------
@service_router.get("/categories")
async def list_categories(db=Depends(get_db)):
    categories = await service_model.get_categories(db)
    return {"categories": [CategoryOut(**c) for c in categories]}


@service_router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, request: Request, admin=Depends(is_admin), db=Depends(get_db)):
    if await service_model.get_category_by_name(db, data.name):
        raise Conflict("Service category with this name already exists")

    category = await service_model.create_category(db, data.model_dump())
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="insert",
        table_name="service_categories",
        record_id=category["id"],
        new_values=data.model_dump(),
        ip_address=client_ip(request),
    )
    return {"message": "Service category created successfully", "category": CategoryOut(**category)}


@service_router.put("/categories/{category_id}")
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    request: Request,
    admin=Depends(is_admin),
    db=Depends(get_db),
):
    original = await service_model.get_category(db, category_id)
    if not original:
        raise NotFound("Service category not found")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("No fields to update")
    if "name" in changes and changes["name"] != original["name"]:
        if await service_model.get_category_by_name(db, changes["name"]):
            raise Conflict("Service category with this name already exists")

    category = await service_model.update_category(db, category_id, changes)
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="update",
        table_name="service_categories",
        record_id=category_id,
        old_values={key: original.get(key) for key in changes},
        new_values=changes,
        ip_address=client_ip(request),
    )
    return {"message": "Service category updated successfully", "category": CategoryOut(**category)}


@service_router.delete("/categories/{category_id}")
async def delete_category(category_id: int, request: Request, admin=Depends(is_admin), db=Depends(get_db)):
    category = await service_model.get_category(db, category_id)
    if not category:
        raise NotFound("Service category not found")
    if await service_model.count_services_in_category(db, category_id):
        raise Conflict("Service category is linked to existing services")

    await service_model.delete_category(db, category_id)
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="delete",
        table_name="service_categories",
        record_id=category_id,
        old_values={"name": category["name"], "description": category["description"]},
        ip_address=client_ip(request),
    )
    return {"message": "Service category deleted successfully"}


# -----------------------------
# Services
# -----------------------------
@service_router.get("")
async def list_services(
    category_id: Optional[int] = None,
    pagination: Pagination = Depends(get_pagination),
    db=Depends(get_db),
):
    services = await service_model.find_services(
        db, pagination.limit, pagination.offset, category_id=category_id
    )
    total = await service_model.count_services(db, category_id=category_id)
    return paginated_response("services", [ServiceOut(**s) for s in services], pagination, total)


@service_router.get("/{service_id}", response_model=ServiceOut)
async def get_service(service_id: int, db=Depends(get_db)):
    service = await service_model.get_service(db, service_id)
    if not service:
        raise NotFound("Service not found")
    return service


# Admin: catalog maintenance
@service_router.post("", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
async def create_service(data: ServiceCreate, request: Request, admin=Depends(is_admin), db=Depends(get_db)):
    await _ensure_category(db, data.category_id)

    service = await service_model.create_service(db, data.model_dump())
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="insert",
        table_name="services",
        record_id=service["id"],
        new_values=data.model_dump(),
        ip_address=client_ip(request),
    )
    return service


@service_router.put("/{service_id}", response_model=ServiceOut)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    request: Request,
    admin=Depends(is_admin),
    db=Depends(get_db),
):
    original = await service_model.get_service(db, service_id)
    if not original:
        raise NotFound("Service not found")

    changes = data.model_dump(exclude_unset=True)
    await _ensure_category(db, changes.get("category_id"))

    service = await service_model.update_service(db, service_id, changes)
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="update",
        table_name="services",
        record_id=service_id,
        old_values={key: original.get(key) for key in changes},
        new_values=changes,
        ip_address=client_ip(request),
    )
    return service


@service_router.delete("/{service_id}")
async def delete_service(service_id: int, request: Request, admin=Depends(is_admin), db=Depends(get_db)):
    service = await service_model.get_service(db, service_id)
    if not service:
        raise NotFound("Service not found")
    if await booking_model.count_items_for_service(db, service_id):
        raise Conflict("Service is used by existing bookings; deactivate it instead")

    await service_model.delete_service(db, service_id)
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="delete",
        table_name="services",
        record_id=service_id,
        old_values={"name": service["name"], "price": service["price"]},
        ip_address=client_ip(request),
    )
    return {"message": "Service deleted successfully"}
