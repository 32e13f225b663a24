import logging

from fastapi import APIRouter, Depends, Request, status

from bodyshop.core.errors import Conflict, NotFound, PermissionDenied
from bodyshop.database import get_db
from bodyshop.middleware.rbac import ADMIN, get_current_user, is_privileged, is_staff
from bodyshop.models import bookings as booking_model
from bodyshop.models import vehicles as vehicle_model
from bodyshop.schemas.vehicles import VehicleCreate, VehicleOut, VehicleUpdate
from bodyshop.utils.audit_logger import client_ip, create_audit_log
from bodyshop.utils.pagination import Pagination, get_pagination, paginated_response

logger = logging.getLogger(__name__)

vehicle_router = APIRouter(tags=["Vehicles"])


async def _owned_vehicle(db, vehicle_id: int, user: dict, allow_staff: bool) -> dict:
    vehicle = await vehicle_model.get_vehicle(db, vehicle_id)
    if not vehicle:
        raise NotFound("Vehicle not found")
    allowed = is_privileged(user) if allow_staff else user["role"] == ADMIN
    if vehicle["user_id"] != user["id"] and not allowed:
        raise PermissionDenied("You do not have permission to access this vehicle")
    return vehicle


@vehicle_router.post("", status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    data: VehicleCreate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    values = {**data.model_dump(), "user_id": user["id"]}
    vehicle = await vehicle_model.create_vehicle(db, values)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="insert",
        table_name="vehicles",
        record_id=vehicle["id"],
        new_values=values,
        ip_address=client_ip(request),
    )
    return {"message": "Vehicle created successfully", "vehicle": VehicleOut(**vehicle)}


@vehicle_router.get("/my-vehicles")
async def get_my_vehicles(user=Depends(get_current_user), db=Depends(get_db)):
    vehicles = await vehicle_model.get_user_vehicles(db, user["id"])
    return {"vehicles": [VehicleOut(**v) for v in vehicles]}


@vehicle_router.get("")
async def get_all_vehicles(
    pagination: Pagination = Depends(get_pagination),
    staff=Depends(is_staff),
    db=Depends(get_db),
):
    vehicles = await vehicle_model.get_all_vehicles(db, pagination.limit, pagination.offset)
    total = await vehicle_model.count_vehicles(db)
    return paginated_response("vehicles", [VehicleOut(**v) for v in vehicles], pagination, total)


@vehicle_router.get("/{vehicle_id}", response_model=VehicleOut)
async def get_vehicle(vehicle_id: int, user=Depends(get_current_user), db=Depends(get_db)):
    return await _owned_vehicle(db, vehicle_id, user, allow_staff=True)


@vehicle_router.put("/{vehicle_id}")
async def update_vehicle(
    vehicle_id: int,
    data: VehicleUpdate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    original = await _owned_vehicle(db, vehicle_id, user, allow_staff=False)
    changes = data.model_dump(exclude_unset=True)
    vehicle = await vehicle_model.update_vehicle(db, vehicle_id, changes)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="update",
        table_name="vehicles",
        record_id=vehicle_id,
        old_values={key: original.get(key) for key in changes},
        new_values=changes,
        ip_address=client_ip(request),
    )
    return {"message": "Vehicle updated successfully", "vehicle": VehicleOut(**vehicle)}


@vehicle_router.delete("/{vehicle_id}")
async def delete_vehicle(
    vehicle_id: int,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    vehicle = await _owned_vehicle(db, vehicle_id, user, allow_staff=False)

    if await booking_model.count_bookings_for_vehicle(db, vehicle_id):
        raise Conflict("Cannot delete a vehicle that has bookings")

    await vehicle_model.delete_vehicle(db, vehicle_id)
    await create_audit_log(
        db,
        user_id=user["id"],
        action="delete",
        table_name="vehicles",
        record_id=vehicle_id,
        old_values={k: vehicle.get(k) for k in ("user_id", "make", "model", "license_plate")},
        ip_address=client_ip(request),
    )
    logger.info("Vehicle deleted: %s by user %s", vehicle_id, user["id"])
    return {"message": "Vehicle deleted successfully"}
