"""
Booking Operations

Orchestrates the booking lifecycle on top of the pure helpers in this
package and the data access functions in ``bodyshop.models``:

- create_booking: validate, resolve services, derive end time and price
- update_booking: reschedule / swap services / reassign staff
- cancel_booking: owner or staff initiated cancellation
- change_status: staff driven status transitions

Every function receives the acting user as the decoded token payload
(``{"id", "email", "role"}``) and raises ``bodyshop.core.errors`` types;
translation to HTTP happens at the request boundary.

The slot check and the insert are not wrapped in a transaction, and
creation does not re-check availability: two concurrent requests can both
book the same slot.
"""

import logging
from typing import Any, Dict, List, Optional

from bodyshop.core.errors import NotFound, PermissionDenied, ValidationError
from bodyshop.middleware.rbac import ADMIN, is_privileged
from bodyshop.models import bookings as booking_model
from bodyshop.models import services as service_model
from bodyshop.models import vehicles as vehicle_model
from bodyshop.scheduling import status as booking_status
from bodyshop.scheduling.durations import total_duration, total_price
from bodyshop.scheduling.timeutils import MINUTES_PER_DAY, add_minutes, normalize_time, parse_date, to_minutes
from bodyshop.utils.audit_logger import create_audit_log

logger = logging.getLogger(__name__)


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    """``start_time + duration``; a job may not run past midnight."""
    if to_minutes(start_time) + duration_minutes >= MINUTES_PER_DAY:
        raise ValidationError(
            f"A {duration_minutes} minute booking starting at {start_time} would end after midnight"
        )
    return add_minutes(start_time, duration_minutes)


async def resolve_services(db, service_ids: List[int]) -> List[Dict[str, Any]]:
    """Looks up every id, in request order; the first missing one is a NotFound."""
    if not service_ids:
        raise ValidationError("At least one service must be selected")

    found = await service_model.get_services_by_ids(db, service_ids)
    resolved = []
    for service_id in service_ids:
        service = found.get(service_id)
        if service is None:
            raise NotFound(f"Service with ID {service_id} not found")
        resolved.append(service)
    return resolved


async def get_booking_for(db, booking_id: int, user: dict, action: str = "view") -> Dict[str, Any]:
    booking = await booking_model.get_booking(db, booking_id)
    if not booking:
        raise NotFound("Booking not found")
    if not is_privileged(user) and booking["user_id"] != user["id"]:
        raise PermissionDenied(f"You do not have permission to {action} this booking")
    return booking


async def create_booking(db, user: dict, data, ip_address: Optional[str] = None) -> int:
    parse_date(data.scheduled_date)
    start_time = normalize_time(data.scheduled_time)

    vehicle = await vehicle_model.get_vehicle(db, data.vehicle_id)
    if not vehicle:
        raise NotFound("Vehicle not found")
    if vehicle["user_id"] != user["id"]:
        raise PermissionDenied("You do not have permission to book this vehicle")

    services = await resolve_services(db, data.service_ids)
    duration = total_duration(services)
    price = total_price(services)
    end_time = compute_end_time(start_time, duration)

    booking_id = await booking_model.create_booking(db, {
        "user_id": user["id"],
        "vehicle_id": data.vehicle_id,
        "booking_date": data.scheduled_date,
        "start_time": start_time,
        "end_time": end_time,
        "total_price": price,
        "notes": data.notes,
    })
    for service in services:
        await booking_model.add_service(db, booking_id, service["id"], service["price"])

    await create_audit_log(
        db,
        user_id=user["id"],
        action="insert",
        table_name="bookings",
        record_id=booking_id,
        new_values={
            "vehicle_id": data.vehicle_id,
            "booking_date": data.scheduled_date,
            "start_time": start_time,
            "end_time": end_time,
            "service_ids": data.service_ids,
            "notes": data.notes,
        },
        ip_address=ip_address,
    )
    logger.info("New booking created: %s by user %s", booking_id, user["id"])
    return booking_id


async def update_booking(db, booking_id: int, user: dict, data, ip_address: Optional[str] = None) -> Dict[str, Any]:
    booking = await get_booking_for(db, booking_id, user, "update")
    privileged = is_privileged(user)

    if not privileged and booking["status"] != booking_status.PENDING:
        raise PermissionDenied("You can only update pending bookings")
    if booking_status.is_terminal(booking["status"]):
        raise ValidationError(f"Cannot update a {booking['status']} booking")

    changes: Dict[str, Any] = {}
    if data.scheduled_date is not None:
        parse_date(data.scheduled_date)
        changes["booking_date"] = data.scheduled_date
    if data.scheduled_time is not None:
        changes["start_time"] = normalize_time(data.scheduled_time)
    if data.notes is not None:
        changes["notes"] = data.notes
    if data.staff_id is not None:
        if user["role"] != ADMIN:
            raise PermissionDenied("Only admins can assign staff")
        changes["staff_id"] = data.staff_id

    # an empty list leaves the booked services as they are
    new_services = None
    if data.service_ids:
        new_services = await resolve_services(db, data.service_ids)

    # durations and prices are read live from the catalog, not from the
    # line items stored when the booking was created
    if new_services is not None or "start_time" in changes:
        if new_services is None:
            items = await booking_model.get_booking_services(db, booking_id)
            duration_services = await resolve_services(db, [item["service_id"] for item in items])
        else:
            duration_services = new_services
        start_time = changes.get("start_time", booking["start_time"])
        changes["end_time"] = compute_end_time(start_time, total_duration(duration_services))

    await booking_model.update_booking(db, booking_id, changes)

    if new_services is not None:
        await booking_model.remove_services(db, booking_id)
        for service in new_services:
            await booking_model.add_service(db, booking_id, service["id"], service["price"])

    await create_audit_log(
        db,
        user_id=user["id"],
        action="update",
        table_name="bookings",
        record_id=booking_id,
        old_values={
            "booking_date": booking["booking_date"],
            "start_time": booking["start_time"],
            "end_time": booking["end_time"],
            "notes": booking.get("notes"),
            "staff_id": booking.get("staff_id"),
        },
        new_values=changes,
        ip_address=ip_address,
        metadata={"services_updated": new_services is not None, "admin_action": privileged},
    )
    logger.info("Booking updated: %s by user %s", booking_id, user["id"])
    return await booking_model.get_booking(db, booking_id)


async def cancel_booking(db, booking_id: int, user: dict, ip_address: Optional[str] = None) -> Dict[str, Any]:
    booking = await get_booking_for(db, booking_id, user, "cancel")
    privileged = is_privileged(user)

    if not privileged and booking["status"] != booking_status.PENDING:
        raise PermissionDenied("You can only cancel pending bookings")
    booking_status.ensure_transition(booking["status"], booking_status.CANCELLED)

    await booking_model.update_booking(db, booking_id, {"status": booking_status.CANCELLED})

    await create_audit_log(
        db,
        user_id=user["id"],
        action="update",
        table_name="bookings",
        record_id=booking_id,
        old_values={"status": booking["status"]},
        new_values={"status": booking_status.CANCELLED},
        ip_address=ip_address,
        metadata={"cancellation": True, "admin_action": privileged},
    )
    logger.info("Booking cancelled: %s by user %s", booking_id, user["id"])
    return await booking_model.get_booking(db, booking_id)


async def change_status(db, booking_id: int, user: dict, new_status: str, ip_address: Optional[str] = None) -> Dict[str, Any]:
    booking = await booking_model.get_booking(db, booking_id)
    if not booking:
        raise NotFound("Booking not found")

    booking_status.ensure_transition(booking["status"], new_status)
    await booking_model.update_booking(db, booking_id, {"status": new_status})

    await create_audit_log(
        db,
        user_id=user["id"],
        action="update",
        table_name="bookings",
        record_id=booking_id,
        old_values={"status": booking["status"]},
        new_values={"status": new_status},
        ip_address=ip_address,
        metadata={"admin_action": True},
    )
    logger.info("Booking %s status %s -> %s by user %s", booking_id, booking["status"], new_status, user["id"])
    return await booking_model.get_booking(db, booking_id)


async def delete_booking(db, booking_id: int, user: dict, ip_address: Optional[str] = None) -> None:
    booking = await booking_model.get_booking(db, booking_id)
    if not booking:
        raise NotFound("Booking not found")

    await booking_model.delete_booking(db, booking_id)

    await create_audit_log(
        db,
        user_id=user["id"],
        action="delete",
        table_name="bookings",
        record_id=booking_id,
        old_values={
            "user_id": booking["user_id"],
            "vehicle_id": booking["vehicle_id"],
            "booking_date": booking["booking_date"],
            "start_time": booking["start_time"],
            "end_time": booking["end_time"],
            "status": booking["status"],
        },
        ip_address=ip_address,
        metadata={"admin_action": True},
    )
    logger.info("Booking deleted: %s by admin %s", booking_id, user["id"])
