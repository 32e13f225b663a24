from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from bodyshop.core.config import Settings, get_app_settings
from bodyshop.core.errors import ValidationError
from bodyshop.database import get_db
from bodyshop.middleware.rbac import get_current_user, is_admin, is_staff
from bodyshop.models import bookings as booking_model
from bodyshop.models.user import get_user
from bodyshop.scheduling import booking_flow
from bodyshop.scheduling.slots import available_slots, available_slots_for_duration
from bodyshop.scheduling.timeutils import parse_date
from bodyshop.schemas.bookings import (
    AvailableSlots,
    BookingCreate,
    BookingCreated,
    BookingDetail,
    BookingOut,
    BookingStatus,
    BookingStatusUpdate,
    BookingUpdate,
)
from bodyshop.schemas.dashboard_schema import BookingStatistics
from bodyshop.utils.audit_logger import client_ip
from bodyshop.utils.email_utils import send_booking_status_email
from bodyshop.utils.pagination import Pagination, get_pagination, paginated_response

booking_router = APIRouter(tags=["Bookings"])


# Public: free start times for a day
@booking_router.get("/available-slots/{date}", response_model=AvailableSlots)
async def get_available_slots(
    date: str,
    duration_minutes: Optional[int] = Query(None, gt=0),
    db=Depends(get_db),
):
    parse_date(date)
    bookings = await booking_model.get_active_bookings_for_date(db, date)

    if duration_minutes is None:
        return {"date": date, "available_slots": available_slots(bookings), "mode": "point"}
    return {
        "date": date,
        "available_slots": available_slots_for_duration(bookings, duration_minutes),
        "mode": "overlap",
    }


# Create booking
@booking_router.post("", response_model=BookingCreated, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    booking_id = await booking_flow.create_booking(db, user, data, client_ip(request))
    return {"message": "Booking created successfully", "booking_id": booking_id}


# Get current user's bookings
@booking_router.get("/my-bookings")
async def get_my_bookings(
    status: Optional[BookingStatus] = None,
    pagination: Pagination = Depends(get_pagination),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    bookings = await booking_model.find_bookings(
        db, pagination.limit, pagination.offset, user_id=user["id"], status=status
    )
    total = await booking_model.count_bookings(db, user_id=user["id"], status=status)
    return paginated_response(
        "bookings", [BookingOut(**b) for b in bookings], pagination, total
    )


# Staff: get all bookings
@booking_router.get("")
async def get_all_bookings(
    status: Optional[BookingStatus] = None,
    date: Optional[str] = None,
    staff_id: Optional[int] = None,
    pagination: Pagination = Depends(get_pagination),
    staff=Depends(is_staff),
    db=Depends(get_db),
):
    if date:
        parse_date(date)
    filters = {"status": status, "booking_date": date, "staff_id": staff_id}
    bookings = await booking_model.find_bookings(db, pagination.limit, pagination.offset, **filters)
    total = await booking_model.count_bookings(db, **filters)
    return paginated_response(
        "bookings", [BookingOut(**b) for b in bookings], pagination, total
    )


# Staff: booking statistics
@booking_router.get("/stats", response_model=BookingStatistics)
async def get_booking_stats(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    staff=Depends(is_staff),
    db=Depends(get_db),
):
    for value in (start_date, end_date):
        if value:
            parse_date(value)
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return await booking_model.get_statistics(db, start_date, end_date)


@booking_router.get("/{booking_id}", response_model=BookingDetail)
async def get_booking(booking_id: int, user=Depends(get_current_user), db=Depends(get_db)):
    booking = await booking_flow.get_booking_for(db, booking_id, user)
    booking["services"] = await booking_model.get_booking_services(db, booking_id)
    return booking


@booking_router.put("/{booking_id}", response_model=BookingOut)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    return await booking_flow.update_booking(db, booking_id, user, data, client_ip(request))


@booking_router.put("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: int,
    request: Request,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    await booking_flow.cancel_booking(db, booking_id, user, client_ip(request))
    return {"message": "Booking cancelled successfully"}


# Staff: update booking status
@booking_router.put("/{booking_id}/status")
async def update_status(
    booking_id: int,
    data: BookingStatusUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    staff=Depends(is_staff),
    db=Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    booking = await booking_flow.change_status(db, booking_id, staff, data.status, client_ip(request))

    # Let the owner know, without holding up the response
    owner = await get_user(db, booking["user_id"])
    if owner and settings.SMTP_SERVER:
        background_tasks.add_task(send_booking_status_email, settings, owner["email"], booking)

    return {"message": "Booking status updated", "status": booking["status"]}


# Admin: delete booking
@booking_router.delete("/{booking_id}")
async def delete_booking(
    booking_id: int,
    request: Request,
    admin=Depends(is_admin),
    db=Depends(get_db),
):
    await booking_flow.delete_booking(db, booking_id, admin, client_ip(request))
    return {"message": "Booking deleted successfully"}
