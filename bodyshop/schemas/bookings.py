from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

BookingStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]


class BookingCreate(BaseModel):
    vehicle_id: int
    service_ids: List[int]
    scheduled_date: str
    scheduled_time: str
    notes: Optional[str] = None


class BookingUpdate(BaseModel):
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    notes: Optional[str] = None
    service_ids: Optional[List[int]] = None
    staff_id: Optional[int] = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class BookingItemOut(BaseModel):
    id: int
    service_id: int
    quantity: int
    price: float


class BookingOut(BaseModel):
    id: int
    user_id: int
    vehicle_id: int
    staff_id: Optional[int] = None
    booking_date: str
    start_time: str
    end_time: str
    status: BookingStatus
    total_price: float
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingDetail(BookingOut):
    services: List[BookingItemOut] = []


class BookingCreated(BaseModel):
    message: str
    booking_id: int


class AvailableSlots(BaseModel):
    date: str
    available_slots: List[str]
    mode: Literal["point", "overlap"] = "point"
