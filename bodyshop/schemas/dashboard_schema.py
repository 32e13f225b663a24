# bodyshop/schemas/dashboard_schema.py
from typing import List

from pydantic import BaseModel


class StatusCounts(BaseModel):
    pending: int
    confirmed: int
    in_progress: int
    completed: int
    cancelled: int


class DateCount(BaseModel):
    date: str
    count: int


class Revenue(BaseModel):
    total: float
    average_per_booking: float


class BookingStatistics(BaseModel):
    total: int
    by_status: StatusCounts
    by_date: List[DateCount]
    revenue: Revenue
