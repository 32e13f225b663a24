from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ReviewStatus = Literal["pending", "approved", "rejected"]


class ReviewCreate(BaseModel):
    service_id: int = Field(..., ge=1)
    booking_id: int = Field(..., ge=1)
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=100)
    comment: str = Field(..., min_length=1, max_length=1000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = Field(None, ge=1, le=5)
    title: Optional[str] = Field(None, max_length=100)
    comment: Optional[str] = Field(None, min_length=1, max_length=1000)


class ReviewStatusUpdate(BaseModel):
    status: ReviewStatus


class ReviewOut(BaseModel):
    id: int
    user_id: int
    service_id: int
    booking_id: int
    rating: int
    title: Optional[str] = None
    comment: str
    status: ReviewStatus
    service_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
