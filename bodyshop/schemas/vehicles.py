from typing import Optional

from pydantic import BaseModel, Field


class VehicleCreate(BaseModel):
    make: str
    model: str
    year: int = Field(..., ge=1900, le=2100)
    color: Optional[str] = None
    license_plate: str
    vin: Optional[str] = None
    notes: Optional[str] = None


class VehicleUpdate(BaseModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=1900, le=2100)
    color: Optional[str] = None
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    notes: Optional[str] = None


class VehicleOut(VehicleCreate):
    id: int
    user_id: int
