from typing import Optional

from pydantic import BaseModel, Field


class ServiceCreate(BaseModel):
    name: str = Field(..., description="Service name, e.g. Dent repair")
    description: Optional[str] = None
    duration_minutes: int = Field(..., gt=0, description="Duration in minutes")
    price: float = Field(..., ge=0)
    category_id: Optional[int] = None
    is_active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    category_id: Optional[int] = None
    is_active: Optional[bool] = None


class ServiceOut(ServiceCreate):
    id: int


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    description: str = Field(..., min_length=10, max_length=500)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    description: Optional[str] = Field(None, min_length=10, max_length=500)


class CategoryOut(CategoryCreate):
    id: int
