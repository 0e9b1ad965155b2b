"""Pydantic schemas for doctors and services."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1)
    specialization: str | None = None
    email: str | None = None
    phone: str | None = None
    availability: str | None = None


class DoctorUpdate(BaseModel):
    name: str | None = None
    specialization: str | None = None
    email: str | None = None
    phone: str | None = None
    availability: str | None = None


class DoctorOut(BaseModel):
    id: int
    name: str
    specialization: str | None = None
    email: str | None = None
    phone: str | None = None
    availability: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    price: Decimal = Field(Decimal("0"), ge=0)
    duration_minutes: int = Field(30, gt=0)


class ServiceUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    price: Decimal | None = Field(None, ge=0)
    duration_minutes: int | None = Field(None, gt=0)


class ServiceOut(BaseModel):
    id: int
    name: str
    description: str | None = None
    price: Decimal
    duration_minutes: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True
