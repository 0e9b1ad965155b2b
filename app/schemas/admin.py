"""Pydantic schemas for admin endpoints."""

from datetime import datetime
from typing import Optional, List, Any
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.auth import check_password_bytes


class DashboardStats(BaseModel):
    """Admin dashboard counters."""
    totalUsers: int
    totalStaff: int
    totalAdmins: int
    totalAppointments: int
    totalDoctors: int
    totalServices: int
    pendingAppointments: int
    confirmedAppointments: int


class StaffCreate(BaseModel):
    """Create an admin or staff account."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    role: str = Field(..., pattern="^(admin|staff)$")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class StaffUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class RoleUpdate(BaseModel):
    role: str


class CreatedUserResponse(BaseModel):
    message: str
    userId: int


class AuditLogEntry(BaseModel):
    id: int
    actor_id: Optional[int]
    actor_role: Optional[str]
    action: str
    appointment_id: Optional[int]
    details: Optional[dict[str, Any]]
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogList(BaseModel):
    entries: List[AuditLogEntry]
    limit: int
    offset: int
