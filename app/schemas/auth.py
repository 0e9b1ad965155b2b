"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.services.auth import MAX_PASSWORD_BYTES


def check_password_bytes(value: str | None) -> str | None:
    if value is not None and len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
    return value


class UserRegister(BaseModel):
    """Request schema for patient registration."""
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value):
        return check_password_bytes(value)


class UserLogin(BaseModel):
    """Request schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Response schema for login: JWT token plus profile basics."""
    access_token: str
    token_type: str = "bearer"
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    role: str


class UserOut(BaseModel):
    """Response schema for user info."""
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


class RegisterResponse(BaseModel):
    message: str
    userId: int


class MessageResponse(BaseModel):
    """Generic success message response."""
    message: str
