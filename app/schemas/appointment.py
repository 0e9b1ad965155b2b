"""Pydantic schemas for Appointments."""

from datetime import datetime, date, time
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import Optional
from app.models.appointment import AppointmentStatus


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment."""
    doctor_id: int
    service_id: int
    appointment_date: date
    appointment_time: time  # "10:00" or "10:00:00"
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    message: str
    appointmentId: int


class AppointmentOut(BaseModel):
    """Appointment joined with doctor/service (and patient for staff views)."""
    id: int
    user_id: int
    doctor_id: int
    service_id: int
    appointment_date: date
    appointment_time: time
    status: AppointmentStatus
    payment_status: str
    payment_reference: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    doctor_name: Optional[str] = None
    doctor_specialization: Optional[str] = None
    service_name: Optional[str] = None
    service_price: Optional[Decimal] = None
    patient_first_name: Optional[str] = None
    patient_last_name: Optional[str] = None
    patient_email: Optional[str] = None
    patient_phone: Optional[str] = None

    class Config:
        from_attributes = True


class BookedSlotsResponse(BaseModel):
    bookedSlots: list[time]


class AvailableSlotsResponse(BaseModel):
    """Slot grid minus booked times for a doctor/date."""
    date: date
    slots: list[time]


class StatusUpdate(BaseModel):
    status: Optional[str] = None


class DeclineRequest(BaseModel):
    decline_message: Optional[str] = None


class PaymentUpdate(BaseModel):
    payment_status: Optional[str] = None
    payment_reference: Optional[str] = Field(None, max_length=255)
