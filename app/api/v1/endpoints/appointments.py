"""Appointment booking and lifecycle endpoints."""

import logging
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import get_current_user, require_admin, require_staff
from app.core.exceptions import Forbidden, NotFound
from app.models.user import User
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentOut,
    AvailableSlotsResponse,
    BookedSlotsResponse,
    BookingResponse,
    DeclineRequest,
    PaymentUpdate,
    StatusUpdate,
)
from app.schemas.auth import MessageResponse
from app.services.appointment_repository import AppointmentRepository
from app.services.appointment_state import AppointmentStateMachine
from app.services.booking_policy import BookingPolicy

router = APIRouter()
logger = logging.getLogger(__name__)


def get_booking_policy(db: AsyncSession = Depends(get_db)) -> BookingPolicy:
    return BookingPolicy(db)


def get_state_machine(db: AsyncSession = Depends(get_db)) -> AppointmentStateMachine:
    return AppointmentStateMachine(db)


def get_repository(db: AsyncSession = Depends(get_db)) -> AppointmentRepository:
    return AppointmentRepository(db)


# ============================================================================
# BOOKING
# ============================================================================

@router.post("", response_model=BookingResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    policy: BookingPolicy = Depends(get_booking_policy),
):
    """Book a new appointment for the current user."""
    appointment_id = await policy.book(
        patient_id=current_user.id,
        doctor_id=data.doctor_id,
        service_id=data.service_id,
        appointment_date=data.appointment_date,
        appointment_time=data.appointment_time,
        notes=data.notes,
    )
    return BookingResponse(message="Appointment booked successfully!", appointmentId=appointment_id)


@router.get("/my", response_model=list[AppointmentOut])
async def get_my_appointments(
    current_user: User = Depends(get_current_user),
    repo: AppointmentRepository = Depends(get_repository),
):
    """Appointments belonging to the current user, newest first."""
    return await repo.get_by_patient_id(current_user.id)


@router.get("/booked-slots", response_model=BookedSlotsResponse)
async def get_booked_slots(
    doctor_id: int = Query(...),
    date: date = Query(...),
    policy: BookingPolicy = Depends(get_booking_policy),
):
    """Times already taken for a doctor on a date (public)."""
    booked = await policy.get_booked_slots(doctor_id, date)
    return BookedSlotsResponse(bookedSlots=sorted(booked))


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    doctor_id: int = Query(...),
    date: date = Query(...),
    policy: BookingPolicy = Depends(get_booking_policy),
):
    """Clinic slot grid minus the doctor's booked times (public)."""
    slots = await policy.available_slots(doctor_id, date)
    return AvailableSlotsResponse(date=date, slots=slots)


# ============================================================================
# STAFF VIEWS
# ============================================================================

@router.get("", response_model=list[AppointmentOut])
async def list_appointments(
    current_user: User = Depends(require_staff),
    repo: AppointmentRepository = Depends(get_repository),
):
    """All appointments (staff/admin)."""
    return await repo.get_all()


@router.get("/month", response_model=list[AppointmentOut])
async def list_appointments_by_month(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    current_user: User = Depends(require_staff),
    repo: AppointmentRepository = Depends(get_repository),
):
    """Appointments within one calendar month (staff/admin)."""
    return await repo.get_by_month(month, year)


@router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    repo: AppointmentRepository = Depends(get_repository),
):
    """Single appointment; patients may only see their own."""
    appointment = await repo.get_detail(appointment_id)
    if not appointment:
        raise NotFound("Appointment not found.")
    if not current_user.is_staff and appointment["user_id"] != current_user.id:
        raise Forbidden()
    return appointment


# ============================================================================
# LIFECYCLE
# ============================================================================

@router.put("/{appointment_id}/status", response_model=MessageResponse)
async def update_appointment_status(
    appointment_id: int,
    data: StatusUpdate,
    current_user: User = Depends(require_staff),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    """Administrative status override (staff/admin)."""
    await machine.override_status(appointment_id, data.status, current_user)
    return MessageResponse(message="Appointment status updated successfully!")


@router.put("/{appointment_id}/confirm", response_model=MessageResponse)
async def confirm_appointment(
    appointment_id: int,
    current_user: User = Depends(require_staff),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    await machine.confirm(appointment_id, current_user)
    return MessageResponse(message="Appointment confirmed successfully!")


@router.put("/{appointment_id}/cancel", response_model=MessageResponse)
async def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    """Cancel an appointment: owners may cancel their own, staff/admin any."""
    await machine.cancel(appointment_id, current_user)
    return MessageResponse(message="Appointment cancelled successfully!")


@router.put("/{appointment_id}/decline", response_model=MessageResponse)
async def decline_appointment(
    appointment_id: int,
    data: DeclineRequest,
    current_user: User = Depends(require_staff),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    """Decline with a reason; the reason is appended to the notes."""
    await machine.decline(appointment_id, data.decline_message, current_user)
    return MessageResponse(message="Appointment declined successfully!")


@router.put("/{appointment_id}/mark-paid", response_model=MessageResponse)
async def mark_appointment_paid(
    appointment_id: int,
    current_user: User = Depends(require_staff),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    await machine.mark_paid(appointment_id, current_user)
    return MessageResponse(message="Payment marked as paid successfully!")


@router.put("/{appointment_id}/payment", response_model=MessageResponse)
async def update_payment_status(
    appointment_id: int,
    data: PaymentUpdate,
    current_user: User = Depends(require_staff),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    await machine.update_payment(appointment_id, data.payment_status, data.payment_reference, current_user)
    return MessageResponse(message="Payment status updated successfully!")


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int,
    current_user: User = Depends(require_admin),
    machine: AppointmentStateMachine = Depends(get_state_machine),
):
    """Hard delete (admin only); recorded in the audit log."""
    await machine.delete(appointment_id, current_user)
    return MessageResponse(message="Appointment deleted successfully!")
