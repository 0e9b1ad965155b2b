"""Booking admissibility rules.

A booking is admitted when the patient is under the daily cap and the
requested (doctor, date, time) point is not already taken. Slots are
discrete time-of-day values compared by equality; no duration math.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import DailyLimitExceeded, NotFound, SlotUnavailable
from app.models.appointment import ACTIVE_STATUSES
from app.models.doctor import Doctor
from app.models.service import Service
from app.services.appointment_repository import AppointmentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingRules:
    max_per_day: int = 5
    # Defaults count and block on every status; flip to ignore terminal ones
    daily_limit_active_only: bool = False
    booked_slots_active_only: bool = False

    @classmethod
    def from_settings(cls) -> "BookingRules":
        return cls(
            max_per_day=settings.MAX_APPOINTMENTS_PER_DAY,
            daily_limit_active_only=settings.DAILY_LIMIT_ACTIVE_ONLY,
            booked_slots_active_only=settings.BOOKED_SLOTS_ACTIVE_ONLY,
        )

    @property
    def count_statuses(self):
        return ACTIVE_STATUSES if self.daily_limit_active_only else None

    @property
    def slot_statuses(self):
        return ACTIVE_STATUSES if self.booked_slots_active_only else None


def _parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def generate_time_slots(
    opens: Optional[str] = None,
    closes: Optional[str] = None,
    step_minutes: Optional[int] = None,
) -> list[time]:
    """Clinic slot grid, inclusive of the closing time."""
    start = datetime.combine(date.min, _parse_hhmm(opens or settings.CLINIC_OPENS))
    end = datetime.combine(date.min, _parse_hhmm(closes or settings.CLINIC_CLOSES))
    step = timedelta(minutes=step_minutes or settings.SLOT_MINUTES)

    slots = []
    current = start
    while current <= end:
        slots.append(current.time())
        current += step
    return slots


class BookingPolicy:
    """Decides whether a booking may be made, then records it."""

    def __init__(self, db: AsyncSession, rules: Optional[BookingRules] = None):
        self.db = db
        self.repo = AppointmentRepository(db)
        self.rules = rules or BookingRules.from_settings()

    async def get_booked_slots(self, doctor_id: int, appointment_date: date) -> set[time]:
        return await self.repo.get_booked_slots(doctor_id, appointment_date, self.rules.slot_statuses)

    async def validate_booking(
        self,
        patient_id: int,
        doctor_id: int,
        appointment_date: date,
        appointment_time: time,
    ) -> None:
        """Raise DailyLimitExceeded or SlotUnavailable when the booking is not admissible."""
        count = await self.repo.count_by_patient_and_date(
            patient_id, appointment_date, self.rules.count_statuses
        )
        if count >= self.rules.max_per_day:
            logger.info(
                "Booking rejected: patient %s already has %d appointments on %s",
                patient_id, count, appointment_date,
            )
            raise DailyLimitExceeded(self.rules.max_per_day)

        booked = await self.get_booked_slots(doctor_id, appointment_date)
        if appointment_time in booked:
            logger.info(
                "Booking rejected: doctor %s slot %s %s is taken",
                doctor_id, appointment_date, appointment_time,
            )
            raise SlotUnavailable()

    async def available_slots(self, doctor_id: int, appointment_date: date) -> list[time]:
        booked = await self.get_booked_slots(doctor_id, appointment_date)
        return [slot for slot in generate_time_slots() if slot not in booked]

    async def _ensure_exists(self, model, object_id: int, label: str) -> None:
        result = await self.db.execute(select(model.id).where(model.id == object_id))
        if result.scalar_one_or_none() is None:
            raise NotFound(f"{label} not found.")

    async def book(
        self,
        patient_id: int,
        doctor_id: int,
        service_id: int,
        appointment_date: date,
        appointment_time: time,
        notes: Optional[str] = None,
    ) -> int:
        """Validate and insert a booking, returning the new appointment id."""
        await self._ensure_exists(Doctor, doctor_id, "Doctor")
        await self._ensure_exists(Service, service_id, "Service")
        await self.validate_booking(patient_id, doctor_id, appointment_date, appointment_time)

        appointment_id = await self.repo.create(
            patient_id=patient_id,
            doctor_id=doctor_id,
            service_id=service_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            notes=notes,
        )
        logger.info(
            "Appointment %s booked: patient=%s doctor=%s %s %s",
            appointment_id, patient_id, doctor_id, appointment_date, appointment_time,
        )
        return appointment_id
