"""Appointment repository - all appointment queries live here."""

import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import SlotUnavailable, StorageError
from app.models.appointment import (
    ACTIVE_SLOT_INDEX,
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from app.models.doctor import Doctor
from app.models.service import Service
from app.models.user import User

logger = logging.getLogger(__name__)

DECLINE_NOTE_PREFIX = "\n\nDecline Reason: "

# Columns returned by list/detail queries
_DETAIL_COLUMNS = (
    Appointment.id,
    Appointment.user_id,
    Appointment.doctor_id,
    Appointment.service_id,
    Appointment.appointment_date,
    Appointment.appointment_time,
    Appointment.status,
    Appointment.payment_status,
    Appointment.payment_reference,
    Appointment.notes,
    Appointment.created_at,
    Doctor.name.label("doctor_name"),
    Doctor.specialization.label("doctor_specialization"),
    Service.name.label("service_name"),
    Service.price.label("service_price"),
)

_PATIENT_COLUMNS = (
    User.first_name.label("patient_first_name"),
    User.last_name.label("patient_last_name"),
    User.email.label("patient_email"),
    User.phone.label("patient_phone"),
)


def _is_slot_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return ACTIVE_SLOT_INDEX in message or (
        "UNIQUE constraint failed" in message and "appointments.doctor_id" in message
    )


class AppointmentRepository:
    """Async data access for appointments.

    Every method raises StorageError when the database call fails.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _storage(self, operation: str):
        try:
            yield
        except IntegrityError as e:
            await self.db.rollback()
            if _is_slot_conflict(e):
                logger.warning("Appointment %s hit an occupied slot", operation)
                raise SlotUnavailable() from e
            logger.error("Appointment %s failed: %s", operation, e)
            raise StorageError(str(e)) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Appointment %s failed: %s", operation, e)
            raise StorageError(str(e)) from e

    async def commit(self) -> None:
        """Commit writes made with commit=False, such as an update and its audit row."""
        async with self._storage("commit"):
            await self.db.commit()

    def _detail_query(self, with_patient: bool = False):
        columns = _DETAIL_COLUMNS + (_PATIENT_COLUMNS if with_patient else ())
        query = (
            select(*columns)
            .join(Doctor, Doctor.id == Appointment.doctor_id)
            .join(Service, Service.id == Appointment.service_id)
        )
        if with_patient:
            query = query.join(User, User.id == Appointment.user_id)
        return query

    async def _rows(self, query) -> list[dict[str, Any]]:
        result = await self.db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    # ------------------------------------------------------------------
    # Booking reads
    # ------------------------------------------------------------------

    async def count_by_patient_and_date(
        self,
        patient_id: int,
        appointment_date: date,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> int:
        """Count a patient's appointments on a date (all statuses unless restricted)."""
        query = select(func.count(Appointment.id)).where(
            Appointment.user_id == patient_id,
            Appointment.appointment_date == appointment_date,
        )
        if statuses is not None:
            query = query.where(Appointment.status.in_(list(statuses)))
        async with self._storage("count"):
            result = await self.db.execute(query)
            return result.scalar_one()

    async def get_booked_slots(
        self,
        doctor_id: int,
        appointment_date: date,
        statuses: Optional[Iterable[AppointmentStatus]] = None,
    ) -> set[time]:
        """Times already taken for a doctor on a date (every row unless restricted)."""
        query = select(Appointment.appointment_time).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
        )
        if statuses is not None:
            query = query.where(Appointment.status.in_(list(statuses)))
        async with self._storage("booked_slots"):
            result = await self.db.execute(query)
            return set(result.scalars().all())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        patient_id: int,
        doctor_id: int,
        service_id: int,
        appointment_date: date,
        appointment_time: time,
        notes: Optional[str] = None,
    ) -> int:
        """Insert a pending/pending appointment and return its id.

        A concurrent booking of the same active slot trips the partial
        unique index and is reported as SlotUnavailable.
        """
        appointment = Appointment(
            user_id=patient_id,
            doctor_id=doctor_id,
            service_id=service_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            status=AppointmentStatus.PENDING,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
        )
        self.db.add(appointment)
        async with self._storage("insert"):
            await self.db.commit()
        await self.db.refresh(appointment)
        return appointment.id

    async def update_status(self, appointment_id: int, status: AppointmentStatus, commit: bool = True) -> int:
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(status=status, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        async with self._storage("update_status"):
            result = await self.db.execute(stmt)
            if commit:
                await self.db.commit()
            return result.rowcount

    async def update_payment_status(
        self,
        appointment_id: int,
        payment_status: str,
        payment_reference: Optional[str] = None,
        commit: bool = True,
    ) -> int:
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(
                payment_status=payment_status,
                payment_reference=payment_reference,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._storage("update_payment_status"):
            result = await self.db.execute(stmt)
            if commit:
                await self.db.commit()
            return result.rowcount

    async def append_decline_note(self, appointment_id: int, reason: str, commit: bool = True) -> int:
        """Mark declined and append the reason, keeping any earlier notes."""
        stmt = (
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .values(
                status=AppointmentStatus.DECLINED,
                notes=func.coalesce(Appointment.notes, "") + DECLINE_NOTE_PREFIX + reason,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        async with self._storage("append_decline_note"):
            result = await self.db.execute(stmt)
            if commit:
                await self.db.commit()
            return result.rowcount

    async def delete(self, appointment_id: int, commit: bool = True) -> int:
        stmt = (
            delete(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(synchronize_session=False)
        )
        async with self._storage("delete"):
            result = await self.db.execute(stmt)
            if commit:
                await self.db.commit()
            return result.rowcount

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def find_by_id(self, appointment_id: int) -> Optional[Appointment]:
        async with self._storage("find_by_id"):
            query = (
                select(Appointment)
                .where(Appointment.id == appointment_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            return result.scalar_one_or_none()

    async def get_detail(self, appointment_id: int) -> Optional[dict[str, Any]]:
        """Single appointment joined with patient, doctor and service names."""
        query = self._detail_query(with_patient=True).where(Appointment.id == appointment_id)
        async with self._storage("get_detail"):
            rows = await self._rows(query)
        return rows[0] if rows else None

    async def get_by_patient_id(self, patient_id: int) -> list[dict[str, Any]]:
        query = (
            self._detail_query()
            .where(Appointment.user_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
        )
        async with self._storage("get_by_patient_id"):
            return await self._rows(query)

    async def get_all(self) -> list[dict[str, Any]]:
        query = self._detail_query(with_patient=True).order_by(
            Appointment.appointment_date.desc(), Appointment.appointment_time.desc()
        )
        async with self._storage("get_all"):
            return await self._rows(query)

    async def get_by_month(self, month: int, year: int) -> list[dict[str, Any]]:
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        query = (
            self._detail_query(with_patient=True)
            .where(Appointment.appointment_date >= start, Appointment.appointment_date < end)
            .order_by(Appointment.appointment_date, Appointment.appointment_time)
        )
        async with self._storage("get_by_month"):
            return await self._rows(query)

    async def count_by_status(self) -> dict[str, int]:
        """Appointment totals keyed by status, for the admin dashboard."""
        query = select(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status)
        async with self._storage("count_by_status"):
            result = await self.db.execute(query)
            return {
                (status.value if isinstance(status, AppointmentStatus) else status): count
                for status, count in result.all()
            }
