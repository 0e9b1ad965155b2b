"""Appointment status and payment transitions.

Every change to status or payment_status goes through this module so the
allowed transitions and who may trigger them are decided in one place.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Forbidden, InvalidInput, InvalidTransition, NotFound
from app.models.appointment import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentStatus,
    PaymentStatus,
)
from app.models.user import ROLE_ADMIN, User
from app.services.appointment_repository import AppointmentRepository
from app.services.audit_service import log_admin_action

logger = logging.getLogger(__name__)

# Named transitions: target -> states it may be entered from
TRANSITIONS: dict[AppointmentStatus, tuple[AppointmentStatus, ...]] = {
    AppointmentStatus.CONFIRMED: (AppointmentStatus.PENDING,),
    AppointmentStatus.DECLINED: ACTIVE_STATUSES,
    AppointmentStatus.CANCELLED: ACTIVE_STATUSES,
}


def parse_status(value: str) -> AppointmentStatus:
    try:
        return AppointmentStatus((value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AppointmentStatus)
        raise InvalidInput(f"Invalid status '{value}'. Must be one of: {allowed}.")


def parse_payment_status(value: str) -> PaymentStatus:
    try:
        return PaymentStatus((value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in PaymentStatus)
        raise InvalidInput(f"Invalid payment status '{value}'. Must be one of: {allowed}.")


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return current in TRANSITIONS.get(target, ())


class AppointmentStateMachine:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = AppointmentRepository(db)

    @staticmethod
    def _require_staff(actor: User) -> None:
        if not actor.is_staff:
            raise Forbidden("Require Admin or Staff Role!")

    async def _get(self, appointment_id: int) -> Appointment:
        appointment = await self.repo.find_by_id(appointment_id)
        if not appointment:
            raise NotFound("Appointment not found.")
        return appointment

    def _check_transition(self, appointment: Appointment, target: AppointmentStatus) -> None:
        current = AppointmentStatus(appointment.status)
        if not can_transition(current, target):
            raise InvalidTransition(
                f"Cannot change appointment from {current.value} to {target.value}."
            )

    async def confirm(self, appointment_id: int, actor: User) -> None:
        self._require_staff(actor)
        appointment = await self._get(appointment_id)
        self._check_transition(appointment, AppointmentStatus.CONFIRMED)
        await self.repo.update_status(appointment_id, AppointmentStatus.CONFIRMED)
        logger.info("Appointment %s confirmed by user %s", appointment_id, actor.id)

    async def decline(self, appointment_id: int, reason: Optional[str], actor: User) -> None:
        self._require_staff(actor)
        if not reason or not reason.strip():
            raise InvalidInput("Decline message is required.")
        appointment = await self._get(appointment_id)
        self._check_transition(appointment, AppointmentStatus.DECLINED)
        await self.repo.append_decline_note(appointment_id, reason)
        logger.info("Appointment %s declined by user %s", appointment_id, actor.id)

    async def cancel(self, appointment_id: int, actor: User) -> None:
        """Patients may cancel their own appointments; staff/admin may cancel any."""
        appointment = await self._get(appointment_id)
        if not actor.is_staff and appointment.user_id != actor.id:
            logger.warning(
                "User %s tried to cancel appointment %s owned by %s",
                actor.id, appointment_id, appointment.user_id,
            )
            raise Forbidden()
        self._check_transition(appointment, AppointmentStatus.CANCELLED)
        await self.repo.update_status(appointment_id, AppointmentStatus.CANCELLED)
        logger.info("Appointment %s cancelled by user %s", appointment_id, actor.id)

    async def override_status(self, appointment_id: int, status_value: str, actor: User) -> AppointmentStatus:
        """Administrative override: any valid status, recorded in the audit log."""
        self._require_staff(actor)
        target = parse_status(status_value)
        appointment = await self._get(appointment_id)
        previous = AppointmentStatus(appointment.status)

        # Reviving a cancelled or declined booking can collide with a newer
        # booking of the same slot; the repository reports that as SlotUnavailable
        affected = await self.repo.update_status(appointment_id, target, commit=False)
        if affected == 0:
            raise NotFound("Appointment not found.")

        await log_admin_action(
            self.db,
            actor,
            "status_override",
            appointment_id=appointment_id,
            details={"from": previous.value, "to": target.value},
            commit=False,
        )
        await self.repo.commit()
        logger.info(
            "Appointment %s status overridden %s -> %s by user %s (%s)",
            appointment_id, previous.value, target.value, actor.id, actor.role,
        )
        return target

    async def mark_paid(self, appointment_id: int, actor: User) -> None:
        self._require_staff(actor)
        await self._get(appointment_id)
        await self.repo.update_payment_status(appointment_id, PaymentStatus.PAID.value, None)
        logger.info("Appointment %s marked as paid by user %s", appointment_id, actor.id)

    async def update_payment(
        self,
        appointment_id: int,
        payment_status: str,
        payment_reference: Optional[str],
        actor: User,
    ) -> PaymentStatus:
        self._require_staff(actor)
        target = parse_payment_status(payment_status)
        affected = await self.repo.update_payment_status(
            appointment_id, target.value, payment_reference, commit=False
        )
        if affected == 0:
            raise NotFound("Appointment not found.")

        await log_admin_action(
            self.db,
            actor,
            "payment_update",
            appointment_id=appointment_id,
            details={"payment_status": target.value, "payment_reference": payment_reference},
            commit=False,
        )
        await self.repo.commit()
        return target

    async def delete(self, appointment_id: int, actor: User) -> None:
        if actor.role != ROLE_ADMIN:
            raise Forbidden("Require Admin Role!")
        affected = await self.repo.delete(appointment_id, commit=False)
        if affected == 0:
            raise NotFound("Appointment not found.")

        await log_admin_action(self.db, actor, "appointment_delete", appointment_id=appointment_id, commit=False)
        await self.repo.commit()
        logger.info("Appointment %s deleted by admin %s", appointment_id, actor.id)
