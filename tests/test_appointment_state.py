"""Tests for appointment status and payment transitions."""

from datetime import time
from unittest.mock import patch

import pytest
from sqlalchemy import select

from app.core.exceptions import (
    Forbidden,
    InvalidInput,
    InvalidTransition,
    NotFound,
    SlotUnavailable,
    StorageError,
)
from app.models.admin_audit_log import AdminAuditLog
from app.models.appointment import Appointment, AppointmentStatus
from app.services.appointment_state import AppointmentStateMachine, can_transition
from conftest import add_appointment


async def reload(db, appointment_id):
    return await db.get(Appointment, appointment_id, populate_existing=True)


@pytest.fixture
def machine(db):
    return AppointmentStateMachine(db)


@pytest.mark.asyncio
async def test_patient_cancels_own_appointment(db, machine, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    await machine.cancel(appointment.id, patient)

    assert (await reload(db, appointment.id)).status == AppointmentStatus.CANCELLED


@pytest.mark.asyncio
async def test_patient_cannot_cancel_someone_elses_appointment(db, machine, patient, other_patient, doctors, services):
    appointment = await add_appointment(db, other_patient, doctors[0], services[0])

    with pytest.raises(Forbidden):
        await machine.cancel(appointment.id, patient)

    assert (await reload(db, appointment.id)).status == AppointmentStatus.PENDING


@pytest.mark.asyncio
async def test_staff_can_cancel_any_appointment(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CONFIRMED)

    await machine.cancel(appointment.id, staff)

    assert (await reload(db, appointment.id)).status == AppointmentStatus.CANCELLED


@pytest.mark.asyncio
async def test_cancel_missing_appointment(machine, patient):
    with pytest.raises(NotFound):
        await machine.cancel(12345, patient)


@pytest.mark.asyncio
async def test_cancel_terminal_appointment_is_rejected(db, machine, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.DECLINED)

    with pytest.raises(InvalidTransition):
        await machine.cancel(appointment.id, patient)


@pytest.mark.asyncio
async def test_confirm_pending(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    await machine.confirm(appointment.id, staff)

    assert (await reload(db, appointment.id)).status == AppointmentStatus.CONFIRMED


@pytest.mark.asyncio
async def test_confirm_requires_staff(db, machine, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    with pytest.raises(Forbidden):
        await machine.confirm(appointment.id, patient)


@pytest.mark.asyncio
async def test_confirm_cancelled_is_rejected(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CANCELLED)

    with pytest.raises(InvalidTransition):
        await machine.confirm(appointment.id, staff)


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", [None, "", "   \n"])
async def test_decline_without_reason(db, machine, staff, patient, doctors, services, reason):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    with pytest.raises(InvalidInput):
        await machine.decline(appointment.id, reason, staff)

    assert (await reload(db, appointment.id)).status == AppointmentStatus.PENDING


@pytest.mark.asyncio
async def test_decline_appends_reason_to_existing_notes(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], notes="Knee pain")

    await machine.decline(appointment.id, "Doctor on leave", staff)

    declined = await reload(db, appointment.id)
    assert declined.status == AppointmentStatus.DECLINED
    assert declined.notes == "Knee pain\n\nDecline Reason: Doctor on leave"


@pytest.mark.asyncio
async def test_decline_without_prior_notes(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CONFIRMED)

    await machine.decline(appointment.id, "Clinic closed", staff)

    assert (await reload(db, appointment.id)).notes == "\n\nDecline Reason: Clinic closed"


@pytest.mark.asyncio
async def test_decline_missing_appointment(machine, staff):
    with pytest.raises(NotFound):
        await machine.decline(999, "reason", staff)


@pytest.mark.asyncio
async def test_override_sets_any_valid_status_and_audits(db, machine, admin, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CANCELLED)

    result = await machine.override_status(appointment.id, "completed", admin)

    assert result == AppointmentStatus.COMPLETED
    assert (await reload(db, appointment.id)).status == AppointmentStatus.COMPLETED

    entries = (await db.execute(select(AdminAuditLog))).scalars().all()
    assert len(entries) == 1
    assert entries[0].action == "status_override"
    assert entries[0].actor_id == admin.id
    assert entries[0].actor_role == "admin"
    assert entries[0].appointment_id == appointment.id
    assert entries[0].details == {"from": "cancelled", "to": "completed"}


@pytest.mark.asyncio
async def test_override_rejects_unknown_status(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    with pytest.raises(InvalidInput):
        await machine.override_status(appointment.id, "archived", staff)


@pytest.mark.asyncio
async def test_override_missing_appointment(machine, staff):
    with pytest.raises(NotFound):
        await machine.override_status(404, "confirmed", staff)


@pytest.mark.asyncio
async def test_mark_paid_leaves_status_alone(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CONFIRMED)

    await machine.mark_paid(appointment.id, staff)

    paid = await reload(db, appointment.id)
    assert paid.payment_status == "paid"
    assert paid.payment_reference is None
    assert paid.status == AppointmentStatus.CONFIRMED


@pytest.mark.asyncio
async def test_update_payment_with_reference(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0], at=time(13, 0))

    await machine.update_payment(appointment.id, "paid", "RCPT-0042", staff)
    updated = await reload(db, appointment.id)
    assert updated.payment_status == "paid"
    assert updated.payment_reference == "RCPT-0042"

    # Reverting is allowed through the generic path
    await machine.update_payment(appointment.id, "pending", None, staff)
    assert (await reload(db, appointment.id)).payment_status == "pending"

    actions = (await db.execute(select(AdminAuditLog.action))).scalars().all()
    assert actions == ["payment_update", "payment_update"]


@pytest.mark.asyncio
async def test_update_payment_rejects_unknown_value(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])

    with pytest.raises(InvalidInput):
        await machine.update_payment(appointment.id, "maybe", None, staff)


@pytest.mark.asyncio
async def test_update_payment_missing_appointment(machine, staff):
    with pytest.raises(NotFound):
        await machine.update_payment(999, "paid", None, staff)


@pytest.mark.asyncio
async def test_delete_requires_admin_and_is_audited(db, machine, staff, admin, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])
    appointment_id = appointment.id

    with pytest.raises(Forbidden):
        await machine.delete(appointment_id, staff)

    await machine.delete(appointment_id, admin)
    assert await reload(db, appointment_id) is None

    entry = (await db.execute(select(AdminAuditLog))).scalar_one()
    assert entry.action == "appointment_delete"
    assert entry.appointment_id == appointment_id

    with pytest.raises(NotFound):
        await machine.delete(appointment_id, admin)


def test_transition_table():
    assert can_transition(AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
    assert can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED)
    assert can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.DECLINED)
    assert not can_transition(AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED)
    assert not can_transition(AppointmentStatus.CANCELLED, AppointmentStatus.CONFIRMED)
    assert not can_transition(AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


@pytest.mark.asyncio
@pytest.mark.parametrize("revived", ["pending", "confirmed"])
async def test_override_into_rebooked_slot(db, machine, staff, patient, other_patient, doctors, services, revived):
    """Reviving a cancelled booking whose slot was rebooked is a slot conflict, not a storage failure."""
    cancelled = await add_appointment(db, patient, doctors[0], services[0], status=AppointmentStatus.CANCELLED)
    rebooked = await add_appointment(db, other_patient, doctors[0], services[0])
    cancelled_id, rebooked_id = cancelled.id, rebooked.id

    with pytest.raises(SlotUnavailable):
        await machine.override_status(cancelled_id, revived, staff)

    assert (await reload(db, cancelled_id)).status == AppointmentStatus.CANCELLED
    assert (await reload(db, rebooked_id)).status == AppointmentStatus.PENDING
    assert (await db.execute(select(AdminAuditLog))).scalars().all() == []


@pytest.mark.asyncio
async def test_override_and_audit_commit_together(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])
    appointment_id = appointment.id

    async def unwritable_audit(db, actor, action, appointment_id=None, details=None, commit=True):
        # action is NOT NULL, so the insert fails when the transaction commits
        db.add(AdminAuditLog(actor_id=actor.id, action=None, appointment_id=appointment_id))

    with patch("app.services.appointment_state.log_admin_action", unwritable_audit):
        with pytest.raises(StorageError):
            await machine.override_status(appointment_id, "completed", staff)

    assert (await reload(db, appointment_id)).status == AppointmentStatus.PENDING


@pytest.mark.asyncio
async def test_payment_update_rolls_back_when_audit_fails(db, machine, staff, patient, doctors, services):
    appointment = await add_appointment(db, patient, doctors[0], services[0])
    appointment_id = appointment.id

    async def unwritable_audit(db, actor, action, appointment_id=None, details=None, commit=True):
        db.add(AdminAuditLog(actor_id=actor.id, action=None, appointment_id=appointment_id))

    with patch("app.services.appointment_state.log_admin_action", unwritable_audit):
        with pytest.raises(StorageError):
            await machine.update_payment(appointment_id, "paid", "RCPT-1", staff)

    unchanged = await reload(db, appointment_id)
    assert unchanged.payment_status == "pending"
    assert unchanged.payment_reference is None
