"""Appointment model for booking system."""

from sqlalchemy import Column, String, DateTime, Integer, Date, Time, ForeignKey, Enum as SQLEnum, Text, Index, text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
from app.core.database import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)
TERMINAL_STATUSES = (AppointmentStatus.DECLINED, AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED)

# Only one pending/confirmed booking may occupy a doctor's slot
_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'confirmed')")
ACTIVE_SLOT_INDEX = "uq_appointments_active_slot"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            ACTIVE_SLOT_INDEX,
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
        Index("ix_appointments_user_date", "user_id", "appointment_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False)

    appointment_date = Column(Date, nullable=False, index=True)
    appointment_time = Column(Time, nullable=False)
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointmentstatus",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=AppointmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    payment_status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False)
    payment_reference = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    patient = relationship("User", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")
    service = relationship("Service", back_populates="appointments")
