"""Doctor reference entity."""

from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base

DEFAULT_AVAILABILITY = "Monday-Friday, 9AM-5PM"


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    specialization = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    availability = Column(String, nullable=False, default=DEFAULT_AVAILABILITY)
    created_at = Column(DateTime, default=datetime.utcnow)

    appointments = relationship("Appointment", back_populates="doctor", passive_deletes=True)
