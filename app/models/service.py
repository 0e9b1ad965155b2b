"""Bookable clinic service (consultation, check-up, ...)."""

from sqlalchemy import Column, String, DateTime, Integer, Numeric, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=30)
    created_at = Column(DateTime, default=datetime.utcnow)

    appointments = relationship("Appointment", back_populates="service", passive_deletes=True)
