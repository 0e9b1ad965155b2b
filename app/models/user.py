"""User model: patients, staff and admins share one table."""

from sqlalchemy import Column, String, DateTime, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base

ROLE_USER = "user"
ROLE_STAFF = "staff"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_STAFF, ROLE_ADMIN)
STAFF_ROLES = (ROLE_STAFF, ROLE_ADMIN)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ROLE_USER)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    appointments = relationship("Appointment", back_populates="patient", passive_deletes=True)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
