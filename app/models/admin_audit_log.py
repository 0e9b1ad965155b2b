from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from app.core.database import Base


class AdminAuditLog(Base):
    __tablename__ = "admin_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    actor_role = Column(String, nullable=True)
    action = Column(String, nullable=False)
    # Not a foreign key: rows must outlive hard-deleted appointments
    appointment_id = Column(Integer, nullable=True, index=True)
    details = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    # Relationships
    actor = relationship("User", foreign_keys=[actor_id])
