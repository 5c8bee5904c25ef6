"""BubblerAuditLog ORM model: append-only history of bubbler mutations."""
import enum
from sqlalchemy import Column, String, Integer, DateTime, JSON, Enum as SAEnum
from waternearme.database import Base, utcnow


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"


class BubblerAuditLog(Base):
    __tablename__ = "bubbler_audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No FK constraint: history is kept after the bubbler itself is deleted.
    bubbler_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String(36), nullable=True)
    action = Column(SAEnum(AuditAction, native_enum=False, length=10), nullable=False)
    changes = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
