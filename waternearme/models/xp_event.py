"""XpEvent ORM model: ledger of XP awards keyed by idempotency key."""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from waternearme.database import Base, utcnow


class XpEvent(Base):
    __tablename__ = "xp_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=False, unique=True)
    delta = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
