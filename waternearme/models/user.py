"""User ORM model: account identity plus cached XP/level."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, Text
from sqlalchemy.orm import relationship
from waternearme.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=True)
    username = Column(String(50), nullable=True, unique=True)  # chosen during onboarding
    email = Column(String(255), nullable=False, unique=True)
    email_verified = Column(DateTime(timezone=True), nullable=True)
    image = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    xp = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def onboarded(self) -> bool:
        return bool(self.username)
