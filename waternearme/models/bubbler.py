"""Bubbler ORM model: one mapped water fountain."""
import enum
from sqlalchemy import Column, String, Integer, Float, Boolean, DateTime, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship, validates
from waternearme.database import Base, utcnow


class BubblerType(str, enum.Enum):
    fountain = "fountain"
    bubbler = "bubbler"
    tap = "tap"


class Bubbler(Base):
    __tablename__ = "bubblers"
    # Ids are never reused on SQLite; audit history is keyed by bubbler id.
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(SAEnum(BubblerType, native_enum=False, length=20), nullable=False)
    addedby = Column(String(100), nullable=True)
    addedbyuserid = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    verified = Column(Boolean, nullable=False, default=False)
    isaccessible = Column(Boolean, nullable=False, default=False)
    dogfriendly = Column(Boolean, nullable=False, default=False)
    hasbottlefiller = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(500), nullable=True)
    maintainer = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    reviews = relationship("Review", back_populates="bubbler", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="bubbler", cascade="all, delete-orphan")

    @validates("name", "description", "addedby", "maintainer", "image_url")
    def _strip_text(self, key, value):
        # Stored text never carries surrounding whitespace.
        if isinstance(value, str):
            return value.strip()
        return value
