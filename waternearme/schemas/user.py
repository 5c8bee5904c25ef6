"""Pydantic schemas for Users."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from waternearme.schemas.bubbler import BubblerOut, require_text
from waternearme.schemas.common import RequestModel, ResponseModel


class UserUpdate(RequestModel):
    name: Optional[str] = None
    username: Optional[str] = Field(None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    image: Optional[str] = None
    bio: Optional[str] = None


class UserOut(ResponseModel):
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    email: str
    image: Optional[str] = None
    bio: Optional[str] = None
    xp: int
    level: int
    created_at: datetime
    updated_at: datetime


class ProfileReview(ResponseModel):
    id: int
    rating: float
    comment: Optional[str] = None
    bubbler_id: int
    created_at: datetime
    updated_at: datetime


class UserProfileOut(UserOut):
    review_count: int
    reviews: list[ProfileReview] = []
    bubblers_added_count: int
    bubblers_added: list[BubblerOut] = []


class UserXPOut(ResponseModel):
    xp: int
    level: int


class UserReport(RequestModel):
    reason: str

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value: str) -> str:
        return require_text(value)
