"""Pydantic schemas for Reviews."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from waternearme.schemas.bubbler import require_text
from waternearme.schemas.common import RequestModel, ResponseModel


class ReviewCreate(RequestModel):
    bubbler_id: int
    rating: float = Field(ge=1, le=5, allow_inf_nan=False)
    comment: Optional[str] = None


class ReviewAuthor(ResponseModel):
    username: Optional[str] = None


class ReviewBubbler(ResponseModel):
    name: str


class ReviewOut(ResponseModel):
    id: int
    bubbler_id: int
    user_id: str
    rating: float
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[ReviewAuthor] = None


class RecentReviewOut(ReviewOut):
    bubbler: Optional[ReviewBubbler] = None


class ReviewSummary(ResponseModel):
    bubbler_id: int
    average: Optional[float] = None
    count: int


class ReviewReport(RequestModel):
    review_id: int
    reason: str

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value: str) -> str:
        return require_text(value)
