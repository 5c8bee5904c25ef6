"""Pydantic schemas for Favorites."""
from __future__ import annotations
from datetime import datetime
from typing import Optional

from waternearme.schemas.bubbler import BubblerOut
from waternearme.schemas.common import RequestModel, ResponseModel


class FavoriteCreate(RequestModel):
    bubbler_id: int


class FavoriteOut(ResponseModel):
    id: int
    user_id: str
    bubbler_id: int
    created_at: datetime
    bubbler: Optional[BubblerOut] = None


class FavoriteDeleted(ResponseModel):
    deleted: int
