"""Pydantic schemas for Bubblers and their audit log."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import Field, field_validator

from waternearme.models.audit_log import AuditAction
from waternearme.models.bubbler import BubblerType
from waternearme.schemas.common import RequestModel, ResponseModel


def require_text(value: str) -> str:
    """Reject empty or whitespace-only strings."""
    if not value.strip():
        raise ValueError("must not be empty")
    return value


class BubblerCreate(RequestModel):
    name: str
    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False)
    type: BubblerType
    description: Optional[str] = None
    addedby: Optional[str] = None
    addedbyuserid: Optional[str] = None
    verified: bool = False
    isaccessible: bool = False
    dogfriendly: bool = False
    hasbottlefiller: bool = False
    maintainer: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return require_text(value)


class BubblerUpdate(RequestModel):
    """Partial patch. Only keys present in the body are considered."""

    name: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90, allow_inf_nan=False)
    longitude: Optional[float] = Field(None, ge=-180, le=180, allow_inf_nan=False)
    type: Optional[BubblerType] = None
    description: Optional[str] = None
    verified: Optional[bool] = None
    isaccessible: Optional[bool] = None
    dogfriendly: Optional[bool] = None
    hasbottlefiller: Optional[bool] = None
    maintainer: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator(
        "name", "latitude", "longitude", "type",
        "verified", "isaccessible", "dogfriendly", "hasbottlefiller",
        mode="before",
    )
    @classmethod
    def check_not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> Optional[str]:
        return require_text(value)


class BubblerOut(ResponseModel):
    id: int
    name: str
    latitude: float
    longitude: float
    description: Optional[str] = None
    type: BubblerType
    addedby: Optional[str] = None
    addedbyuserid: str
    verified: bool
    isaccessible: bool
    dogfriendly: bool
    hasbottlefiller: bool
    image_url: Optional[str] = None
    maintainer: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuditLogOut(ResponseModel):
    id: int
    bubbler_id: int
    user_id: Optional[str] = None
    action: AuditAction
    changes: dict[str, Any]
    created_at: datetime


class WaypointReport(RequestModel):
    waypoint_id: int
    reason: str

    @field_validator("reason")
    @classmethod
    def check_reason(cls, value: str) -> str:
        return require_text(value)
