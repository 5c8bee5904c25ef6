"""Waypoint (bubbler) service: mutations and their audit trail.

Responsibilities:
- Attribution: session user, or the ``addedbyuserid`` supplied with the API key
- Partial updates that only write fields whose value actually changes
- Audit log: one entry per create/update, committed with the bubbler row
- Read projections (lookup, search, recently added, stats)

Audit ``changes`` are computed from persisted snapshots taken before and after
the write, so values normalized by the model (trimmed text) are diffed as
stored, not as submitted.
"""
import enum
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from waternearme.auth import Credentials
from waternearme.errors import InvalidInput, NoChanges, NotFound
from waternearme.models.audit_log import AuditAction, BubblerAuditLog
from waternearme.models.bubbler import Bubbler
from waternearme.models.user import User
from waternearme.schemas.bubbler import BubblerCreate, BubblerUpdate

logger = logging.getLogger(__name__)

# Public field name -> model attribute.
FIELD_ATTRS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "latitude": "latitude",
    "longitude": "longitude",
    "description": "description",
    "type": "type",
    "addedby": "addedby",
    "addedbyuserid": "addedbyuserid",
    "verified": "verified",
    "isaccessible": "isaccessible",
    "dogfriendly": "dogfriendly",
    "hasbottlefiller": "hasbottlefiller",
    "imageUrl": "image_url",
    "maintainer": "maintainer",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def _json_safe(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def bubbler_snapshot(bubbler: Bubbler) -> dict[str, Any]:
    """Serialize a bubbler to a flat JSON-safe dict keyed by public field names."""
    return {field: _json_safe(getattr(bubbler, attr)) for field, attr in FIELD_ATTRS.items()}


def diff_snapshots(before: dict[str, Any], after: dict[str, Any], fields) -> dict[str, dict[str, Any]]:
    """``{field: {old, new}}`` for each of ``fields`` whose value differs."""
    return {
        field: {"old": before[field], "new": after[field]}
        for field in fields
        if before[field] != after[field]
    }


def _get_or_404(db: Session, bubbler_id: int) -> Bubbler:
    bubbler = db.query(Bubbler).filter(Bubbler.id == bubbler_id).first()
    if not bubbler:
        raise NotFound("Bubbler not found")
    return bubbler


# ── Reads ──────────────────────────────────────────────────────────


def get_bubbler(db: Session, bubbler_id: int) -> Bubbler:
    return _get_or_404(db, bubbler_id)


def search_bubblers(db: Session, name: str) -> list[Bubbler]:
    """Case-insensitive substring match on name. Empty result is a 404."""
    results = (
        db.query(Bubbler)
        .filter(func.lower(Bubbler.name).contains(name.lower(), autoescape=True))
        .order_by(Bubbler.id)
        .all()
    )
    if not results:
        raise NotFound("No bubblers match that name")
    return results


def list_bubblers(db: Session) -> list[Bubbler]:
    return db.query(Bubbler).order_by(Bubbler.id).all()


def recently_added(db: Session, limit: int = 10) -> list[Bubbler]:
    return db.query(Bubbler).order_by(Bubbler.created_at.desc(), Bubbler.id.desc()).limit(limit).all()


def list_audit_logs(db: Session, bubbler_id: int) -> list[BubblerAuditLog]:
    """Audit entries for one bubbler, newest first."""
    return (
        db.query(BubblerAuditLog)
        .filter(BubblerAuditLog.bubbler_id == bubbler_id)
        .order_by(BubblerAuditLog.created_at.desc(), BubblerAuditLog.id.desc())
        .all()
    )


def site_stats(db: Session) -> dict[str, Any]:
    total = db.query(func.count(Bubbler.id)).scalar()
    rows = (
        db.query(Bubbler.addedby)
        .filter(Bubbler.addedby.isnot(None), Bubbler.addedby != "")
        .distinct()
        .order_by(Bubbler.addedby)
        .all()
    )
    contributors = [row[0] for row in rows]
    return {
        "total_water_fountains": total,
        "total_contributors": len(contributors),
        "contributors": contributors,
    }


# ── Mutations ──────────────────────────────────────────────────────


def create_bubbler(db: Session, payload: BubblerCreate, creds: Credentials) -> tuple[Bubbler, BubblerAuditLog]:
    """Insert a bubbler and its CREATE audit entry in one transaction."""
    # Session identity wins over any caller-supplied addedbyuserid.
    actor_id = creds.user_id or payload.addedbyuserid
    if not actor_id:
        raise InvalidInput("Missing addedbyuserid or session user")
    if creds.user is None and not db.query(User.id).filter(User.id == actor_id).first():
        raise InvalidInput("Unknown addedbyuserid")

    data = payload.model_dump(exclude={"addedbyuserid"})
    if not data.get("addedby") and creds.user is not None:
        data["addedby"] = creds.user.username

    bubbler = Bubbler(**data, addedbyuserid=actor_id)
    db.add(bubbler)
    db.flush()
    db.refresh(bubbler)

    audit = BubblerAuditLog(
        bubbler_id=bubbler.id,
        user_id=actor_id,
        action=AuditAction.CREATE,
        changes=bubbler_snapshot(bubbler),
    )
    db.add(audit)
    db.commit()
    db.refresh(bubbler)
    db.refresh(audit)
    logger.info("Created bubbler '%s' (%s) by user %s", bubbler.name, bubbler.id, actor_id)
    return bubbler, audit


def update_bubbler(
    db: Session,
    bubbler_id: int,
    payload: BubblerUpdate,
    creds: Credentials,
) -> tuple[Bubbler, BubblerAuditLog]:
    """Apply a partial patch, writing only changed fields, and log exactly what changed."""
    bubbler = _get_or_404(db, bubbler_id)
    before = bubbler_snapshot(bubbler)

    submitted = payload.model_dump(mode="json", exclude_unset=True, by_alias=True)
    values = payload.model_dump(exclude_unset=True, by_alias=True)
    update_set = [field for field, value in submitted.items() if value != before[field]]
    if not update_set:
        raise NoChanges()

    for field in update_set:
        setattr(bubbler, FIELD_ATTRS[field], values[field])
    db.flush()
    db.refresh(bubbler)

    changes = diff_snapshots(before, bubbler_snapshot(bubbler), update_set)
    if not changes:
        # Every submitted difference was normalized away by the model.
        db.rollback()
        raise NoChanges()

    audit = BubblerAuditLog(
        bubbler_id=bubbler.id,
        user_id=creds.user_id,
        action=AuditAction.UPDATE,
        changes=changes,
    )
    db.add(audit)
    db.commit()
    db.refresh(bubbler)
    db.refresh(audit)
    logger.info("Updated bubbler %s fields %s by %s", bubbler_id, sorted(changes), creds.user_id or "API key")
    return bubbler, audit


def delete_bubbler(db: Session, bubbler_id: int) -> dict[str, Any]:
    """Physically delete a bubbler (reviews and favourites go with it)."""
    bubbler = _get_or_404(db, bubbler_id)
    snapshot = bubbler_snapshot(bubbler)
    db.delete(bubbler)
    db.commit()
    logger.info("Deleted bubbler %s ('%s')", bubbler_id, snapshot["name"])
    return snapshot
