"""Waypoint (bubbler) API routes: delegates to waypoint_service for the audit pipeline."""
import logging
from typing import Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from waternearme.auth import Credentials, require_api_key, require_api_key_or_session, require_session_user
from waternearme.database import get_db
from waternearme.models.user import User
from waternearme.schemas.bubbler import AuditLogOut, BubblerCreate, BubblerOut, BubblerUpdate, WaypointReport
from waternearme.services import notifier as notifications
from waternearme.services import waypoint_service, xp_service
from waternearme.services.notifier import Notifier, get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=Union[BubblerOut, list[BubblerOut]])
def get_waypoints(
    bubbler_id: Optional[int] = Query(None, alias="bubblerId"),
    name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Look up one bubbler by id, search by name, or list all."""
    if bubbler_id is not None:
        return waypoint_service.get_bubbler(db, bubbler_id)
    if name:
        return waypoint_service.search_bubblers(db, name)
    return waypoint_service.list_bubblers(db)


@router.get("/recentlyadded", response_model=list[BubblerOut])
def recently_added(number: int = Query(10, gt=0, le=100), db: Session = Depends(get_db)):
    return waypoint_service.recently_added(db, number)


@router.get("/logs", response_model=list[AuditLogOut])
def get_logs(bubbler_id: int = Query(..., alias="bubblerId"), db: Session = Depends(get_db)):
    """Audit history for one bubbler, newest first."""
    return waypoint_service.list_audit_logs(db, bubbler_id)


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    return waypoint_service.site_stats(db)


@router.post("", response_model=BubblerOut)
def create_waypoint(
    payload: BubblerCreate,
    background_tasks: BackgroundTasks,
    creds: Credentials = Depends(require_api_key_or_session),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Create a bubbler. Accepts the API key (with addedbyuserid) or a session."""
    bubbler, audit = waypoint_service.create_bubbler(db, payload, creds)
    xp_service.award_contribution(
        db, audit.user_id, xp_service.XPReward.ADD_WAYPOINT, f"bubbler:{audit.bubbler_id}:create"
    )
    background_tasks.add_task(
        notifier.notify, notifications.waypoint_created_message(audit.changes, audit.user_id)
    )
    return bubbler


@router.patch("", response_model=BubblerOut)
def update_waypoint(
    payload: BubblerUpdate,
    background_tasks: BackgroundTasks,
    bubbler_id: int = Query(..., alias="id"),
    creds: Credentials = Depends(require_api_key_or_session),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Partially update a bubbler; only fields whose value changes are written and logged."""
    bubbler, audit = waypoint_service.update_bubbler(db, bubbler_id, payload, creds)
    xp_service.award_contribution(
        db, audit.user_id, xp_service.XPReward.EDIT_WAYPOINT, f"audit:{audit.id}"
    )
    background_tasks.add_task(
        notifier.notify,
        notifications.waypoint_updated_message(audit.bubbler_id, bubbler.name, audit.changes, audit.user_id),
    )
    return bubbler


@router.delete("", response_class=PlainTextResponse)
def delete_waypoint(
    background_tasks: BackgroundTasks,
    bubbler_id: int = Query(..., alias="id"),
    creds: Credentials = Depends(require_api_key),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Delete a bubbler. API key only."""
    snapshot = waypoint_service.delete_bubbler(db, bubbler_id)
    background_tasks.add_task(notifier.notify, notifications.waypoint_deleted_message(snapshot))
    return f"Deleted bubbler with id {bubbler_id}"


@router.post("/report")
def report_waypoint(
    payload: WaypointReport,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_session_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Forward a waypoint report to the moderation channel."""
    waypoint_service.get_bubbler(db, payload.waypoint_id)
    background_tasks.add_task(
        notifier.notify,
        notifications.waypoint_reported_message(payload.waypoint_id, user.id, payload.reason),
    )
    logger.info("User %s reported waypoint %s", user.id, payload.waypoint_id)
    return {"message": "Waypoint reported successfully"}
