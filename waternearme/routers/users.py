"""User API routes: current user, onboarding, public profiles, XP and reports."""
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from waternearme.auth import Credentials, get_credentials, require_session_user
from waternearme.database import get_db
from waternearme.errors import Conflict, Forbidden, InvalidInput, NotFound
from waternearme.models.bubbler import Bubbler
from waternearme.models.review import Review
from waternearme.models.user import User
from waternearme.schemas.bubbler import BubblerOut
from waternearme.schemas.user import ProfileReview, UserOut, UserProfileOut, UserReport, UserUpdate, UserXPOut
from waternearme.services import notifier as notifications
from waternearme.services.notifier import Notifier, get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


def username_taken(db: Session, username: str, user_id: str) -> bool:
    return db.query(User.id).filter(User.username == username, User.id != user_id).first() is not None


@router.get("", response_model=UserOut)
def get_current_user(user: User = Depends(require_session_user)):
    """Profile of the signed-in user."""
    return user


@router.post("", response_model=UserOut)
@router.post("/update", response_model=UserOut)
def update_current_user(
    payload: UserUpdate,
    user: User = Depends(require_session_user),
    db: Session = Depends(get_db),
):
    """Onboarding / profile update. Fields left out or null are untouched."""
    updates = payload.model_dump(exclude_none=True)
    username = updates.get("username")
    if username and username != user.username and username_taken(db, username, user.id):
        raise Conflict("Username is already taken")
    for field, value in updates.items():
        setattr(user, field, value)
    try:
        db.commit()
    except IntegrityError:
        # Another account claimed the username after the check above.
        db.rollback()
        raise Conflict("Username is already taken")
    db.refresh(user)
    logger.info("Updated user %s (%s)", user.id, sorted(updates))
    return user


@router.get("/xp", response_model=UserXPOut)
def get_user_xp(
    user_id: Optional[str] = Query(None, alias="userId"),
    username: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if not user_id and not username:
        raise InvalidInput("userId or username required")
    query = db.query(User)
    user = query.filter(User.id == user_id).first() if user_id else query.filter(User.username == username).first()
    if not user:
        raise NotFound("User not found")
    return user


@router.get("/{username}", response_model=UserProfileOut)
def get_profile(
    username: str,
    creds: Credentials = Depends(get_credentials),
    db: Session = Depends(get_db),
):
    """Public profile with the user's reviews and the bubblers they added."""
    if not creds.authenticated:
        raise Forbidden("Please sign in to access this resource.")
    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise NotFound("User not found")

    reviews = db.query(Review).filter(Review.user_id == user.id).order_by(Review.created_at.desc()).all()
    added = db.query(Bubbler).filter(Bubbler.addedbyuserid == user.id).order_by(Bubbler.id).all()
    return UserProfileOut(
        **UserOut.model_validate(user).model_dump(),
        review_count=len(reviews),
        reviews=[ProfileReview.model_validate(r) for r in reviews],
        bubblers_added_count=len(added),
        bubblers_added=[BubblerOut.model_validate(b) for b in added],
    )


@router.post("/{username}/report")
def report_user(
    username: str,
    payload: UserReport,
    background_tasks: BackgroundTasks,
    reporter: User = Depends(require_session_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Forward a user report to the moderation channel."""
    if username == reporter.username:
        raise InvalidInput("You cannot report yourself")
    reported = db.query(User).filter(User.username == username).first()
    if not reported:
        raise NotFound("User not found")
    background_tasks.add_task(
        notifier.notify,
        notifications.user_reported_message(reporter.id, reported.id, payload.reason),
    )
    logger.info("User %s reported user %s", reporter.id, reported.id)
    return {"success": True}
