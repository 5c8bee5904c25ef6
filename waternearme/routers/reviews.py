"""Review API routes."""
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from waternearme.auth import Credentials, get_credentials, require_onboarded_user, require_session_user
from waternearme.database import get_db
from waternearme.errors import Unauthorized
from waternearme.models.user import User
from waternearme.schemas.review import RecentReviewOut, ReviewCreate, ReviewOut, ReviewReport, ReviewSummary
from waternearme.services import notifier as notifications
from waternearme.services import review_service, xp_service
from waternearme.services.notifier import Notifier, get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[ReviewOut])
def list_reviews(bubbler_id: int = Query(..., alias="bubblerId"), db: Session = Depends(get_db)):
    """Reviews for a bubbler, newest first."""
    return review_service.list_reviews(db, bubbler_id)


@router.get("/recent", response_model=list[RecentReviewOut])
def recent_reviews(number: int = Query(10, gt=0, le=100), db: Session = Depends(get_db)):
    return review_service.recent_reviews(db, number)


@router.get("/summary", response_model=ReviewSummary)
def review_summary(bubbler_id: int = Query(..., alias="bubblerId"), db: Session = Depends(get_db)):
    """Average rating and review count for a bubbler."""
    return review_service.rating_summary(db, bubbler_id)


@router.post("", response_model=ReviewOut)
def create_review(
    payload: ReviewCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_onboarded_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Post a review. One per user per bubbler."""
    review = review_service.create_review(db, payload, user)
    xp_service.award_contribution(db, user.id, xp_service.XPReward.ADD_REVIEW, f"review:{review.id}:create")
    background_tasks.add_task(
        notifier.notify,
        notifications.review_created_message(review.id, review.bubbler_id, review.rating, review.comment, user.id),
    )
    return review


@router.delete("")
def delete_review(
    background_tasks: BackgroundTasks,
    review_id: int = Query(..., alias="reviewId"),
    creds: Credentials = Depends(get_credentials),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Delete a review as its author or with the API key (moderation)."""
    if not creds.authenticated:
        raise Unauthorized()
    deleted = review_service.delete_review(db, review_id, creds)
    if creds.api_key_valid:
        xp_service.revoke_contribution(
            db, deleted["user_id"], xp_service.XPReward.ADD_REVIEW, f"review:{review_id}:revoke"
        )
    background_tasks.add_task(
        notifier.notify,
        notifications.review_deleted_message(
            review_id, deleted["bubbler_id"], deleted["user_id"], deleted["comment"], creds.user_id or "API Key"
        ),
    )
    return {"message": f"Deleted review {review_id}"}


@router.post("/report")
def report_review(
    payload: ReviewReport,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_session_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """Forward a review report to the moderation channel."""
    review = review_service.get_review(db, payload.review_id)
    background_tasks.add_task(
        notifier.notify,
        notifications.review_reported_message(review.id, review.bubbler_id, review.comment, user.id, payload.reason),
    )
    logger.info("User %s reported review %s", user.id, review.id)
    return {"message": "Report submitted"}
