"""Review service: one review per user per bubbler, rating aggregates."""
import logging
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from waternearme.auth import Credentials
from waternearme.errors import DuplicateReview, Forbidden, NotFound
from waternearme.models.bubbler import Bubbler
from waternearme.models.review import Review
from waternearme.models.user import User
from waternearme.schemas.review import ReviewCreate

logger = logging.getLogger(__name__)


def _require_bubbler(db: Session, bubbler_id: int) -> None:
    if not db.query(Bubbler.id).filter(Bubbler.id == bubbler_id).first():
        raise NotFound("Bubbler not found")


def get_review(db: Session, review_id: int) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFound("Review not found")
    return review


def list_reviews(db: Session, bubbler_id: int) -> list[Review]:
    """Reviews for one bubbler, newest first, with the author loaded."""
    return (
        db.query(Review)
        .options(joinedload(Review.user))
        .filter(Review.bubbler_id == bubbler_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )


def recent_reviews(db: Session, limit: int = 10) -> list[Review]:
    return (
        db.query(Review)
        .options(joinedload(Review.user), joinedload(Review.bubbler))
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .all()
    )


def rating_summary(db: Session, bubbler_id: int) -> dict[str, Any]:
    average, count = (
        db.query(func.avg(Review.rating), func.count(Review.id))
        .filter(Review.bubbler_id == bubbler_id)
        .one()
    )
    return {
        "bubbler_id": bubbler_id,
        "average": round(float(average), 2) if average is not None else None,
        "count": count,
    }


def create_review(db: Session, payload: ReviewCreate, user: User) -> Review:
    """Insert a review; a second review of the same bubbler by the same user is rejected."""
    _require_bubbler(db, payload.bubbler_id)

    existing = (
        db.query(Review.id)
        .filter(Review.user_id == user.id, Review.bubbler_id == payload.bubbler_id)
        .first()
    )
    if existing:
        raise DuplicateReview()

    review = Review(
        bubbler_id=payload.bubbler_id,
        user_id=user.id,
        rating=payload.rating,
        comment=payload.comment,
    )
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission; the constraint is authoritative.
        db.rollback()
        raise DuplicateReview()
    db.refresh(review)
    logger.info("User %s reviewed bubbler %s (rating %s)", user.id, payload.bubbler_id, payload.rating)
    return review


def delete_review(db: Session, review_id: int, creds: Credentials) -> dict[str, Any]:
    """Delete a review as its author, or as the API-key holder.

    Returns the identifying fields of the deleted review.
    """
    review = get_review(db, review_id)
    if not creds.api_key_valid and review.user_id != creds.user_id:
        raise Forbidden("Forbidden: you can only delete your own reviews")

    deleted = {
        "id": review.id,
        "bubbler_id": review.bubbler_id,
        "user_id": review.user_id,
        "comment": review.comment,
    }
    db.delete(review)
    db.commit()
    logger.info("Deleted review %s by %s", review_id, creds.user_id or "API key")
    return deleted

