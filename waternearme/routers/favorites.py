"""Favorite API routes: the signed-in user's bookmarked bubblers."""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from waternearme.auth import require_session_user
from waternearme.database import get_db
from waternearme.errors import Conflict, NotFound
from waternearme.models.bubbler import Bubbler
from waternearme.models.favorite import Favorite
from waternearme.models.user import User
from waternearme.schemas.favorite import FavoriteCreate, FavoriteDeleted, FavoriteOut

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[FavoriteOut])
def list_favorites(user: User = Depends(require_session_user), db: Session = Depends(get_db)):
    return (
        db.query(Favorite)
        .options(joinedload(Favorite.bubbler))
        .filter(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc())
        .all()
    )


@router.post("", response_model=FavoriteOut, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteCreate,
    user: User = Depends(require_session_user),
    db: Session = Depends(get_db),
):
    if not db.query(Bubbler.id).filter(Bubbler.id == payload.bubbler_id).first():
        raise NotFound("Bubbler not found")
    favorite = Favorite(user_id=user.id, bubbler_id=payload.bubbler_id)
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Bubbler is already a favorite")
    db.refresh(favorite)
    logger.info("User %s favorited bubbler %s", user.id, payload.bubbler_id)
    return favorite


@router.delete("", response_model=FavoriteDeleted)
def remove_favorite(
    favorite_id: int = Query(..., alias="id"),
    user: User = Depends(require_session_user),
    db: Session = Depends(get_db),
):
    """Delete one of the caller's favorites; other users' rows are never touched."""
    deleted = (
        db.query(Favorite)
        .filter(Favorite.id == favorite_id, Favorite.user_id == user.id)
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info("User %s removed %d favorite(s) with id %s", user.id, deleted, favorite_id)
    return {"deleted": deleted}
