"""Experience points and levels.

A user's level is derived from cumulative XP through ``LEVELS`` and cached on
the user row. Every award or revocation is recorded in ``xp_events`` under an
idempotency key, so re-delivering the same contribution event never credits
twice.
"""
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from waternearme.errors import NotFound
from waternearme.models.user import User
from waternearme.models.xp_event import XpEvent

logger = logging.getLogger(__name__)

# (level, required cumulative XP), ascending.
LEVELS: list[tuple[int, int]] = [
    (1, 0),
    (2, 50),
    (3, 100),
    (4, 150),
    (5, 200),
    (6, 250),
    (7, 300),
    (8, 350),
    (9, 400),
    (10, 450),
]


class XPReward(IntEnum):
    ADD_REVIEW = 10
    EDIT_WAYPOINT = 20
    ADD_WAYPOINT = 30


@dataclass
class XPChange:
    user: User
    previous_level: int

    @property
    def leveled_up(self) -> bool:
        return self.user.level > self.previous_level


def level_for_xp(xp: int) -> int:
    """Highest level whose threshold is <= xp; clamps at the top of the table."""
    level = LEVELS[0][0]
    for lvl, required in LEVELS:
        if xp >= required:
            level = lvl
        else:
            break
    return level


def get_user_xp(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def _apply(db: Session, user_id: str, delta: int, idempotency_key: Optional[str]) -> Optional[XPChange]:
    if idempotency_key and db.query(XpEvent).filter(XpEvent.idempotency_key == idempotency_key).first():
        logger.info("XP event %s already applied; skipping", idempotency_key)
        return None

    user = get_user_xp(db, user_id)
    previous_level = user.level
    new_xp = max((user.xp or 0) + delta, 0)
    applied = new_xp - (user.xp or 0)
    user.xp = new_xp
    user.level = level_for_xp(new_xp)

    if idempotency_key:
        db.add(XpEvent(user_id=user_id, idempotency_key=idempotency_key, delta=applied))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent delivery of the same event won the race.
        db.rollback()
        logger.info("XP event %s applied concurrently; skipping", idempotency_key)
        return None
    db.refresh(user)
    return XPChange(user=user, previous_level=previous_level)


def give_xp(db: Session, user_id: str, amount: int, idempotency_key: Optional[str] = None) -> Optional[XPChange]:
    """Add XP and recompute the level. Returns None if the key was already applied."""
    change = _apply(db, user_id, abs(amount), idempotency_key)
    if change:
        logger.info("Gave %d XP to user %s (now %d XP, level %d)", amount, user_id, change.user.xp, change.user.level)
        if change.leveled_up:
            logger.info("User %s reached level %d", user_id, change.user.level)
    return change


def remove_xp(db: Session, user_id: str, amount: int, idempotency_key: Optional[str] = None) -> Optional[XPChange]:
    """Subtract XP (floored at zero) and recompute the level."""
    change = _apply(db, user_id, -abs(amount), idempotency_key)
    if change:
        logger.info("Removed %d XP from user %s (now %d XP, level %d)", amount, user_id, change.user.xp, change.user.level)
    return change


def award_contribution(db: Session, user_id: Optional[str], reward: XPReward, idempotency_key: str) -> Optional[XPChange]:
    """Best-effort award after a committed contribution; failures are logged, never raised."""
    if not user_id:
        return None
    try:
        return give_xp(db, user_id, int(reward), idempotency_key)
    except (NotFound, SQLAlchemyError):
        db.rollback()
        logger.warning("Could not award %s XP to user %s (%s)", reward.name, user_id, idempotency_key, exc_info=True)
        return None


def revoke_contribution(db: Session, user_id: str, reward: XPReward, idempotency_key: str) -> Optional[XPChange]:
    """Best-effort moderation reversal of an earlier award."""
    try:
        return remove_xp(db, user_id, int(reward), idempotency_key)
    except (NotFound, SQLAlchemyError):
        db.rollback()
        logger.warning("Could not revoke %s XP from user %s (%s)", reward.name, user_id, idempotency_key, exc_info=True)
        return None
