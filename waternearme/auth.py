"""Request credentials: service API key and database-backed user sessions.

Sessions are issued by the identity provider (magic-link sign-in) and stored
in the ``sessions`` table; this module only resolves a presented session token
to a ``User``. The service API key is compared in constant time.
"""
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from waternearme.config import Settings, get_settings
from waternearme.database import get_db, utcnow
from waternearme.errors import Forbidden, Unauthorized
from waternearme.models.auth_session import AuthSession
from waternearme.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    """What the caller proved: a valid API key, a session user, both, or neither."""

    api_key_valid: bool
    user: Optional[User]

    @property
    def authenticated(self) -> bool:
        return self.api_key_valid or self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user is not None else None


def constant_time_compare(a: Optional[str], b: Optional[str]) -> bool:
    """Constant-time string comparison; empty values never match."""
    if not a or not b:
        return False
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def resolve_session_user(db: Session, token: Optional[str]) -> Optional[User]:
    """Return the user owning an unexpired session token, else None."""
    if not token:
        return None
    auth_session = (
        db.query(AuthSession)
        .filter(AuthSession.session_token == token, AuthSession.expires > utcnow())
        .first()
    )
    return auth_session.user if auth_session else None


def get_credentials(
    request: Request,
    x_api_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Credentials:
    api_key_valid = constant_time_compare(x_api_key, settings.API_KEY)
    if x_api_key and not api_key_valid:
        logger.warning("Invalid API key presented for %s %s", request.method, request.url.path)
    user = resolve_session_user(db, request.cookies.get(settings.SESSION_COOKIE_NAME))
    return Credentials(api_key_valid=api_key_valid, user=user)


def _check_onboarded(user: User) -> None:
    if not user.onboarded:
        raise Forbidden("Complete onboarding (choose a username) before contributing")


def require_api_key_or_session(creds: Credentials = Depends(get_credentials)) -> Credentials:
    """Writers: the API key, or an onboarded session user."""
    if not creds.authenticated:
        raise Unauthorized()
    if creds.user is not None and not creds.api_key_valid:
        _check_onboarded(creds.user)
    return creds


def require_api_key(creds: Credentials = Depends(get_credentials)) -> Credentials:
    if not creds.api_key_valid:
        raise Unauthorized()
    return creds


def require_session_user(creds: Credentials = Depends(get_credentials)) -> User:
    if creds.user is None:
        raise Unauthorized()
    return creds.user


def require_onboarded_user(user: User = Depends(require_session_user)) -> User:
    _check_onboarded(user)
    return user
