"""Outbound notifications to the moderation chat channel (Discord webhook).

Routers build a ``WebhookMessage`` with one of the ``*_message`` helpers and
hand ``notifier.notify`` to FastAPI's ``BackgroundTasks``. ``notify`` never
raises: a failing sink is logged and the primary operation is unaffected.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
from fastapi import Depends
from pydantic import BaseModel

from waternearme.config import Settings, get_settings

logger = logging.getLogger(__name__)

GREEN = 0x00FF00
BLUE = 0x3498DB
RED = 0xFF0000
ORANGE = 0xFFA500


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class Embed(BaseModel):
    title: str
    fields: list[EmbedField] = []
    color: int
    timestamp: str


class WebhookMessage(BaseModel):
    content: str
    embeds: list[Embed] = []


class Notifier(ABC):
    """Base notifier. Subclasses implement ``send``."""

    @abstractmethod
    def send(self, message: WebhookMessage) -> None:
        """Deliver one message; may raise on transport or HTTP errors."""

    def notify(self, message: WebhookMessage) -> None:
        try:
            self.send(message)
        except Exception:
            title = message.embeds[0].title if message.embeds else message.content
            logger.exception("Notification '%s' could not be delivered", title)


class NullNotifier(Notifier):
    """Used when no webhook URL is configured."""

    def send(self, message: WebhookMessage) -> None:
        logger.debug("No webhook configured; dropping notification: %s", message.content)


class DiscordNotifier(Notifier):
    def __init__(self, webhook_url: str, username: str = "Bubbly", timeout: float = 5.0):
        self.webhook_url = webhook_url
        self.username = username
        self.timeout = timeout

    def send(self, message: WebhookMessage) -> None:
        body: dict[str, Any] = {"username": self.username, **message.model_dump(exclude_none=True)}
        if not body.get("embeds"):
            body.pop("embeds", None)
        response = httpx.post(self.webhook_url, json=body, timeout=self.timeout)
        response.raise_for_status()
        logger.debug("Delivered notification '%s'", message.content)


def get_notifier(settings: Settings = Depends(get_settings)) -> Notifier:
    if not settings.DISCORD_WEBHOOK_URL:
        return NullNotifier()
    return DiscordNotifier(
        settings.DISCORD_WEBHOOK_URL,
        username=settings.NOTIFIER_USERNAME,
        timeout=settings.NOTIFIER_TIMEOUT_SECONDS,
    )


# ── Message builders ───────────────────────────────────────────────


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _field(name: str, value: Any, inline: bool = True) -> EmbedField:
    text = "-" if value is None or value == "" else str(value)
    # Discord rejects field values longer than 1024 characters.
    return EmbedField(name=name, value=text[:1024], inline=inline)


def _message(content: str, title: str, color: int, fields: list[EmbedField]) -> WebhookMessage:
    return WebhookMessage(
        content=content,
        embeds=[Embed(title=title, fields=fields, color=color, timestamp=_now())],
    )


def waypoint_created_message(bubbler: dict[str, Any], actor_id: Optional[str]) -> WebhookMessage:
    return _message(
        f"New waypoint added by {bubbler.get('addedby') or actor_id}",
        "Waypoint Added",
        GREEN,
        [
            _field("ID", bubbler["id"]),
            _field("Name", bubbler["name"]),
            _field("Type", bubbler["type"]),
            _field("Coordinates", f"{bubbler['latitude']}, {bubbler['longitude']}"),
            _field("Verified", bubbler["verified"]),
            _field("Accessible", bubbler["isaccessible"]),
            _field("Dog friendly", bubbler["dogfriendly"]),
            _field("Bottle filler", bubbler["hasbottlefiller"]),
            _field("Added by", f"{bubbler.get('addedby') or '-'} ({actor_id})", inline=False),
        ],
    )


def waypoint_updated_message(bubbler_id: int, name: str, changes: dict[str, Any], actor_id: Optional[str]) -> WebhookMessage:
    fields = [_field("ID", bubbler_id), _field("Name", name), _field("Edited by", actor_id or "API Key")]
    for key, change in changes.items():
        fields.append(_field(key, f"{change['old']} → {change['new']}", inline=False))
    return _message(f"Waypoint {bubbler_id} updated", "Waypoint Updated", BLUE, fields)


def waypoint_deleted_message(bubbler: dict[str, Any]) -> WebhookMessage:
    return _message(
        f"Waypoint {bubbler['id']} deleted via API Key",
        "Waypoint Deleted",
        RED,
        [
            _field("ID", bubbler["id"]),
            _field("Name", bubbler["name"]),
            _field("Coordinates", f"{bubbler['latitude']}, {bubbler['longitude']}"),
            _field("Added by user", bubbler["addedbyuserid"]),
        ],
    )


def review_created_message(review_id: int, bubbler_id: int, rating: float, comment: Optional[str], user_id: str) -> WebhookMessage:
    return _message(
        f"New review by {user_id}",
        "New Review Submitted",
        GREEN,
        [
            _field("Review ID", review_id),
            _field("Bubbler ID", bubbler_id),
            _field("Rating", rating),
            _field("Comment", comment or "No comment", inline=False),
        ],
    )


def review_deleted_message(review_id: int, bubbler_id: int, author_id: str, comment: Optional[str], actor: str) -> WebhookMessage:
    return _message(
        f"Review deleted by {actor}",
        "Review Deleted",
        RED,
        [
            _field("Review ID", review_id),
            _field("Bubbler ID", bubbler_id),
            _field("User ID", author_id),
            _field("Comment", comment or "No comment", inline=False),
        ],
    )


def waypoint_reported_message(waypoint_id: int, reporter_id: str, reason: str) -> WebhookMessage:
    return _message(
        f"Waypoint reported by user {reporter_id}",
        "Waypoint Reported",
        ORANGE,
        [
            _field("Waypoint ID", waypoint_id),
            _field("Reported By", reporter_id),
            _field("Reason", reason, inline=False),
        ],
    )


def review_reported_message(review_id: int, bubbler_id: int, comment: Optional[str], reporter_id: str, reason: str) -> WebhookMessage:
    return _message(
        f"Review reported by {reporter_id}",
        "Review Report Submitted",
        ORANGE,
        [
            _field("Review ID", review_id),
            _field("Reporter ID", reporter_id),
            _field("Reason", reason, inline=False),
            _field("Review Comment", comment or "No comment", inline=False),
            _field("Bubbler ID", bubbler_id),
        ],
    )


def user_reported_message(reporter_id: str, reported_id: str, reason: str) -> WebhookMessage:
    return _message(
        "A user report has been submitted!",
        "User Report",
        ORANGE,
        [
            _field("Reporter User ID", reporter_id),
            _field("Reported User ID", reported_id),
            _field("Reason", reason, inline=False),
        ],
    )
