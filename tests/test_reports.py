"""Tests for moderation reports and the webhook notifier."""
import httpx
import pytest

from waternearme.config import Settings
from waternearme.services import notifier as notifications
from waternearme.services.notifier import DiscordNotifier, Notifier, NullNotifier, get_notifier
from tests.conftest import API_HEADERS, FailingNotifier, create_test_bubbler, create_test_user


class TestWaypointReport:

    def test_report_waypoint(self, client, db, notifier):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        resp = client.post("/api/waypoints/report",
                           json={"waypointId": bubbler["id"], "reason": "Broken tap"},
                           headers=user["headers"])
        assert resp.status_code == 200
        assert notifier.titles[-1] == "Waypoint Reported"
        fields = {f.name: f.value for f in notifier.messages[-1].embeds[0].fields}
        assert fields["Reason"] == "Broken tap"
        assert fields["Reported By"] == user["id"]

    def test_requires_session(self, client):
        bubbler = create_test_bubbler(client)
        resp = client.post("/api/waypoints/report", json={"waypointId": bubbler["id"], "reason": "x"},
                           headers=API_HEADERS)
        assert resp.status_code == 401

    def test_blank_reason(self, client, db):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        resp = client.post("/api/waypoints/report", json={"waypointId": bubbler["id"], "reason": "  "},
                           headers=user["headers"])
        assert resp.status_code == 400

    def test_unknown_waypoint(self, client, db):
        user = create_test_user(db)
        resp = client.post("/api/waypoints/report", json={"waypointId": 9999, "reason": "Gone"},
                           headers=user["headers"])
        assert resp.status_code == 404


class TestReviewReport:

    def test_report_review(self, client, db, notifier):
        author = create_test_user(db, username="alice")
        reporter = create_test_user(db, username="bob")
        bubbler = create_test_bubbler(client)
        review = client.post("/api/reviews", json={"bubblerId": bubbler["id"], "rating": 1, "comment": "spam"},
                             headers=author["headers"]).json()

        resp = client.post("/api/reviews/report", json={"reviewId": review["id"], "reason": "Spam"},
                           headers=reporter["headers"])
        assert resp.status_code == 200
        assert notifier.titles[-1] == "Review Report Submitted"

    def test_unknown_review(self, client, db):
        reporter = create_test_user(db)
        resp = client.post("/api/reviews/report", json={"reviewId": 9999, "reason": "Spam"},
                           headers=reporter["headers"])
        assert resp.status_code == 404

    def test_requires_session(self, client):
        resp = client.post("/api/reviews/report", json={"reviewId": 1, "reason": "Spam"})
        assert resp.status_code == 401


class TestUserReport:

    def test_report_user(self, client, db, notifier):
        reporter = create_test_user(db, username="alice")
        create_test_user(db, username="troll")
        resp = client.post("/api/user/troll/report", json={"reason": "Abusive reviews"},
                           headers=reporter["headers"])
        assert resp.status_code == 200
        assert resp.json() == {"success": True}
        assert notifier.titles[-1] == "User Report"

    def test_cannot_report_self(self, client, db, notifier):
        reporter = create_test_user(db, username="alice")
        resp = client.post("/api/user/alice/report", json={"reason": "Testing"}, headers=reporter["headers"])
        assert resp.status_code == 400
        assert notifier.messages == []

    def test_unknown_user(self, client, db):
        reporter = create_test_user(db, username="alice")
        resp = client.post("/api/user/nobody/report", json={"reason": "Spam"}, headers=reporter["headers"])
        assert resp.status_code == 404

    def test_report_succeeds_when_sink_fails(self, client, db):
        from waternearme.main import app

        reporter = create_test_user(db, username="alice")
        create_test_user(db, username="troll")
        app.dependency_overrides[get_notifier] = lambda: FailingNotifier()
        resp = client.post("/api/user/troll/report", json={"reason": "Spam"}, headers=reporter["headers"])
        assert resp.status_code == 200


class TestNotifier:

    def test_discord_notifier_posts_payload(self, monkeypatch):
        calls = []

        def fake_post(url, json, timeout):
            calls.append((url, json, timeout))
            return httpx.Response(204, request=httpx.Request("POST", url))

        monkeypatch.setattr(httpx, "post", fake_post)
        sink = DiscordNotifier("https://discord.test/webhook", username="Bubbly", timeout=2.0)
        sink.notify(notifications.user_reported_message("u1", "u2", "Spam"))

        assert len(calls) == 1
        url, body, timeout = calls[0]
        assert url == "https://discord.test/webhook"
        assert timeout == 2.0
        assert body["username"] == "Bubbly"
        assert body["embeds"][0]["title"] == "User Report"

    def test_notify_swallows_http_errors(self, monkeypatch):
        def fake_post(url, json, timeout):
            return httpx.Response(500, request=httpx.Request("POST", url))

        monkeypatch.setattr(httpx, "post", fake_post)
        sink = DiscordNotifier("https://discord.test/webhook")
        sink.notify(notifications.user_reported_message("u1", "u2", "Spam"))

    def test_send_raises_http_errors(self, monkeypatch):
        def fake_post(url, json, timeout):
            return httpx.Response(500, request=httpx.Request("POST", url))

        monkeypatch.setattr(httpx, "post", fake_post)
        sink = DiscordNotifier("https://discord.test/webhook")
        with pytest.raises(httpx.HTTPStatusError):
            sink.send(notifications.user_reported_message("u1", "u2", "Spam"))

    def test_base_notifier_requires_send(self):
        with pytest.raises(TypeError):
            Notifier()

    def test_get_notifier_without_webhook(self):
        assert isinstance(get_notifier(Settings(DISCORD_WEBHOOK_URL="")), NullNotifier)

    def test_get_notifier_with_webhook(self):
        sink = get_notifier(Settings(DISCORD_WEBHOOK_URL="https://discord.test/webhook", NOTIFIER_USERNAME="Bot"))
        assert isinstance(sink, DiscordNotifier)
        assert sink.username == "Bot"

    def test_long_field_values_truncated(self):
        message = notifications.user_reported_message("u1", "u2", "x" * 5000)
        reason = message.embeds[0].fields[-1]
        assert len(reason.value) == 1024

    def test_empty_values_get_placeholder(self):
        message = notifications.review_created_message(1, 2, 4.0, None, "u1")
        comment = message.embeds[0].fields[-1]
        assert comment.value == "No comment"
