"""Tests for reviews: posting, uniqueness, listing, aggregates and deletion."""
from waternearme.models.review import Review
from waternearme.models.user import User
from tests.conftest import API_HEADERS, create_test_bubbler, create_test_user


def _post_review(client, headers, bubbler_id, rating=4, comment="Cold and clean"):
    return client.post(
        "/api/reviews",
        json={"bubblerId": bubbler_id, "rating": rating, "comment": comment},
        headers=headers,
    )


class TestReviewCreate:

    def test_create_review(self, client, db):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        resp = _post_review(client, user["headers"], bubbler["id"])
        assert resp.status_code == 200
        data = resp.json()
        assert data["bubblerId"] == bubbler["id"]
        assert data["userId"] == user["id"]
        assert data["rating"] == 4
        assert data["comment"] == "Cold and clean"
        assert data["user"] == {"username": "alice"}

    def test_create_review_awards_xp(self, client, db):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        _post_review(client, user["headers"], bubbler["id"])
        db.expire_all()
        assert db.query(User).filter(User.id == user["id"]).one().xp == 10

    def test_create_review_notifies(self, client, db, notifier):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        _post_review(client, user["headers"], bubbler["id"])
        assert notifier.titles[-1] == "New Review Submitted"

    def test_duplicate_review_rejected(self, client, db):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        assert _post_review(client, user["headers"], bubbler["id"]).status_code == 200
        resp = _post_review(client, user["headers"], bubbler["id"], rating=1)
        assert resp.status_code == 409
        assert db.query(Review).count() == 1

    def test_two_users_may_review_same_bubbler(self, client, db):
        alice = create_test_user(db, username="alice")
        bob = create_test_user(db, username="bob")
        bubbler = create_test_bubbler(client)
        assert _post_review(client, alice["headers"], bubbler["id"]).status_code == 200
        assert _post_review(client, bob["headers"], bubbler["id"]).status_code == 200
        assert db.query(Review).count() == 2

    def test_unknown_bubbler(self, client, db):
        user = create_test_user(db)
        resp = _post_review(client, user["headers"], 9999)
        assert resp.status_code == 404

    def test_rating_out_of_range(self, client, db):
        user = create_test_user(db)
        bubbler = create_test_bubbler(client)
        assert _post_review(client, user["headers"], bubbler["id"], rating=0).status_code == 400
        assert _post_review(client, user["headers"], bubbler["id"], rating=6).status_code == 400
        assert db.query(Review).count() == 0

    def test_requires_session(self, client):
        bubbler = create_test_bubbler(client)
        assert _post_review(client, {}, bubbler["id"]).status_code == 401
        assert _post_review(client, API_HEADERS, bubbler["id"]).status_code == 401

    def test_requires_onboarding(self, client, db):
        newcomer = create_test_user(db, username=None)
        bubbler = create_test_bubbler(client)
        resp = _post_review(client, newcomer["headers"], bubbler["id"])
        assert resp.status_code == 403


class TestReviewRead:

    def test_list_newest_first(self, client, db):
        alice = create_test_user(db, username="alice")
        bob = create_test_user(db, username="bob")
        bubbler = create_test_bubbler(client)
        _post_review(client, alice["headers"], bubbler["id"], comment="first")
        _post_review(client, bob["headers"], bubbler["id"], comment="second")

        resp = client.get(f"/api/reviews?bubblerId={bubbler['id']}")
        assert resp.status_code == 200
        assert [r["comment"] for r in resp.json()] == ["second", "first"]
        assert resp.json()[0]["user"]["username"] == "bob"

    def test_list_empty(self, client):
        bubbler = create_test_bubbler(client)
        resp = client.get(f"/api/reviews?bubblerId={bubbler['id']}")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_list_requires_bubbler_id(self, client):
        assert client.get("/api/reviews").status_code == 400

    def test_summary(self, client, db):
        alice = create_test_user(db, username="alice")
        bob = create_test_user(db, username="bob")
        bubbler = create_test_bubbler(client)
        _post_review(client, alice["headers"], bubbler["id"], rating=5)
        _post_review(client, bob["headers"], bubbler["id"], rating=2)

        resp = client.get(f"/api/reviews/summary?bubblerId={bubbler['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"bubblerId": bubbler["id"], "average": 3.5, "count": 2}

    def test_summary_without_reviews(self, client):
        bubbler = create_test_bubbler(client)
        resp = client.get(f"/api/reviews/summary?bubblerId={bubbler['id']}")
        assert resp.json() == {"bubblerId": bubbler["id"], "average": None, "count": 0}

    def test_recent_includes_bubbler_name(self, client, db):
        user = create_test_user(db)
        first = create_test_bubbler(client, name="First")
        second = create_test_bubbler(client, name="Second")
        _post_review(client, user["headers"], first["id"])
        _post_review(client, user["headers"], second["id"])

        resp = client.get("/api/reviews/recent?number=1")
        assert resp.status_code == 200
        reviews = resp.json()
        assert len(reviews) == 1
        assert reviews[0]["bubbler"] == {"name": "Second"}


class TestReviewDelete:

    def _setup(self, client, db):
        author = create_test_user(db, username="alice")
        bubbler = create_test_bubbler(client)
        review = _post_review(client, author["headers"], bubbler["id"]).json()
        return author, review

    def test_author_can_delete(self, client, db, notifier):
        author, review = self._setup(client, db)
        resp = client.delete(f"/api/reviews?reviewId={review['id']}", headers=author["headers"])
        assert resp.status_code == 200
        assert db.query(Review).count() == 0
        assert notifier.titles[-1] == "Review Deleted"

    def test_author_delete_keeps_xp(self, client, db):
        author, review = self._setup(client, db)
        client.delete(f"/api/reviews?reviewId={review['id']}", headers=author["headers"])
        db.expire_all()
        assert db.query(User).filter(User.id == author["id"]).one().xp == 10

    def test_other_user_forbidden(self, client, db):
        _, review = self._setup(client, db)
        other = create_test_user(db, username="mallory")
        resp = client.delete(f"/api/reviews?reviewId={review['id']}", headers=other["headers"])
        assert resp.status_code == 403
        assert db.query(Review).count() == 1

    def test_api_key_delete_revokes_xp(self, client, db):
        author, review = self._setup(client, db)
        resp = client.delete(f"/api/reviews?reviewId={review['id']}", headers=API_HEADERS)
        assert resp.status_code == 200
        db.expire_all()
        assert db.query(User).filter(User.id == author["id"]).one().xp == 0

    def test_unauthenticated(self, client, db):
        _, review = self._setup(client, db)
        resp = client.delete(f"/api/reviews?reviewId={review['id']}")
        assert resp.status_code == 401

    def test_not_found(self, client):
        resp = client.delete("/api/reviews?reviewId=9999", headers=API_HEADERS)
        assert resp.status_code == 404

    def test_review_again_after_delete(self, client, db):
        author, review = self._setup(client, db)
        client.delete(f"/api/reviews?reviewId={review['id']}", headers=author["headers"])
        resp = _post_review(client, author["headers"], review["bubblerId"])
        assert resp.status_code == 200
