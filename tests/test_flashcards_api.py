from fastapi.testclient import TestClient

from conftest import ADMIN_TOKEN, user_headers
from models import FlashcardProgress
from main import app

client = TestClient(app)


def _review(card_id, quality, user="alice"):
    return client.post(
        "/flashcards/review",
        headers=user_headers(user),
        json={"flashcard_id": card_id, "quality": quality},
    )


def test_first_review_creates_progress(make_user, make_flashcards):
    make_user("alice")
    [card] = make_flashcards(1)

    r = _review(card, 4)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["repetitions"] == 1
    assert body["interval"] == 1
    assert body["ease_factor"] == 2.5
    assert body["review_count"] == 1


def test_review_sequence_grows_interval_then_lapse_resets(make_user, make_flashcards):
    make_user("alice")
    [card] = make_flashcards(1)

    intervals = [_review(card, q).json()["interval"] for q in (4, 4, 5)]
    assert intervals == [1, 6, 16]

    lapse = _review(card, 1).json()
    assert lapse["repetitions"] == 0
    assert lapse["interval"] == 0
    assert lapse["review_count"] == 4
    assert lapse["ease_factor"] >= 1.3


def test_bad_quality_is_rejected_and_nothing_written(db, make_user, make_flashcards):
    make_user("alice")
    [card] = make_flashcards(1)

    for bad in (6, -1, None):
        r = _review(card, bad)
        assert r.status_code == 400
        assert r.json()["code"] == "validation"

    # not an integer at all: rejected by the request schema, no coercion
    for bad in ("4", 2.5, 4.0, True):
        assert _review(card, bad).status_code == 422

    assert db.query(FlashcardProgress).count() == 0


def test_review_request_documents_integer_quality():
    schema = client.get("/openapi.json").json()["components"]["schemas"]["ReviewRequest"]
    types = {s.get("type") for s in schema["properties"]["quality"]["anyOf"]}
    assert "integer" in types


def test_unknown_card_or_user(make_user, make_flashcards):
    make_user("alice")
    make_flashcards(1)
    assert _review("nope", 3).status_code == 404
    assert _review("card-000", 3, user="ghost").status_code == 404


def test_review_queue_endpoint(db, make_user, make_flashcards):
    make_user("alice")
    make_flashcards(30)
    _review("card-010", 0)  # lapsed, due again immediately

    r = client.get("/flashcards/review", headers=user_headers(), params={"limit": 5})
    assert r.status_code == 200
    body = r.json()
    assert [c["id"] for c in body["due"]] == ["card-010"]
    assert [c["id"] for c in body["new"]] == ["card-000", "card-001", "card-002", "card-003"]
    assert body["total"] == 5


def test_review_queue_limit_bounds(make_user):
    make_user("alice")
    assert client.get("/flashcards/review", headers=user_headers(), params={"limit": 0}).status_code == 422
    assert client.get("/flashcards/review", headers=user_headers(), params={"limit": 101}).status_code == 422


def test_list_by_chapter_includes_caller_progress(make_user, make_flashcards):
    make_user("alice")
    make_flashcards(3, chapter_id="ch-a", prefix="a")
    make_flashcards(2, chapter_id="ch-b", prefix="b")
    _review("a-001", 5)

    r = client.get("/flashcards", headers=user_headers(), params={"chapter_id": "ch-a"})
    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 3
    by_id = {c["id"]: c for c in body["items"]}
    assert by_id["a-001"]["progress"]["repetitions"] == 1
    assert by_id["a-000"]["progress"] is None


def test_list_requires_scope(make_user):
    make_user("alice")
    r = client.get("/flashcards", headers=user_headers())
    assert r.status_code == 400


def test_create_flashcard_is_admin_only():
    card = {"id": "fc-new", "chapter_id": "ch-x", "front": "2+2", "back": "4"}

    r = client.post("/flashcards", json=card, headers=user_headers())
    assert r.status_code == 401

    r = client.post("/flashcards", json=card, headers={"x-admin-token": ADMIN_TOKEN})
    assert r.status_code == 200
    assert r.json()["difficulty"] == "medium"

    r = client.post("/flashcards", json=card, headers={"x-admin-token": ADMIN_TOKEN})
    assert r.status_code == 409
