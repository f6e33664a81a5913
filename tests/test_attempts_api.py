from fastapi.testclient import TestClient

from conftest import user_headers
from main import app

client = TestClient(app)


def _start(assessment_id="quiz-1", user="alice"):
    r = client.post(f"/assessments/{assessment_id}/attempts", headers=user_headers(user))
    assert r.status_code == 200, r.text
    return r.json()


def test_full_attempt_flow(make_assessment):
    make_assessment("quiz-1", n=4, duration_minutes=10)
    started = _start()
    assert started["total_questions"] == 4
    assert started["time_remaining"] == 600
    aid = started["attempt_id"]

    r = client.patch(
        f"/attempts/{aid}/progress",
        headers=user_headers(),
        json={
            "current_index": 2,
            "time_remaining": 420,
            "answers": [
                {"question_id": "quiz-1-q0", "selected_answer": "A"},
                {"question_id": "quiz-1-q1", "selected_answer": "C", "marked_for_review": True},
            ],
        },
    )
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["attempt"]["current_index"] == 2
    assert body["attempt"]["answers"]["quiz-1-q1"]["marked_for_review"] is True

    r = client.post(f"/attempts/{aid}/submit", headers=user_headers())
    assert r.status_code == 200
    res = r.json()
    assert res["score"] == 1
    assert res["total_questions"] == 4
    assert res["already_submitted"] is False
    assert set(res["section_scores"]) == {"Algebra", "Geometry"}


def test_second_submit_replays_result(make_assessment):
    make_assessment("quiz-1", n=3)
    aid = _start()["attempt_id"]
    client.patch(
        f"/attempts/{aid}/progress",
        headers=user_headers(),
        json={"answers": [{"question_id": "quiz-1-q2", "selected_answer": "A"}]},
    )

    first = client.post(f"/attempts/{aid}/submit", headers=user_headers()).json()
    r = client.post(f"/attempts/{aid}/submit", headers=user_headers())
    assert r.status_code == 200
    second = r.json()
    assert second["already_submitted"] is True
    assert second["score"] == first["score"] == 1
    assert second["completed_at"] == first["completed_at"]


def test_progress_after_submit_is_ok_and_unchanged(make_assessment):
    make_assessment("quiz-1", n=2)
    aid = _start()["attempt_id"]
    client.post(f"/attempts/{aid}/submit", headers=user_headers())

    r = client.patch(
        f"/attempts/{aid}/progress",
        headers=user_headers(),
        json={"answers": [{"question_id": "quiz-1-q0", "selected_answer": "A"}]},
    )
    assert r.status_code == 200
    attempt = r.json()["attempt"]
    assert attempt["status"] == "completed"
    assert attempt["answers"] == {}
    assert attempt["score"] == 0


def test_other_users_attempt_is_forbidden(make_assessment):
    make_assessment("quiz-1", n=2)
    aid = _start(user="alice")["attempt_id"]

    r = client.post(f"/attempts/{aid}/submit", headers=user_headers("mallory"))
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"

    r = client.get(f"/attempts/{aid}", headers=user_headers("mallory"))
    assert r.status_code == 403


def test_unknown_attempt_and_assessment(make_assessment):
    r = client.post("/attempts/999999/submit", headers=user_headers())
    assert r.status_code == 404
    assert r.json() == {"detail": "Attempt not found", "code": "not_found"}

    r = client.post("/assessments/missing/attempts", headers=user_headers())
    assert r.status_code == 404


def test_requires_api_key_and_identity(make_assessment):
    make_assessment("quiz-1", n=1)
    r = client.post("/assessments/quiz-1/attempts", headers={"x-user-id": "alice"})
    assert r.status_code == 401
    r = client.post("/assessments/quiz-1/attempts", headers={"x-api-key": "test-key"})
    assert r.status_code == 401


def test_negative_progress_values_rejected(make_assessment):
    make_assessment("quiz-1", n=1)
    aid = _start()["attempt_id"]
    r = client.patch(f"/attempts/{aid}/progress", headers=user_headers(), json={"current_index": -1})
    assert r.status_code == 422


def test_detail_reveals_answers_only_after_submit(make_assessment):
    make_assessment("quiz-1", n=2)
    aid = _start()["attempt_id"]

    body = client.get(f"/attempts/{aid}", headers=user_headers()).json()
    assert body["attempt"]["status"] == "in_progress"
    assert all(q["correct_answer"] is None for q in body["questions"])

    client.post(f"/attempts/{aid}/submit", headers=user_headers())
    body = client.get(f"/attempts/{aid}", headers=user_headers()).json()
    assert all(q["correct_answer"] == "A" for q in body["questions"])


def test_list_attempts_filters_and_paginates(make_assessment):
    make_assessment("quiz-1", n=1)
    make_assessment("paper-1", n=1, kind="practice_paper")
    for _ in range(3):
        _start("quiz-1")
    _start("paper-1")
    _start("quiz-1", user="bob")

    r = client.get("/attempts", headers=user_headers(), params={"limit": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["pagination"] == {"total": 4, "page": 1, "limit": 2, "pages": 2}
    assert all(item["answers"] is None for item in body["items"])

    r = client.get("/attempts", headers=user_headers(), params={"kind": "practice_paper"})
    assert [i["assessment_id"] for i in r.json()["items"]] == ["paper-1"]

    r = client.get("/attempts", headers=user_headers(), params={"kind": "essay"})
    assert r.status_code == 422
