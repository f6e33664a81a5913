import pytest

from core.scoring import round_half_up, score_attempt
from schemas.assessments import CanonicalQuestion
from schemas.attempts import AnswerRecord


def _questions(n=10):
    sections = ["Algebra", "Geometry", "Statistics"]
    return [
        CanonicalQuestion(id=f"q{i}", correct_answer="A", section=sections[i % 3]) for i in range(n)
    ]


def _answers(pairs):
    return {qid: AnswerRecord(question_id=qid, selected_answer=sel) for qid, sel in pairs}


def test_seven_answered_five_correct():
    qs = _questions(10)
    answers = _answers(
        [("q0", "A"), ("q1", "A"), ("q2", "A"), ("q3", "A"), ("q4", "A"), ("q5", "B"), ("q6", "C")]
    )
    r = score_attempt(qs, answers)
    assert r.score == 5
    assert sum(s.total for s in r.section_scores.values()) == 10
    assert sum(s.correct for s in r.section_scores.values()) == 5
    assert r.section_scores["Algebra"].total == 4  # q0, q3, q6, q9
    assert r.section_scores["Algebra"].correct == 2  # q0, q3
    assert r.accuracy == pytest.approx(50.0)


def test_unanswered_and_review_only_never_correct():
    qs = _questions(3)
    answers = {"q0": AnswerRecord(question_id="q0", marked_for_review=True)}
    r = score_attempt(qs, answers)
    assert r.score == 0
    assert all(s.correct == 0 for s in r.section_scores.values())


def test_answers_for_unknown_questions_are_ignored():
    qs = _questions(2)
    r = score_attempt(qs, _answers([("zzz", "A"), ("q1", "A")]))
    assert r.score == 1


def test_scoring_is_deterministic():
    qs = _questions(6)
    answers = _answers([("q0", "A"), ("q2", "B"), ("q5", "A")])
    assert score_attempt(qs, answers) == score_attempt(qs, answers)


def test_marks_for_practice_papers():
    qs = _questions(4)
    r = score_attempt(qs, _answers([("q0", "A"), ("q1", "A"), ("q2", "A")]), total_marks=10)
    # 3 * 2.5 = 7.5 -> 8
    assert r.obtained_marks == 8
    assert r.accuracy == pytest.approx(75.0)


def test_no_marks_without_total_marks_and_empty_paper():
    assert score_attempt(_questions(2), {}).obtained_marks is None
    r = score_attempt([], {}, total_marks=20)
    assert r.score == 0 and r.obtained_marks is None and r.accuracy == 0.0


@pytest.mark.parametrize("x,expected", [(0.5, 1), (1.5, 2), (2.5, 3), (15.6, 16), (2.49, 2)])
def test_round_half_up(x, expected):
    assert round_half_up(x) == expected
