# core/scoring.py
from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from schemas.assessments import CanonicalQuestion
from schemas.attempts import AnswerRecord, ScoreResult, SectionScore


def round_half_up(x: float) -> int:
    # matches JS Math.round, which the stored schedules and marks were built with
    return int(math.floor(x + 0.5))


def score_attempt(
    questions: Sequence[CanonicalQuestion],
    answers: Mapping[str, AnswerRecord],
    total_marks: Optional[int] = None,
) -> ScoreResult:
    """
    Pure function of (questions, answers).

    Every canonical question counts toward its section's total; it counts
    toward score and the section's correct tally only when the selected answer
    equals the correct answer exactly. Unanswered questions are never correct.
    """
    score = 0
    sections: dict[str, SectionScore] = {}

    for q in questions:
        tally = sections.setdefault(q.section, SectionScore())
        tally.total += 1
        a = answers.get(q.id)
        if a is not None and a.selected_answer is not None and a.selected_answer == q.correct_answer:
            score += 1
            tally.correct += 1

    n = len(questions)
    obtained_marks = None
    if total_marks is not None and n:
        obtained_marks = round_half_up(score * (total_marks / n))

    return ScoreResult(
        score=score,
        section_scores=sections,
        obtained_marks=obtained_marks,
        accuracy=(score / n) * 100 if n else 0.0,
    )
