from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from schemas.assessments import QuestionOut

# ---------- Stored records ----------


class AnswerRecord(BaseModel):
    question_id: str
    selected_answer: Optional[str] = None
    marked_for_review: bool = False
    answered_at: Optional[datetime] = None


class SectionScore(BaseModel):
    correct: int = 0
    total: int = 0


AnswerMap = Dict[str, AnswerRecord]
SectionScores = Dict[str, SectionScore]

_answers_adapter = TypeAdapter(AnswerMap)
_sections_adapter = TypeAdapter(SectionScores)


def load_answers(raw: dict | None) -> AnswerMap:
    """Validate the attempts.answers JSON column."""
    return _answers_adapter.validate_python(raw or {})


def dump_answers(answers: AnswerMap) -> dict:
    return _answers_adapter.dump_python(answers, mode="json")


def load_section_scores(raw: dict | None) -> Optional[SectionScores]:
    if raw is None:
        return None
    return _sections_adapter.validate_python(raw)


def dump_section_scores(sections: SectionScores) -> dict:
    return _sections_adapter.dump_python(sections, mode="json")


# ---------- Progress ----------


class AnswerUpdate(BaseModel):
    """One partial answer write. Fields left out of the payload are not touched."""

    question_id: str = Field(min_length=1)
    selected_answer: Optional[str] = None
    marked_for_review: Optional[bool] = None
    # set by clients replaying queued offline writes
    answered_at: Optional[datetime] = None


class ProgressUpdate(BaseModel):
    current_index: Optional[int] = Field(default=None, ge=0)
    time_remaining: Optional[int] = Field(default=None, ge=0)
    answers: Optional[List[AnswerUpdate]] = None


# ---------- Results ----------


class ScoreResult(BaseModel):
    score: int
    section_scores: SectionScores
    obtained_marks: Optional[int] = None
    accuracy: float = 0.0


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    owner_id: str
    assessment_id: str
    kind: str
    status: str
    total_questions: int
    current_index: int
    time_remaining: Optional[int] = None
    score: Optional[int] = None
    section_scores: Optional[SectionScores] = None
    obtained_marks: Optional[int] = None
    accuracy: Optional[float] = None
    started_at: datetime
    completed_at: Optional[datetime] = None
    time_spent: Optional[int] = None
    # usually excluded in list views
    answers: Optional[AnswerMap] = None


class StartAttemptOut(BaseModel):
    attempt_id: int
    assessment_id: str
    kind: str
    total_questions: int
    time_remaining: Optional[int] = None


class SubmitResultOut(BaseModel):
    attempt_id: int
    score: int
    total_questions: int
    section_scores: SectionScores
    obtained_marks: Optional[int] = None
    accuracy: Optional[float] = None
    completed_at: datetime
    time_spent: Optional[int] = None
    # true when this call replayed a result persisted by an earlier submit
    already_submitted: bool = False


class AttemptDetailOut(BaseModel):
    attempt: AttemptOut
    questions: List[QuestionOut]


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class AttemptPageOut(BaseModel):
    ok: bool = True
    items: List[AttemptOut]
    pagination: Pagination
