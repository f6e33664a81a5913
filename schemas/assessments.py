# schemas/assessments.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models import AssessmentKind

# ---------- Bank import ----------


class QuestionIn(BaseModel):
    id: str = Field(min_length=1)
    prompt: str
    options: List[str] = Field(default_factory=list)
    correct_answer: str
    section: str = "General"


class AssessmentIn(BaseModel):
    id: str = Field(min_length=1)
    kind: AssessmentKind
    title: str
    duration_minutes: Optional[int] = Field(default=None, ge=1)
    question_count: Optional[int] = Field(default=None, ge=0)
    total_marks: Optional[int] = Field(default=None, ge=0)
    questions: List[QuestionIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def _count_within_questions(self) -> "AssessmentIn":
        # an attempt must be able to score every question it counts
        if self.question_count is not None and self.question_count > len(self.questions):
            raise ValueError(
                f"question_count {self.question_count} exceeds the {len(self.questions)} questions given"
            )
        return self


# ---------- Scoring input ----------


class CanonicalQuestion(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    correct_answer: str
    section: str = "General"


# ---------- Responses ----------


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    position: int
    prompt: str
    options: List[str]
    section: str
    # withheld until the attempt is completed
    correct_answer: Optional[str] = None


class AssessmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    kind: str
    title: str
    duration_minutes: Optional[int] = None
    question_count: Optional[int] = None
    total_marks: Optional[int] = None
