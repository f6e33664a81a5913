from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FlashcardIn(BaseModel):
    id: str = Field(min_length=1)
    chapter_id: str = Field(min_length=1)
    subject_id: Optional[str] = None
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)
    difficulty: str = "medium"
    tags: Optional[List[str]] = None


class ProgressOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: Optional[datetime] = None
    review_count: int
    last_quality: Optional[int] = None


class FlashcardOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    chapter_id: str
    subject_id: Optional[str] = None
    front: str
    back: str
    difficulty: str
    tags: Optional[List[str]] = None
    progress: Optional[ProgressOut] = None


class ReviewSchedule(BaseModel):
    """SM-2 output for one review."""

    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime


class ReviewRequest(BaseModel):
    flashcard_id: str = Field(min_length=1)
    # strict: no "4" or 4.0 coercion. Range is checked by the scheduler (400)
    quality: Optional[int] = Field(default=None, strict=True)


class ReviewOut(BaseModel):
    flashcard_id: str
    quality: int
    ease_factor: float
    interval: int
    repetitions: int
    next_review_date: datetime
    review_count: int
    last_reviewed_at: datetime


class ReviewQueueOut(BaseModel):
    due: List[FlashcardOut]
    new: List[FlashcardOut]
    total: int


class FlashcardListOut(BaseModel):
    items: List[FlashcardOut]
    total: int
