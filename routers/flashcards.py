# routers/flashcards.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.flashcards import create_flashcard, list_flashcards, submit_review
from core.review_queue import build_review_queue
from core.store import FlashcardStore
from db import SessionLocal
from deps.auth import UserId, require_admin
from schemas.flashcards import (
    FlashcardIn,
    FlashcardListOut,
    FlashcardOut,
    ReviewOut,
    ReviewQueueOut,
    ReviewRequest,
)

router = APIRouter(prefix="/flashcards", tags=["flashcards"])


@router.get("/review", response_model=ReviewQueueOut)
def review_queue(
    user_id: UserId,
    chapter_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    limit: int = Query(default=20, ge=1, le=100),
):
    with SessionLocal() as db:
        return build_review_queue(
            FlashcardStore(db), user_id, limit, chapter_id=chapter_id, subject_id=subject_id
        )


@router.post("/review", response_model=ReviewOut)
def review(body: ReviewRequest, user_id: UserId):
    with SessionLocal() as db:
        return submit_review(FlashcardStore(db), user_id, body.flashcard_id, body.quality)


@router.get("", response_model=FlashcardListOut)
def flashcards_in_scope(
    user_id: UserId,
    chapter_id: Optional[str] = None,
    subject_id: Optional[str] = None,
):
    with SessionLocal() as db:
        return list_flashcards(FlashcardStore(db), user_id, chapter_id, subject_id)


@router.post("", response_model=FlashcardOut, dependencies=[Depends(require_admin)])
def new_flashcard(body: FlashcardIn):
    with SessionLocal() as db:
        return create_flashcard(FlashcardStore(db), body)
