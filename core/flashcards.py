# core/flashcards.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from core.sm2 import schedule_review, validate_quality
from core.store import FlashcardStore, as_utc
from errors import Conflict, NotFound, ValidationFailed
from models import Flashcard, FlashcardProgress, utcnow
from schemas.flashcards import FlashcardIn, FlashcardListOut, FlashcardOut, ProgressOut, ReviewOut

logger = logging.getLogger(__name__)


def card_out(card: Flashcard, progress: Optional[FlashcardProgress] = None) -> FlashcardOut:
    out = FlashcardOut.model_validate(card)
    if progress is not None:
        out.progress = ProgressOut.model_validate(progress)
    return out


def _require_user(store: FlashcardStore, user_id: str) -> None:
    if not user_id or store.get_user(user_id) is None:
        raise NotFound("User")


def submit_review(
    store: FlashcardStore,
    user_id: str,
    flashcard_id: str,
    quality: Any,
    now: Optional[datetime] = None,
) -> ReviewOut:
    """Apply one SM-2 review. A rejected quality leaves nothing written."""
    quality = validate_quality(quality)
    _require_user(store, user_id)
    if not flashcard_id or store.get_flashcard(flashcard_id) is None:
        raise NotFound("Flashcard")
    now = now or utcnow()

    progress = store.get_progress(user_id, flashcard_id)
    if progress is None:
        progress = store.create_progress(user_id, flashcard_id, now)

    schedule = schedule_review(
        quality,
        ease_factor=progress.ease_factor,
        interval=progress.interval,
        repetitions=progress.repetitions,
        now=now,
    )
    updated = store.update_progress(
        progress.id,
        {
            "ease_factor": schedule.ease_factor,
            "interval": schedule.interval,
            "repetitions": schedule.repetitions,
            "next_review_date": schedule.next_review_date,
            "last_reviewed_at": now,
            "last_quality": quality,
        },
    )
    logger.info(
        "review %s/%s: quality=%s interval=%sd reps=%s",
        user_id,
        flashcard_id,
        quality,
        schedule.interval,
        schedule.repetitions,
    )
    return ReviewOut(
        flashcard_id=flashcard_id,
        quality=quality,
        ease_factor=schedule.ease_factor,
        interval=schedule.interval,
        repetitions=schedule.repetitions,
        next_review_date=schedule.next_review_date,
        review_count=updated.review_count,
        last_reviewed_at=as_utc(updated.last_reviewed_at),
    )


def list_flashcards(
    store: FlashcardStore,
    user_id: str,
    chapter_id: Optional[str] = None,
    subject_id: Optional[str] = None,
) -> FlashcardListOut:
    if not chapter_id and not subject_id:
        raise ValidationFailed("chapter_id or subject_id is required")
    _require_user(store, user_id)

    cards = store.list_flashcards(chapter_id, subject_id)
    progress = store.progress_for_cards(user_id, (c.id for c in cards))
    items = [card_out(card, progress.get(card.id)) for card in cards]
    return FlashcardListOut(items=items, total=len(items))


def create_flashcard(store: FlashcardStore, card: FlashcardIn) -> FlashcardOut:
    if store.get_flashcard(card.id) is not None:
        raise Conflict(f"Flashcard {card.id} already exists")
    row = store.create_flashcard(**card.model_dump())
    logger.info("flashcard %s created in chapter %s", row.id, row.chapter_id)
    return FlashcardOut.model_validate(row)
