# core/review_queue.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from core.flashcards import card_out
from core.store import FlashcardStore
from errors import NotFound, ValidationFailed
from models import utcnow
from schemas.flashcards import FlashcardOut, ReviewQueueOut

logger = logging.getLogger(__name__)


def assemble_queue(
    due: Sequence[FlashcardOut], candidates: Sequence[FlashcardOut], limit: int
) -> Tuple[List[FlashcardOut], List[FlashcardOut]]:
    """
    Due cards first (as given, capped at ``limit``), then fill the remaining
    slots with candidates that are not already due.
    """
    due = list(due)[:limit]
    remaining = limit - len(due)
    if remaining <= 0:
        return due, []
    due_ids = {c.id for c in due}
    new = [c for c in candidates if c.id not in due_ids][:remaining]
    return due, new


def build_review_queue(
    store: FlashcardStore,
    user_id: str,
    limit: int,
    chapter_id: Optional[str] = None,
    subject_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ReviewQueueOut:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationFailed("limit must be a positive integer")
    if store.get_user(user_id) is None:
        raise NotFound("User")
    now = now or utcnow()

    due_rows = store.due_progress(user_id, now, limit, chapter_id, subject_id)
    due = [card_out(card, progress) for progress, card in due_rows]

    candidates: List[FlashcardOut] = []
    remaining = limit - len(due)
    if remaining > 0:
        unseen = store.unseen_flashcards(
            user_id,
            remaining,
            exclude=[c.id for c in due],
            chapter_id=chapter_id,
            subject_id=subject_id,
        )
        candidates = [card_out(card) for card in unseen]

    due, new = assemble_queue(due, candidates, limit)
    logger.info("review queue for %s: %d due, %d new", user_id, len(due), len(new))
    return ReviewQueueOut(due=due, new=new, total=len(due) + len(new))
