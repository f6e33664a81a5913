"""
SM-2 (SuperMemo 2) review scheduling.

Quality scale:
  0 - complete blackout
  1 - incorrect, but the answer was remembered on seeing it
  2 - incorrect, but the answer seemed easy to recall
  3 - correct, with serious difficulty
  4 - correct, after hesitation
  5 - perfect recall
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

from core.scoring import round_half_up
from errors import ValidationFailed
from models import utcnow
from schemas.flashcards import ReviewSchedule

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6


def validate_quality(quality: Any) -> int:
    # bool is an int subclass; True must not slip through as quality 1
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValidationFailed("quality must be an integer between 0 and 5")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise ValidationFailed("quality must be an integer between 0 and 5")
    return quality


def schedule_review(
    quality: int,
    ease_factor: float = DEFAULT_EASE,
    interval: int = 0,
    repetitions: int = 0,
    now: Optional[datetime] = None,
) -> ReviewSchedule:
    """Compute the next schedule for one review. No side effects."""
    quality = validate_quality(quality)
    now = now or utcnow()

    lapse = MAX_QUALITY - quality
    new_ease = ease_factor + (0.1 - lapse * (0.08 + lapse * 0.02))
    new_ease = max(new_ease, MIN_EASE)

    if quality < PASSING_QUALITY:
        # failed recall: due again immediately
        new_repetitions = 0
        new_interval = 0
    else:
        new_repetitions = repetitions + 1
        if new_repetitions == 1:
            new_interval = FIRST_INTERVAL
        elif new_repetitions == 2:
            new_interval = SECOND_INTERVAL
        else:
            new_interval = round_half_up(interval * new_ease)

    return ReviewSchedule(
        ease_factor=new_ease,
        interval=new_interval,
        repetitions=new_repetitions,
        next_review_date=now + timedelta(days=new_interval),
    )
