"""
Attempt lifecycle: start -> save progress (any number of times) -> submit.

Applies to quizzes, mock tests and practice papers alike. An attempt moves
from ``in_progress`` to ``completed`` exactly once. That move is a
compare-and-swap on the row (status plus a version counter bumped on every
progress write), so two submits cannot both score, and a submit never scores
answers older than the last committed save.

Re-submitting a completed attempt is not an error: the persisted result is
returned unchanged, flagged ``already_submitted``.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Callable, List, Optional

from core.answers import merge_answers
from core.scoring import score_attempt
from core.store import AttemptStore, as_utc
from errors import Conflict, Forbidden, NotFound, ValidationFailed
from models import Attempt, AttemptStatus, utcnow
from schemas.assessments import QuestionOut
from schemas.attempts import (
    AttemptDetailOut,
    AttemptOut,
    AttemptPageOut,
    Pagination,
    ProgressUpdate,
    StartAttemptOut,
    SubmitResultOut,
    dump_answers,
    dump_section_scores,
    load_answers,
    load_section_scores,
)

logger = logging.getLogger(__name__)

# retries when a concurrent progress save moves the version underneath us
MAX_CAS_RETRIES = 5


class AttemptLifecycle:
    def __init__(self, store: AttemptStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    # --- helpers -----------------------------------------------------------------

    def _load_owned(self, attempt_id: int, owner_id: str) -> Attempt:
        attempt = self.store.get_attempt(attempt_id)
        if attempt is None:
            raise NotFound("Attempt")
        if attempt.owner_id != owner_id:
            raise Forbidden("Attempt belongs to another user")
        return attempt

    @staticmethod
    def _result(attempt: Attempt, already_submitted: bool) -> SubmitResultOut:
        sections = load_section_scores(attempt.section_scores) or {}
        return SubmitResultOut(
            attempt_id=attempt.id,
            score=attempt.score,
            total_questions=attempt.total_questions,
            section_scores=sections,
            obtained_marks=attempt.obtained_marks,
            accuracy=attempt.accuracy,
            completed_at=as_utc(attempt.completed_at),
            time_spent=attempt.time_spent,
            already_submitted=already_submitted,
        )

    # --- operations --------------------------------------------------------------

    def start(self, owner_id: str, assessment_id: str) -> StartAttemptOut:
        if not owner_id or not owner_id.strip():
            raise ValidationFailed("owner id is required")
        if not assessment_id or not assessment_id.strip():
            raise ValidationFailed("assessment id is required")

        assessment = self.store.get_assessment(assessment_id)
        if assessment is None:
            raise NotFound("Assessment")

        self.store.ensure_user(owner_id)

        total = assessment.question_count
        if total is None:
            total = self.store.count_questions(assessment.id)
        time_remaining = assessment.duration_minutes * 60 if assessment.duration_minutes else None

        attempt = self.store.create_attempt(
            owner_id=owner_id,
            assessment_id=assessment.id,
            kind=assessment.kind,
            total_questions=total,
            status=AttemptStatus.IN_PROGRESS.value,
            answers={},
            current_index=0,
            time_remaining=time_remaining,
            started_at=self.clock(),
            version=0,
        )
        logger.info(
            "attempt %s started: owner=%s assessment=%s kind=%s",
            attempt.id,
            owner_id,
            assessment.id,
            assessment.kind,
        )
        return StartAttemptOut(
            attempt_id=attempt.id,
            assessment_id=assessment.id,
            kind=assessment.kind,
            total_questions=total,
            time_remaining=time_remaining,
        )

    def save_progress(self, attempt_id: int, owner_id: str, partial: ProgressUpdate) -> AttemptOut:
        """Autosave. Late saves against a completed attempt are dropped silently."""
        for _ in range(MAX_CAS_RETRIES):
            attempt = self._load_owned(attempt_id, owner_id)
            if attempt.status != AttemptStatus.IN_PROGRESS.value:
                logger.info("attempt %s: ignoring progress after completion", attempt_id)
                return AttemptOut.model_validate(attempt)

            values = {}
            if partial.answers:
                merged = merge_answers(load_answers(attempt.answers), partial.answers, self.clock())
                values["answers"] = dump_answers(merged)
            if partial.current_index is not None:
                values["current_index"] = partial.current_index
            if partial.time_remaining is not None:
                values["time_remaining"] = partial.time_remaining

            if self.store.save_progress_if_current(attempt.id, attempt.version, values):
                return AttemptOut.model_validate(self.store.get_attempt(attempt.id))
            logger.info("attempt %s: progress raced another write, retrying", attempt_id)

        raise Conflict("Attempt is being updated concurrently; retry")

    def submit(self, attempt_id: int, owner_id: str) -> SubmitResultOut:
        for _ in range(MAX_CAS_RETRIES):
            attempt = self._load_owned(attempt_id, owner_id)
            if attempt.status == AttemptStatus.COMPLETED.value:
                return self._result(attempt, already_submitted=True)

            # fetch every scoring input before the transition can commit
            assessment = self.store.get_assessment(attempt.assessment_id)
            if assessment is None:
                raise NotFound("Assessment")
            questions = self.store.get_canonical_questions(
                assessment.id, limit=attempt.total_questions
            )

            result = score_attempt(questions, load_answers(attempt.answers), assessment.total_marks)
            now = self.clock()
            elapsed = (now - as_utc(attempt.started_at)).total_seconds()

            won = self.store.complete_if_current(
                attempt.id,
                attempt.version,
                {
                    "score": result.score,
                    "section_scores": dump_section_scores(result.section_scores),
                    "obtained_marks": result.obtained_marks,
                    "accuracy": result.accuracy,
                    "completed_at": now,
                    "time_spent": max(0, math.floor(elapsed)),
                    "time_remaining": 0,
                },
            )
            if won:
                logger.info(
                    "attempt %s submitted: score=%s/%s", attempt.id, result.score, attempt.total_questions
                )
                return self._result(self.store.get_attempt(attempt.id), already_submitted=False)

            # either another submit won (next loop replays its result) or a save
            # bumped the version (next loop rescores the newer answers)
            logger.info("attempt %s: submit lost compare-and-swap, re-reading", attempt_id)

        raise Conflict("Attempt is being updated concurrently; retry")

    # --- reads -------------------------------------------------------------------

    def get(self, attempt_id: int, owner_id: str) -> AttemptDetailOut:
        attempt = self._load_owned(attempt_id, owner_id)
        reveal = attempt.status == AttemptStatus.COMPLETED.value
        questions: List[QuestionOut] = []
        for row in self.store.get_questions(attempt.assessment_id, limit=attempt.total_questions):
            q = QuestionOut.model_validate(row)
            if not reveal:
                q.correct_answer = None
            questions.append(q)
        return AttemptDetailOut(attempt=AttemptOut.model_validate(attempt), questions=questions)

    def list_attempts(
        self,
        owner_id: str,
        assessment_id: Optional[str] = None,
        kind: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> AttemptPageOut:
        if page < 1 or limit < 1:
            raise ValidationFailed("page and limit must be positive")
        rows, total = self.store.list_attempts(owner_id, assessment_id, kind, page, limit)
        items = [AttemptOut.model_validate(a).model_copy(update={"answers": None}) for a in rows]
        return AttemptPageOut(
            items=items,
            pagination=Pagination(
                total=total, page=page, limit=limit, pages=math.ceil(total / limit)
            ),
        )
