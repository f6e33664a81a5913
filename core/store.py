# core/store.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import (
    Assessment,
    AssessmentQuestion,
    Attempt,
    AttemptStatus,
    Flashcard,
    FlashcardProgress,
    User,
)
from schemas.assessments import CanonicalQuestion

logger = logging.getLogger(__name__)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands timestamps back naive; everything here is stored in UTC."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _scope_filters(chapter_id: Optional[str], subject_id: Optional[str]) -> List[Any]:
    filters = []
    if chapter_id:
        filters.append(Flashcard.chapter_id == chapter_id)
    if subject_id:
        filters.append(Flashcard.subject_id == subject_id)
    return filters


class AttemptStore:
    """Attempt and assessment persistence. Commits are explicit and per call."""

    def __init__(self, db: Session):
        self.db = db

    # ---------- users ----------

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def ensure_user(self, user_id: str, email: Optional[str] = None) -> User:
        """Get-or-create; a non-empty ``email`` overwrites the stored one."""
        user = self.db.get(User, user_id)
        if user is None:
            user = User(id=user_id, email=email)
            self.db.add(user)
            try:
                self.db.commit()
                return user
            except IntegrityError:
                # registered by a concurrent request
                self.db.rollback()
                user = self.db.get(User, user_id)

        if email and user.email != email:
            user.email = email
            self.db.commit()
        return user

    # ---------- assessments ----------

    def get_assessment(self, assessment_id: str) -> Optional[Assessment]:
        return self.db.get(Assessment, assessment_id)

    def list_assessments(self, kind: Optional[str] = None, limit: int = 50) -> List[Assessment]:
        q = sa.select(Assessment)
        if kind:
            q = q.where(Assessment.kind == kind)
        q = q.order_by(Assessment.created_at.desc(), Assessment.id).limit(limit)
        return list(self.db.scalars(q))

    def count_questions(self, assessment_id: str) -> int:
        q = (
            sa.select(sa.func.count())
            .select_from(AssessmentQuestion)
            .where(AssessmentQuestion.assessment_id == assessment_id)
        )
        return self.db.scalar(q) or 0

    def get_questions(
        self, assessment_id: str, limit: Optional[int] = None
    ) -> List[AssessmentQuestion]:
        q = (
            sa.select(AssessmentQuestion)
            .where(AssessmentQuestion.assessment_id == assessment_id)
            .order_by(AssessmentQuestion.position, AssessmentQuestion.id)
        )
        if limit is not None:
            q = q.limit(limit)
        return list(self.db.scalars(q))

    def get_canonical_questions(
        self, assessment_id: str, limit: Optional[int] = None
    ) -> List[CanonicalQuestion]:
        return [
            CanonicalQuestion.model_validate(row)
            for row in self.get_questions(assessment_id, limit)
        ]

    # ---------- attempts ----------

    def create_attempt(self, **values: Any) -> Attempt:
        attempt = Attempt(**values)
        self.db.add(attempt)
        self.db.commit()
        self.db.refresh(attempt)
        return attempt

    def get_attempt(self, attempt_id: int) -> Optional[Attempt]:
        # always a fresh read; callers re-check status after losing a race
        return self.db.get(Attempt, attempt_id, populate_existing=True)

    def list_attempts(
        self,
        owner_id: str,
        assessment_id: Optional[str] = None,
        kind: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Attempt], int]:
        where = [Attempt.owner_id == owner_id]
        if assessment_id:
            where.append(Attempt.assessment_id == assessment_id)
        if kind:
            where.append(Attempt.kind == kind)

        total = self.db.scalar(sa.select(sa.func.count()).select_from(Attempt).where(*where)) or 0
        rows = self.db.scalars(
            sa.select(Attempt)
            .where(*where)
            .order_by(Attempt.started_at.desc(), Attempt.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(rows), total

    def _write_if_current(self, attempt_id: int, version: int, values: Dict[str, Any]) -> bool:
        stmt = (
            sa.update(Attempt)
            .where(
                Attempt.id == attempt_id,
                Attempt.status == AttemptStatus.IN_PROGRESS.value,
                Attempt.version == version,
            )
            .values(version=version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        res = self.db.execute(stmt)
        self.db.commit()
        return res.rowcount == 1

    def save_progress_if_current(
        self, attempt_id: int, version: int, values: Dict[str, Any]
    ) -> bool:
        """Write progress only if the attempt is still in progress at ``version``."""
        return self._write_if_current(attempt_id, version, values)

    def complete_if_current(self, attempt_id: int, version: int, values: Dict[str, Any]) -> bool:
        """
        The in_progress -> completed transition as one conditional UPDATE.
        Exactly one caller can see True for a given attempt.
        """
        values = dict(values, status=AttemptStatus.COMPLETED.value)
        return self._write_if_current(attempt_id, version, values)


class FlashcardStore:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_flashcard(self, flashcard_id: str) -> Optional[Flashcard]:
        return self.db.get(Flashcard, flashcard_id)

    def create_flashcard(self, **values: Any) -> Flashcard:
        card = Flashcard(**values)
        self.db.add(card)
        self.db.commit()
        self.db.refresh(card)
        return card

    def list_flashcards(
        self, chapter_id: Optional[str] = None, subject_id: Optional[str] = None
    ) -> List[Flashcard]:
        q = (
            sa.select(Flashcard)
            .where(*_scope_filters(chapter_id, subject_id))
            .order_by(Flashcard.created_at.desc(), Flashcard.id)
        )
        return list(self.db.scalars(q))

    def get_progress(self, user_id: str, flashcard_id: str) -> Optional[FlashcardProgress]:
        q = sa.select(FlashcardProgress).where(
            FlashcardProgress.user_id == user_id,
            FlashcardProgress.flashcard_id == flashcard_id,
        )
        return self.db.scalars(q).first()

    def progress_for_cards(
        self, user_id: str, flashcard_ids: Iterable[str]
    ) -> Dict[str, FlashcardProgress]:
        ids = list(flashcard_ids)
        if not ids:
            return {}
        q = sa.select(FlashcardProgress).where(
            FlashcardProgress.user_id == user_id,
            FlashcardProgress.flashcard_id.in_(ids),
        )
        return {p.flashcard_id: p for p in self.db.scalars(q)}

    def create_progress(self, user_id: str, flashcard_id: str, now: datetime) -> FlashcardProgress:
        """Create the default row, or return the one a concurrent review just made."""
        progress = FlashcardProgress(
            user_id=user_id,
            flashcard_id=flashcard_id,
            ease_factor=2.5,
            interval=0,
            repetitions=0,
            next_review_date=now,
            review_count=0,
        )
        self.db.add(progress)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info("progress row for %s/%s created concurrently", user_id, flashcard_id)
            progress = self.get_progress(user_id, flashcard_id)
        return progress

    def update_progress(self, progress_id: int, values: Dict[str, Any]) -> FlashcardProgress:
        stmt = (
            sa.update(FlashcardProgress)
            .where(FlashcardProgress.id == progress_id)
            .values(review_count=FlashcardProgress.review_count + 1, **values)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(stmt)
        self.db.commit()
        return self.db.get(FlashcardProgress, progress_id, populate_existing=True)

    def due_progress(
        self,
        user_id: str,
        now: datetime,
        limit: int,
        chapter_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> List[Tuple[FlashcardProgress, Flashcard]]:
        q = (
            sa.select(FlashcardProgress, Flashcard)
            .join(Flashcard, Flashcard.id == FlashcardProgress.flashcard_id)
            .where(
                FlashcardProgress.user_id == user_id,
                FlashcardProgress.next_review_date <= now,
                *_scope_filters(chapter_id, subject_id),
            )
            .order_by(FlashcardProgress.next_review_date.asc(), FlashcardProgress.id)
            .limit(limit)
        )
        return [(p, c) for p, c in self.db.execute(q)]

    def unseen_flashcards(
        self,
        user_id: str,
        limit: int,
        exclude: Iterable[str] = (),
        chapter_id: Optional[str] = None,
        subject_id: Optional[str] = None,
    ) -> List[Flashcard]:
        """Cards this user has no progress row for."""
        seen = sa.select(FlashcardProgress.flashcard_id).where(
            FlashcardProgress.user_id == user_id
        )
        where = [Flashcard.id.not_in(seen), *_scope_filters(chapter_id, subject_id)]
        exclude = list(exclude)
        if exclude:
            where.append(Flashcard.id.not_in(exclude))
        q = (
            sa.select(Flashcard)
            .where(*where)
            .order_by(Flashcard.created_at.asc(), Flashcard.id)
            .limit(limit)
        )
        return list(self.db.scalars(q))
