# bank.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel, ValidationError
import sqlalchemy as sa
from sqlalchemy.orm import Session

from models import Assessment, AssessmentQuestion, Flashcard
from schemas.assessments import AssessmentIn
from schemas.flashcards import FlashcardIn

logger = logging.getLogger(__name__)

_BASE = Path(__file__).resolve().parent

M = TypeVar("M", bound=BaseModel)


def bank_dir() -> Path:
    return Path(os.getenv("BANK_DIR") or (_BASE / "data"))


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for idx, line in enumerate(f, 1):
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                # Skip malformed rows instead of failing the whole import
                logger.warning("%s:%d: malformed JSON row skipped", p.name, idx)
                continue


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("%s: malformed JSON file skipped", p.name)
            data = []
    if isinstance(data, list):
        for obj in data:
            yield obj
    elif isinstance(data, dict):
        # one definition per file
        yield data


def _load_dir(d: Path, model: Type[M]) -> List[M]:
    items: List[M] = []
    if not d.exists():
        return items
    for p in sorted(d.rglob("*")):
        if not p.is_file():
            continue
        suf = p.suffix.lower()
        if suf == ".jsonl":
            source = _iter_jsonl(p)
        elif suf == ".json":
            source = _iter_json(p)
        else:
            continue

        for raw in source:
            try:
                items.append(model.model_validate(raw))
            except ValidationError as e:
                logger.warning("%s: invalid %s skipped (%d errors)", p.name, model.__name__, e.error_count())
                continue
    return items


def load_assessments(root: Path | None = None) -> List[AssessmentIn]:
    return _load_dir((root or bank_dir()) / "assessments", AssessmentIn)


def load_flashcards(root: Path | None = None) -> List[FlashcardIn]:
    return _load_dir((root or bank_dir()) / "flashcards", FlashcardIn)


def _questions_exist(db: Session, qids: List[str]) -> bool:
    if not qids:
        return False
    q = sa.select(AssessmentQuestion.id).where(AssessmentQuestion.id.in_(qids)).limit(1)
    return db.scalar(q) is not None


def import_bank(db: Session, root: Path | None = None) -> Dict[str, int]:
    """
    Insert assessments and flashcards found under the bank directory.

    Insert-only: a published definition is immutable, so ids already in the
    database are left as they are and counted as skipped.
    """
    counts = {"assessments": 0, "questions": 0, "flashcards": 0, "skipped": 0}
    # the session does not autoflush, so pending rows are tracked here
    seen_assessments: set[str] = set()
    seen_questions: set[str] = set()
    seen_cards: set[str] = set()

    for a in load_assessments(root):
        qids = [q.id for q in a.questions]
        # question ids are global, not per assessment
        clash = (
            a.id in seen_assessments
            or seen_questions.intersection(qids)
            or db.get(Assessment, a.id) is not None
            or _questions_exist(db, qids)
        )
        if clash or len(set(qids)) != len(qids):
            counts["skipped"] += 1
            continue
        db.add(
            Assessment(
                id=a.id,
                kind=a.kind.value,
                title=a.title,
                duration_minutes=a.duration_minutes,
                question_count=a.question_count,
                total_marks=a.total_marks,
            )
        )
        for pos, q in enumerate(a.questions):
            db.add(
                AssessmentQuestion(
                    id=q.id,
                    assessment_id=a.id,
                    position=pos,
                    prompt=q.prompt,
                    options=q.options,
                    correct_answer=q.correct_answer,
                    section=q.section,
                )
            )
        seen_assessments.add(a.id)
        seen_questions.update(qids)
        counts["assessments"] += 1
        counts["questions"] += len(a.questions)

    for c in load_flashcards(root):
        if c.id in seen_cards or db.get(Flashcard, c.id) is not None:
            counts["skipped"] += 1
            continue
        db.add(Flashcard(**c.model_dump()))
        seen_cards.add(c.id)
        counts["flashcards"] += 1

    db.commit()
    logger.info("bank import: %s", counts)
    return counts
