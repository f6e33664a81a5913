from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.store import AttemptStore
from db import SessionLocal
from deps.auth import require_client
from errors import NotFound
from models import AssessmentKind
from schemas.assessments import AssessmentOut, QuestionOut

router = APIRouter(prefix="/assessments", tags=["assessments"], dependencies=[Depends(require_client)])


@router.get("", response_model=List[AssessmentOut])
def list_assessments(
    kind: Optional[AssessmentKind] = None,
    limit: int = Query(default=50, ge=1, le=100),
):
    with SessionLocal() as db:
        rows = AttemptStore(db).list_assessments(kind.value if kind else None, limit)
        return [AssessmentOut.model_validate(a) for a in rows]


@router.get("/{assessment_id}")
def get_assessment_detail(assessment_id: str):
    with SessionLocal() as db:
        store = AttemptStore(db)
        a = store.get_assessment(assessment_id)
        if not a:
            raise NotFound("Assessment")
        # correct answers are only ever shown on a completed attempt
        questions = [
            QuestionOut.model_validate(q).model_dump(exclude={"correct_answer"})
            for q in store.get_questions(a.id, limit=a.question_count)
        ]
        return {"assessment": AssessmentOut.model_validate(a).model_dump(), "questions": questions}
