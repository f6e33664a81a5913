# routers/attempts.py

from typing import Optional

from fastapi import APIRouter, Query

from core.lifecycle import AttemptLifecycle
from core.store import AttemptStore
from db import SessionLocal
from deps.auth import UserId
from models import AssessmentKind
from schemas.attempts import (
    AttemptDetailOut,
    AttemptPageOut,
    ProgressUpdate,
    StartAttemptOut,
    SubmitResultOut,
)

router = APIRouter(tags=["attempts"])


@router.post("/assessments/{assessment_id}/attempts", response_model=StartAttemptOut)
def start_attempt(assessment_id: str, user_id: UserId):
    with SessionLocal() as db:
        return AttemptLifecycle(AttemptStore(db)).start(user_id, assessment_id)


@router.get("/attempts", response_model=AttemptPageOut)
def list_attempts(
    user_id: UserId,
    assessment_id: Optional[str] = None,
    kind: Optional[AssessmentKind] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    with SessionLocal() as db:
        return AttemptLifecycle(AttemptStore(db)).list_attempts(
            user_id,
            assessment_id=assessment_id,
            kind=kind.value if kind else None,
            page=page,
            limit=limit,
        )


@router.get("/attempts/{attempt_id}", response_model=AttemptDetailOut)
def get_attempt(attempt_id: int, user_id: UserId):
    with SessionLocal() as db:
        return AttemptLifecycle(AttemptStore(db)).get(attempt_id, user_id)


@router.patch("/attempts/{attempt_id}/progress")
def save_progress(attempt_id: int, body: ProgressUpdate, user_id: UserId):
    # A completed attempt answers ok with its unchanged state; autosave never errors on it
    with SessionLocal() as db:
        attempt = AttemptLifecycle(AttemptStore(db)).save_progress(attempt_id, user_id, body)
    return {"ok": True, "attempt": attempt.model_dump(mode="json")}


@router.post("/attempts/{attempt_id}/submit", response_model=SubmitResultOut)
def submit_attempt(attempt_id: int, user_id: UserId):
    with SessionLocal() as db:
        return AttemptLifecycle(AttemptStore(db)).submit(attempt_id, user_id)
