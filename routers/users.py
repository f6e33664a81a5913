# routers/users.py

from typing import Optional

from fastapi import APIRouter

from core.store import AttemptStore
from db import SessionLocal
from deps.auth import UserId
from schemas.users import UserOut, UserSync

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync", response_model=UserOut)
def sync_user(user_id: UserId, body: Optional[UserSync] = None):
    # Register the gateway-asserted identity; safe to call on every sign-in
    with SessionLocal() as db:
        user = AttemptStore(db).ensure_user(user_id, body.email if body else None)
        return UserOut.model_validate(user)
