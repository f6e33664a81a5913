from __future__ import annotations

from fastapi import APIRouter, Depends

from bank import import_bank
from db import SessionLocal
from deps.auth import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reload")
def reload_bank():
    with SessionLocal() as db:
        counts = import_bank(db)
    return {"ok": True, **counts}
