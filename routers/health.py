# routers/health.py
import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from alembic.config import Config
from alembic.script import ScriptDirectory
from db import engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("database health check failed: %s", e)
        raise HTTPException(status_code=503, detail=f"db_error: {type(e).__name__}")
    return {"ok": True}


def _code_heads(ini_path: str = "alembic.ini") -> list[str]:
    script = ScriptDirectory.from_config(Config(ini_path))
    return list(script.get_heads())


def _db_revision() -> str | None:
    with engine.connect() as conn:
        try:
            return conn.execute(text("SELECT version_num FROM alembic_version")).scalar_one_or_none()
        except SQLAlchemyError:
            # schema created outside alembic (tests, first boot)
            return None


@router.get("/migrations")
def health_migrations():
    try:
        heads = _code_heads()
    except Exception as e:
        logger.warning("could not read alembic heads: %s", e)
        heads = []

    try:
        db_ver = _db_revision()
    except SQLAlchemyError as e:
        return {"ok": False, "error": f"db_connect_failed: {e}", "code_heads": heads, "db_version": None}

    synced = db_ver in heads if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
