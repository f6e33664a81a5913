import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from errors import AssessmentError

# Routers
from routers.admin import router as admin_router
from routers.assessments import router as assessments_router
from routers.attempts import router as attempts_router
from routers.flashcards import router as flashcards_router
from routers.health import router as health_router
from routers.users import router as users_router

logger = logging.getLogger("assessment-api")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

DEFAULT_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

app = FastAPI(title="Assessment & Review API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token", "x-user-id"],
)


@app.exception_handler(AssessmentError)
def assessment_error_handler(request: Request, exc: AssessmentError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "code": exc.code})


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(assessments_router)  # /assessments/...
app.include_router(attempts_router)  # /assessments/{id}/attempts, /attempts/...
app.include_router(flashcards_router)  # /flashcards/...
app.include_router(admin_router)  # /admin/...
app.include_router(users_router)  # /users/sync
app.include_router(health_router)  # /health/...
