# app/main.py
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import AppError
from app.core.logging import setup_logging
from app.db.session import init_db

# Import routers (router objects, not modules)
from app.api.ai import router as ai_router
from app.api.assessments import router as assessments_router
from app.api.attempts import router as attempts_router
from app.api.candidates import router as candidates_router
from app.api.colleges import router as colleges_router
from app.api.emails import router as emails_router
from app.api.jobs import router as jobs_router
from app.api.submissions import router as submissions_router
from app.api.templates import router as templates_router
from app.api.users import auth_router, router as users_router

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(
    title="Recruiting Platform",
    version="1.0.0",
    lifespan=lifespan,
)

# --------------------------------------------------
# CORS CONFIG
# --------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    # allow origin variations on localhost (ports) during development
    allow_origin_regex=r"http://localhost(:[0-9]+)?",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --------------------------------------------------
# ERROR ENVELOPE
# --------------------------------------------------
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    content = {"success": False, "message": exc.message}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # ctx may hold exception objects from model validators, keep it out
    errors = [
        {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": message, "errors": errors},
    )


# --------------------------------------------------
# API ROUTES
# --------------------------------------------------
for router in (
    jobs_router,
    candidates_router,
    assessments_router,
    attempts_router,
    submissions_router,
    colleges_router,
    emails_router,
    templates_router,
    users_router,
    auth_router,
    ai_router,
):
    app.include_router(router, prefix="/api/v1")

# Stored uploads (assessment files, resumes)
os.makedirs(settings.STORAGE_DIR, exist_ok=True)
app.mount(settings.FILES_URL_PREFIX, StaticFiles(directory=settings.STORAGE_DIR), name="files")


# --------------------------------------------------
# ROOT HEALTH CHECK
# --------------------------------------------------
@app.get("/")
def health_check():
    return {
        "status": "ok",
        "service": "Recruiting Platform",
        "version": "1.0.0"
    }
