"""FastAPI application entry point for SurveyKit.

This module initializes the FastAPI application, sets up logging,
registers routers, and maps domain exceptions to HTTP responses.
"""

import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from surveykit.config import get_settings
from surveykit.logging_config import request_id_var, setup_logging, get_logger
from surveykit.models.database import Base, SessionLocal, engine
from surveykit.routes import admin, health, respondent
from surveykit.services.access_gate import (
    AccessDeniedError,
    AccessLockedError,
    AlreadyRespondedError,
)
from surveykit.services.asset_store import AssetRejectedError
from surveykit.services.form_engine import (
    AnswerValidationError,
    InvalidAnswerKeysError,
    RequiredAnswersMissingError,
)
from surveykit.services.question_import import QuestionImportError
from surveykit.services.submission import SubmissionError
from surveykit.services.survey_loader import SurveyLoader, seed_surveys
from surveykit.services.survey_store import (
    SqlSurveyStore,
    StorageError,
    StoragePermissionError,
    SurveyNotFoundError,
)

# Initialize logger (will be configured during startup)
logger = get_logger(__name__)

PERMISSION_HELP = (
    "The storage layer refused this operation. Check that the service "
    "account can read and write the survey database and asset directory."
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup:
    - Configure logging
    - Create the asset directory served under /assets
    - Create missing tables when enabled
    - Seed YAML survey definitions when a directory is configured
    """
    settings = get_settings()
    setup_logging()

    logger.info(
        f"SurveyKit starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Database: {settings.database_url.split('@')[-1] if '@' in settings.database_url else 'configured'}"
    )

    Path(settings.asset_dir).mkdir(parents=True, exist_ok=True)

    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)

    if settings.surveys_dir:
        with SessionLocal() as db:
            seed_surveys(SqlSurveyStore(db), SurveyLoader(settings.surveys_dir))

    yield

    logger.info("SurveyKit shutting down")


app = FastAPI(
    title="SurveyKit",
    description="Survey builder and response collector",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every request with an id and log its outcome."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(request_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code}",
        extra={"request_id": request_id}
    )
    return response


@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information."""
    settings = get_settings()
    return {
        "service": "SurveyKit",
        "version": "1.0.0",
        "environment": settings.environment,
        "status": "operational"
    }


# Register routers
app.include_router(health.router, tags=["Health"])
app.include_router(respondent.router, tags=["Respondent"])
app.include_router(admin.router, tags=["Admin"])
app.mount(
    "/assets",
    StaticFiles(directory=get_settings().asset_dir, check_dir=False),
    name="assets",
)


def error_response(status_code: int, error: str, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, **extra}
    )


@app.exception_handler(SurveyNotFoundError)
async def survey_not_found_handler(request: Request, exc: SurveyNotFoundError) -> JSONResponse:
    return error_response(404, "Survey not found", str(exc))


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError) -> JSONResponse:
    return error_response(403, "Access denied", str(exc))


@app.exception_handler(AccessLockedError)
async def access_locked_handler(request: Request, exc: AccessLockedError) -> JSONResponse:
    return error_response(403, "Survey locked", str(exc))


@app.exception_handler(AlreadyRespondedError)
async def already_responded_handler(request: Request, exc: AlreadyRespondedError) -> JSONResponse:
    return error_response(409, "Already responded", str(exc))


@app.exception_handler(AnswerValidationError)
async def answer_validation_handler(request: Request, exc: AnswerValidationError) -> JSONResponse:
    return error_response(422, "Invalid answer", exc.message, question_ids=[exc.question_id])


@app.exception_handler(RequiredAnswersMissingError)
async def required_missing_handler(request: Request, exc: RequiredAnswersMissingError) -> JSONResponse:
    return error_response(
        422,
        "Required answers missing",
        "Please answer all required questions.",
        question_ids=exc.question_ids,
    )


@app.exception_handler(InvalidAnswerKeysError)
async def invalid_keys_handler(request: Request, exc: InvalidAnswerKeysError) -> JSONResponse:
    return error_response(422, "Invalid answers", str(exc), question_ids=exc.question_ids)


@app.exception_handler(QuestionImportError)
async def question_import_handler(request: Request, exc: QuestionImportError) -> JSONResponse:
    return error_response(422, "Import failed", str(exc))


@app.exception_handler(AssetRejectedError)
async def asset_rejected_handler(request: Request, exc: AssetRejectedError) -> JSONResponse:
    return error_response(422, "Upload rejected", str(exc))


@app.exception_handler(SubmissionError)
async def submission_error_handler(request: Request, exc: SubmissionError) -> JSONResponse:
    return error_response(503, "Submission failed", str(exc))


@app.exception_handler(StoragePermissionError)
async def storage_permission_handler(request: Request, exc: StoragePermissionError) -> JSONResponse:
    logger.error(f"Storage permission error for {request.method} {request.url.path}: {exc}")
    return error_response(403, "Permission denied", f"{exc} {PERMISSION_HELP}")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error(f"Storage error for {request.method} {request.url.path}: {exc}")
    return error_response(503, "Storage unavailable", "The service is temporarily unavailable. Please try again later.")


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs all unhandled exceptions and returns a generic error response
    to prevent leaking sensitive information.
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later."
        }
    )
