"""FastAPI application entry point for the Meeting Insights service."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, get_settings
from app.db import repository
from app.db.database import close_db, get_db, init_db
from app.db.repository import RecordNotFoundError, StoreError, StoreUnavailableError
from app.schemas import (
    AnalysisWithTranscript,
    ErrorResponse,
    HealthResponse,
    MessageResponse,
    TranscriptRecord,
)
from app.security import APIKeyMiddleware, MaxBodySizeMiddleware, RequestIDMiddleware
from meeting_insights.core.analysis import analyze_meeting
from meeting_insights.core.exceptions import AnalyzerError
from meeting_insights.core.logging import setup_logging
from meeting_insights.core.validation import validate_analyze_request

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def _load_settings_safe() -> Settings | None:
    """Load settings, returning None when config is unavailable (e.g. tests, docs builds)."""
    try:
        return get_settings()
    except ValueError:
        return None


def _error(status_code: int, error: str, details=None) -> HTTPException:  # noqa: ANN001
    """Build an HTTPException whose detail is an ``ErrorResponse`` body."""
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, details=details).model_dump(),
    )


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Open the database for the lifetime of the app. Missing config aborts startup."""
    settings = get_settings()
    await init_db(settings.database_url)
    try:
        yield
    finally:
        await close_db()


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": ..., "details": ...}`` bodies."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    elif exc.status_code == 405:
        allow = (exc.headers or {}).get("Allow", "")
        methods = [m.strip() for m in allow.split(",") if m.strip() and m.strip() != "HEAD"]
        content = {"error": f"Method not allowed. Use {' or '.join(methods) or 'another method'} instead."}
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed query/path parameters as client errors."""
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters.", "details": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    """Build and return the FastAPI application with all middleware configured."""
    settings = _load_settings_safe()

    if settings is not None:
        setup_logging(settings.log_level, sql_echo=settings.db_echo_bool)

    application = FastAPI(
        title="Meeting Insights",
        description="Extracts action items, decisions and sentiment from meeting transcripts",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Each add_middleware call wraps the ones before it, so the last added runs
    # first. Request order: CORS, request ID, API key, body size guard.
    application.add_middleware(
        MaxBodySizeMiddleware,
        max_bytes=settings.max_body_bytes if settings else 65_536,
    )
    application.add_middleware(
        APIKeyMiddleware,
        api_key=settings.api_key if settings else None,
    )
    # Outside the guards so 401/413 replies carry X-Request-ID too
    application.add_middleware(RequestIDMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins_list if settings else [],
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    return application


app = create_app()


@app.get("/health")
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(ok=True, version=__version__)


@app.post("/api/analyze", responses=_ERROR_RESPONSES)
async def analyze(request: Request, db: AsyncSession = Depends(get_db)) -> TranscriptRecord:
    """
    Analyze a meeting transcript and store the result.

    Validates the ``{"transcript": str}`` body, asks the model provider for
    action items, decisions and sentiment, then persists the transcript and
    its analysis together. Nothing is stored unless the model call succeeds.
    """
    settings = get_settings()

    try:
        body_bytes = await request.body()
        try:
            request_body = json.loads(body_bytes) if body_bytes else None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise _error(400, "Invalid JSON in request body.", str(e))

        if not isinstance(request_body, dict):
            raise _error(400, "Invalid or empty request body. Expected JSON.")

        validation = validate_analyze_request(request_body)
        if not validation.success:
            raise _error(400, "Invalid request body structure.", validation.errors)

        transcript = validation.data.transcript

        try:
            analysis = await analyze_meeting(transcript, settings.to_analyzer_config())
        except AnalyzerError as e:
            logger.error(f"AI analysis failed: {e.message}")
            raise _error(500, "AI analysis failed.", e.message)

        try:
            saved = await repository.create_transcript_with_analysis(db, transcript, analysis)
        except StoreUnavailableError as e:
            raise _error(503, e.message)
        except StoreError as e:
            raise _error(500, "Failed to save analysis results to database.", e.message)

        return TranscriptRecord.model_validate(saved)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error in analyze: {e}")
        raise _error(500, "Unexpected server error.")


@app.get("/api/fetchanalysis", responses=_ERROR_RESPONSES)
async def fetch_analyses(db: AsyncSession = Depends(get_db)) -> list[AnalysisWithTranscript]:
    """List every stored analysis with its transcript, newest first. 404 when there are none."""
    try:
        analyses = await repository.list_analyses(db)
    except StoreUnavailableError:
        raise _error(503, "Database connection error.")
    except StoreError as e:
        raise _error(500, "Failed to fetch past analyses.", e.message)
    except Exception as e:
        logger.exception(f"Unexpected error in fetch_analyses: {e}")
        raise _error(500, "Unexpected server error.")

    if not analyses:
        raise _error(404, "No analyses found.")

    return [AnalysisWithTranscript.model_validate(a) for a in analyses]


@app.get("/api/fetchanalysis/{analysis_id}", responses=_ERROR_RESPONSES)
async def fetch_analysis(analysis_id: str, db: AsyncSession = Depends(get_db)) -> AnalysisWithTranscript:
    """Return a single stored analysis with its transcript."""
    try:
        analysis = await repository.get_analysis(db, analysis_id)
    except RecordNotFoundError:
        raise _error(404, "Analysis not found.")
    except StoreUnavailableError:
        raise _error(503, "Database connection error.")
    except StoreError as e:
        raise _error(500, "Failed to fetch analysis.", e.message)
    except Exception as e:
        logger.exception(f"Unexpected error in fetch_analysis: {e}")
        raise _error(500, "Unexpected server error.")

    return AnalysisWithTranscript.model_validate(analysis)


@app.delete("/api/deleteanalysis", responses=_ERROR_RESPONSES)
async def delete_analysis(
    analysis_id: str | None = Query(default=None, alias="id"),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Delete an analysis by ID. Its transcript is left in place."""
    if analysis_id is None or not analysis_id.strip():
        raise _error(400, "Invalid or missing analysis ID.")

    try:
        await repository.delete_analysis(db, analysis_id.strip())
    except RecordNotFoundError:
        raise _error(404, "Analysis not found. It may have already been deleted.")
    except StoreUnavailableError:
        raise _error(503, "Cannot reach the database. Please try again later.")
    except StoreError as e:
        raise _error(500, "Database error occurred while deleting analysis.", e.message)
    except Exception as e:
        logger.exception(f"Unexpected error in delete_analysis: {e}")
        raise _error(500, "Unexpected server error while deleting analysis.")

    return MessageResponse(message="Analysis deleted successfully.")


def serve() -> None:
    """Run the service with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
    )


if __name__ == "__main__":
    serve()
