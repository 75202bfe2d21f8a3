"""Persistence gateway for transcripts and analyses.

Every function converts SQLAlchemy failures into ``StoreError`` subclasses so
handlers can tell a missing record from an unreachable database.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models import Analysis, Transcript
from meeting_insights.core.validation import AnalysisResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError, OSError)


class StoreError(Exception):
    """Base exception for persistence failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RecordNotFoundError(StoreError):
    """Raised when the requested record does not exist."""

    pass


class StoreUnavailableError(StoreError):
    """Raised when the database cannot be reached."""

    pass


async def _run(session: AsyncSession, operation: str, work: Callable[[], Awaitable[T]]) -> T:
    """Run ``work`` and translate driver/ORM errors, rolling back on failure."""
    try:
        return await work()
    except StoreError:
        raise
    except _UNAVAILABLE_ERRORS as e:
        await _safe_rollback(session)
        logger.error(f"Database unavailable during {operation}: {e}")
        raise StoreUnavailableError("Cannot reach the database. Please try again later.") from e
    except SQLAlchemyError as e:
        await _safe_rollback(session)
        logger.error(f"Database error during {operation}: {e}")
        raise StoreError(str(e)) from e


async def _safe_rollback(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Rollback failed: {e}")


async def create_transcript_with_analysis(
    session: AsyncSession,
    text: str,
    result: AnalysisResult,
) -> Transcript:
    """Insert a transcript and its analysis in a single transaction."""

    async def work() -> Transcript:
        transcript = Transcript(
            text=text,
            analysis=Analysis(
                action_items=[item.model_dump() for item in result.action_items],
                decisions=list(result.decisions),
                sentiment=result.sentiment or "Unknown",
            ),
        )
        session.add(transcript)
        await session.commit()
        return transcript

    transcript = await _run(session, "create", work)
    logger.info(f"Saved transcript {transcript.id} with analysis {transcript.analysis.id}")
    return transcript


async def list_analyses(session: AsyncSession) -> list[Analysis]:
    """Return every analysis with its transcript, newest first."""

    async def work() -> list[Analysis]:
        stmt = (
            select(Analysis)
            .options(selectinload(Analysis.transcript))
            .order_by(Analysis.created_at.desc())
        )
        rows = await session.scalars(stmt)
        return list(rows.all())

    return await _run(session, "list", work)


async def get_analysis(session: AsyncSession, analysis_id: str) -> Analysis:
    """Return one analysis with its transcript or raise ``RecordNotFoundError``."""

    async def work() -> Analysis:
        stmt = select(Analysis).options(selectinload(Analysis.transcript)).where(Analysis.id == analysis_id)
        analysis = await session.scalar(stmt)
        if analysis is None:
            raise RecordNotFoundError(f"Analysis {analysis_id} not found")
        return analysis

    return await _run(session, "get", work)


async def delete_analysis(session: AsyncSession, analysis_id: str) -> None:
    """Delete an analysis by ID. The owning transcript is kept."""

    async def work() -> None:
        analysis = await session.get(Analysis, analysis_id)
        if analysis is None:
            raise RecordNotFoundError(f"Analysis {analysis_id} not found")
        await session.delete(analysis)
        await session.commit()

    await _run(session, "delete", work)
    logger.info(f"Deleted analysis {analysis_id}")
