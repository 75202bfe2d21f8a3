"""Response schemas for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from meeting_insights.core.validation import ActionItem


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    error: str = Field(description="Human-readable error message")
    details: Any | None = Field(default=None, description="Optional diagnostic details")


class MessageResponse(BaseModel):
    """Simple confirmation body."""

    message: str


class HealthResponse(BaseModel):
    ok: bool
    version: str


class AnalysisRecord(BaseModel):
    """A stored analysis."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    transcript_id: str
    action_items: list[ActionItem]
    decisions: list[str]
    sentiment: str
    created_at: datetime


class TranscriptSummary(BaseModel):
    """A stored transcript without its analysis."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    created_at: datetime


class TranscriptRecord(TranscriptSummary):
    """A stored transcript with the analysis created alongside it (returned by analyze)."""

    analysis: AnalysisRecord


class AnalysisWithTranscript(AnalysisRecord):
    """A stored analysis with its transcript (returned by list and detail)."""

    transcript: TranscriptSummary
