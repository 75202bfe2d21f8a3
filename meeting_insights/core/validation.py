"""Schema validation for inbound transcripts and model-produced analyses.

Validators never raise; they return a ``ValidationResult`` whose ``errors``
hold a flattened field breakdown when the input is rejected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

TRANSCRIPT_MIN_LENGTH = 10
TRANSCRIPT_MAX_LENGTH = 5000

T = TypeVar("T", bound=BaseModel)


class AnalyzeRequest(BaseModel):
    """Inbound body for an analysis request."""

    model_config = ConfigDict(extra="forbid")

    transcript: str = Field(
        min_length=TRANSCRIPT_MIN_LENGTH,
        max_length=TRANSCRIPT_MAX_LENGTH,
        description="Raw meeting transcript",
    )

    @field_validator("transcript")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject transcripts that are mostly whitespace."""
        if len(v.strip()) < TRANSCRIPT_MIN_LENGTH:
            raise ValueError(
                f"Transcript must be at least {TRANSCRIPT_MIN_LENGTH} characters long excluding surrounding whitespace"
            )
        return v


class ActionItem(BaseModel):
    """A single task extracted from a meeting."""

    owner: str
    task: str
    deadline: str | None = None


class AnalysisResult(BaseModel):
    """Structured output of a meeting analysis."""

    action_items: list[ActionItem]
    decisions: list[str]
    sentiment: str


@dataclass
class ValidationResult(Generic[T]):
    """Outcome of a validation: typed data on success, flattened errors otherwise."""

    success: bool
    data: T | None = None
    errors: dict[str, Any] = field(default_factory=dict)


def flatten_errors(exc: ValidationError) -> dict[str, Any]:
    """
    Flatten pydantic errors into form-level and per-field message lists.

    Errors without a location (e.g. the whole value had the wrong type) go to
    ``form_errors``; the rest are keyed by their dotted location.
    """
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        if loc:
            field_errors.setdefault(loc, []).append(err["msg"])
        else:
            form_errors.append(err["msg"])
    return {"form_errors": form_errors, "field_errors": field_errors}


def _validate(model: type[T], data: Any) -> ValidationResult[T]:
    try:
        return ValidationResult(success=True, data=model.model_validate(data))
    except ValidationError as e:
        errors = flatten_errors(e)
        logger.warning(f"Invalid {model.__name__} structure: {errors}")
        return ValidationResult(success=False, errors=errors)


def validate_analyze_request(data: Any) -> ValidationResult[AnalyzeRequest]:
    """Validate an inbound ``{"transcript": str}`` body."""
    return _validate(AnalyzeRequest, data)


def validate_analysis_result(data: Any) -> ValidationResult[AnalysisResult]:
    """Validate a parsed model reply against the analysis shape."""
    return _validate(AnalysisResult, data)
