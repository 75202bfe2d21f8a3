"""Meeting Insights - structured analysis of meeting transcripts.

A Python library that sends meeting transcripts to a large-language-model
provider and returns validated action items, decisions and sentiment, plus an
HTTP client for the Meeting Insights web service.

Usage:
    >>> from meeting_insights import AnalyzerConfig, analyze_meeting
    >>>
    >>> config = AnalyzerConfig(api_key="sk-ant-...")
    >>> result = await analyze_meeting("Alice: let's ship by Friday. Bob: agreed.", config)
    >>> print(result.decisions)
"""

__version__ = "0.1.0"

# Public library API exports
from meeting_insights.api_client import ApiResponseError, MeetingInsightsClient
from meeting_insights.core.analysis import analyze_meeting, build_prompt, extract_json, parse_analysis
from meeting_insights.core.config import AnalyzerConfig

# Export exceptions for library users
from meeting_insights.core.exceptions import (
    AnalyzerError,
    ConfigurationError,
    InvalidResponseError,
    InvalidTranscriptError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnreachableError,
)
from meeting_insights.core.validation import (
    ActionItem,
    AnalysisResult,
    AnalyzeRequest,
    ValidationResult,
    validate_analysis_result,
    validate_analyze_request,
)

__all__ = [
    "__version__",
    # Configuration
    "AnalyzerConfig",
    # Operations
    "analyze_meeting",
    "build_prompt",
    "extract_json",
    "parse_analysis",
    # Validation
    "ActionItem",
    "AnalysisResult",
    "AnalyzeRequest",
    "ValidationResult",
    "validate_analysis_result",
    "validate_analyze_request",
    # HTTP client
    "MeetingInsightsClient",
    "ApiResponseError",
    # Exceptions
    "AnalyzerError",
    "ConfigurationError",
    "InvalidResponseError",
    "InvalidTranscriptError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "UpstreamUnreachableError",
]
