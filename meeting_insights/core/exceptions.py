"""Custom exceptions for the meeting insights core library."""


class AnalyzerError(Exception):
    """Base exception for all analyzer errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidTranscriptError(AnalyzerError):
    """Raised when transcript text fails the length or type checks."""

    pass


class ConfigurationError(AnalyzerError):
    """Raised when there is a configuration problem."""

    pass


class InvalidResponseError(AnalyzerError):
    """Raised when the model reply cannot be turned into an analysis."""

    def __init__(self, message: str, raw_text: str | None = None):
        self.raw_text = raw_text
        super().__init__(message)


class UpstreamError(AnalyzerError):
    """Raised when the model provider rejects or fails a request."""

    def __init__(self, message: str, upstream: str | None = None, status_code: int | None = None):
        self.upstream = upstream
        self.status_code = status_code
        super().__init__(message)


class UpstreamUnreachableError(UpstreamError):
    """Raised when the model provider cannot be reached."""

    pass


class UpstreamTimeoutError(UpstreamError):
    """Raised when a request to the model provider times out."""

    pass
