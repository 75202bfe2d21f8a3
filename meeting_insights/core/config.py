"""Simple configuration for core library usage."""

from dataclasses import dataclass

DEFAULT_MODEL = "claude-3-5-haiku-latest"
DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_API_VERSION = "2023-06-01"


@dataclass
class AnalyzerConfig:
    """Configuration for the meeting insights core library.

    This is a simplified config suitable for library usage without
    environment variable loading.

    Args:
        api_key: Model provider API key
        base_url: Base URL of the Messages API
        model: Model name sent with every request
        api_version: Value of the anthropic-version header
        max_tokens: Upper bound on reply length
        temperature: Sampling temperature (low keeps replies consistent)
        timeout_s: Total timeout for the model call in seconds
        connect_timeout_s: Connection timeout for the model call in seconds
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    api_version: str = DEFAULT_API_VERSION
    max_tokens: int = 800
    temperature: float = 0.2
    timeout_s: float = 20.0
    connect_timeout_s: float = 10.0

    @property
    def messages_url(self) -> str:
        """Return the full Messages API endpoint."""
        return f"{self.base_url.rstrip('/')}/v1/messages"
