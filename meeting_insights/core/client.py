"""Messages API requests to the model provider."""

import json
import logging
from typing import Any

import httpx

from meeting_insights.core.config import AnalyzerConfig
from meeting_insights.core.exceptions import (
    ConfigurationError,
    InvalidResponseError,
    UpstreamError,
    UpstreamTimeoutError,
    UpstreamUnreachableError,
)

logger = logging.getLogger(__name__)


def _provider_error_message(response: httpx.Response) -> str:
    """Pull the provider's error message out of a non-2xx reply."""
    try:
        body = response.json()
        return body["error"]["message"]
    except (json.JSONDecodeError, ValueError, KeyError, TypeError):
        return response.text or f"HTTP {response.status_code}"


async def create_message(
    request_body: dict[str, Any],
    config: AnalyzerConfig,
) -> dict[str, Any]:
    """
    Send a Messages API request to the model provider.

    Args:
        request_body: The request body dict (model, max_tokens, messages, ...)
        config: Analyzer configuration for credentials and timeouts

    Returns:
        The decoded JSON reply

    Raises:
        ConfigurationError: If no API key is configured
        UpstreamUnreachableError: If connection to the provider fails
        UpstreamTimeoutError: If the provider does not answer in time
        UpstreamError: If the provider answers with a non-2xx status
        InvalidResponseError: If the reply body is not JSON
    """
    if not config.api_key:
        raise ConfigurationError("No model provider API key configured.")

    url = config.messages_url

    timeout = httpx.Timeout(
        config.timeout_s,
        connect=config.connect_timeout_s,
    )

    headers = {
        "x-api-key": config.api_key,
        "anthropic-version": config.api_version,
        "content-type": "application/json",
    }

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            logger.debug(f"Sending messages request to {url} (model={request_body.get('model')})")
            response = await client.post(url, json=request_body, headers=headers)

    except (httpx.ConnectError, httpx.NetworkError) as e:
        logger.error(f"Connection error to model provider {url}: {e}")
        raise UpstreamUnreachableError(
            f"Connection to model provider failed: {str(e)}",
            upstream=config.base_url,
        ) from e

    except httpx.TimeoutException as e:
        logger.error(f"Timeout error to model provider {url}: {e}")
        raise UpstreamTimeoutError(
            f"Model provider did not respond within {config.timeout_s:g} seconds",
            upstream=config.base_url,
        ) from e

    if response.status_code >= 400:
        message = _provider_error_message(response)
        logger.error(f"Model provider returned {response.status_code}: {message}")
        raise UpstreamError(
            message,
            upstream=config.base_url,
            status_code=response.status_code,
        )

    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Model provider returned non-JSON body: {e}")
        raise InvalidResponseError(
            "Model provider returned invalid JSON",
            raw_text=response.text,
        ) from e
