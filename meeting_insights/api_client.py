"""Async HTTP client for the Meeting Insights web service."""

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Request to the meeting insights service failed."


class ApiResponseError(Exception):
    """Raised when the service answers with a non-success status."""

    def __init__(self, status_code: int, error: str, details: Any = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(f"{status_code}: {error}")


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        raise ApiResponseError(response.status_code, body["error"], body.get("details"))
    raise ApiResponseError(response.status_code, GENERIC_ERROR)


class MeetingInsightsClient:
    """Client for the analyze/list/detail/delete endpoints.

    Use as an async context manager so the underlying connection pool is closed:

        async with MeetingInsightsClient("http://127.0.0.1:8000") as client:
            record = await client.analyze("Alice: let's ship by Friday. Bob: agreed.")
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_s: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "MeetingInsightsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def analyze(self, transcript: str) -> dict[str, Any]:
        """Submit a transcript and return the stored transcript + analysis record."""
        response = await self._client.post("/api/analyze", json={"transcript": transcript})
        _raise_for_error(response)
        return response.json()

    async def list_analyses(self) -> list[dict[str, Any]]:
        """Return all stored analyses newest first; an empty store yields ``[]``."""
        response = await self._client.get("/api/fetchanalysis")
        if response.status_code == 404:
            return []
        _raise_for_error(response)
        return response.json()

    async def get_analysis(self, analysis_id: str) -> dict[str, Any] | None:
        """
        Fetch a single analysis with its transcript.

        Retries once on transport errors and 5xx replies. Returns None when
        the analysis does not exist.
        """
        attempts = 2
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.get(f"/api/fetchanalysis/{quote(analysis_id, safe='')}")
            except httpx.TransportError as e:
                if attempt == attempts:
                    raise
                logger.warning(f"Fetching analysis {analysis_id} failed ({e}), retrying")
                continue

            if response.status_code >= 500 and attempt < attempts:
                logger.warning(f"Fetching analysis {analysis_id} returned {response.status_code}, retrying")
                continue
            if response.status_code == 404:
                return None
            _raise_for_error(response)
            return response.json()
        return None

    async def delete_analysis(self, analysis_id: str) -> str:
        """Delete an analysis and return the service's confirmation message."""
        response = await self._client.delete("/api/deleteanalysis", params={"id": analysis_id})
        _raise_for_error(response)
        return response.json()["message"]
