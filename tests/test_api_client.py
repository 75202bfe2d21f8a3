"""Tests for the async HTTP client of the web service."""

import httpx
import pytest

from meeting_insights import ApiResponseError, MeetingInsightsClient

RECORD = {
    "id": "t1",
    "text": "Alice: let's ship by Friday. Bob: agreed.",
    "created_at": "2026-10-18T12:00:00",
    "analysis": {
        "id": "a1",
        "transcript_id": "t1",
        "action_items": [{"owner": "Bob", "task": "Ship", "deadline": "Friday"}],
        "decisions": ["Ship by Friday"],
        "sentiment": "Positive",
        "created_at": "2026-10-18T12:00:00",
    },
}


def _client(handler, api_key: str | None = None) -> MeetingInsightsClient:
    return MeetingInsightsClient("http://service", api_key=api_key, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_analyze_posts_transcript_with_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = request.content
        return httpx.Response(200, json=RECORD)

    async with _client(handler, api_key="secret") as client:
        record = await client.analyze(RECORD["text"])

    assert record == RECORD
    assert seen["path"] == "/api/analyze"
    assert seen["auth"] == "Bearer secret"
    assert b'"transcript"' in seen["body"]


@pytest.mark.asyncio
async def test_analyze_error_carries_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={"error": "Invalid request body structure.", "details": {"field_errors": {"transcript": ["too short"]}}},
        )

    async with _client(handler) as client:
        with pytest.raises(ApiResponseError) as exc_info:
            await client.analyze("short")

    assert exc_info.value.status_code == 400
    assert exc_info.value.error == "Invalid request body structure."
    assert exc_info.value.details["field_errors"]["transcript"] == ["too short"]


@pytest.mark.asyncio
async def test_error_without_body_uses_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    async with _client(handler) as client:
        with pytest.raises(ApiResponseError) as exc_info:
            await client.delete_analysis("a1")

    assert exc_info.value.status_code == 502
    assert exc_info.value.error == "Request to the meeting insights service failed."


@pytest.mark.asyncio
async def test_list_analyses_empty_store():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "No analyses found."})

    async with _client(handler) as client:
        assert await client.list_analyses() == []


@pytest.mark.asyncio
async def test_list_analyses_unavailable_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "Database connection error."})

    async with _client(handler) as client:
        with pytest.raises(ApiResponseError, match="Database connection error"):
            await client.list_analyses()


@pytest.mark.asyncio
async def test_get_analysis_retries_once_on_server_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            return httpx.Response(503, json={"error": "Database connection error."})
        return httpx.Response(200, json=RECORD["analysis"])

    async with _client(handler) as client:
        analysis = await client.get_analysis("a1")

    assert analysis["id"] == "a1"
    assert calls == ["/api/fetchanalysis/a1", "/api/fetchanalysis/a1"]


@pytest.mark.asyncio
async def test_get_analysis_retries_only_once():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(httpx.ConnectError):
            await client.get_analysis("a1")

    assert len(calls) == 2


@pytest.mark.asyncio
async def test_get_analysis_not_found_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "Analysis not found."})

    async with _client(handler) as client:
        assert await client.get_analysis("missing") is None


@pytest.mark.asyncio
async def test_delete_analysis_sends_id_query():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["id"] = request.url.params.get("id")
        return httpx.Response(200, json={"message": "Analysis deleted successfully."})

    async with _client(handler) as client:
        message = await client.delete_analysis("a1")

    assert message == "Analysis deleted successfully."
    assert seen == {"method": "DELETE", "id": "a1"}


@pytest.mark.asyncio
async def test_get_analysis_escapes_id_in_path():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["raw_path"] = request.url.raw_path
        seen["params"] = dict(request.url.params)
        return httpx.Response(404, json={"error": "Analysis not found."})

    async with _client(handler) as client:
        assert await client.get_analysis("a/1?x=2") is None

    assert seen["raw_path"] == b"/api/fetchanalysis/a%2F1%3Fx%3D2"
    assert seen["params"] == {}
