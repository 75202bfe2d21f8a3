"""Tests for listing, fetching and deleting stored analyses."""

from unittest.mock import AsyncMock, patch

import pytest

from app.db.repository import StoreError, StoreUnavailableError

TRANSCRIPT = "Alice: let's ship by Friday. Bob: agreed."


@pytest.fixture
def stored(client, analysis_result):
    """Create two stored analyses through the analyze endpoint."""
    records = []
    with patch("app.main.analyze_meeting", new_callable=AsyncMock) as mock_analyze:
        mock_analyze.return_value = analysis_result
        for text in (TRANSCRIPT, "Carol: budget review moved to Monday. Dan: fine by me."):
            response = client.post("/api/analyze", json={"transcript": text})
            assert response.status_code == 200
            records.append(response.json())
    return records


# --- List ---


def test_list_empty_store_returns_404(client):
    """An empty store is reported as not-found, not as an empty array."""
    response = client.get("/api/fetchanalysis")

    assert response.status_code == 404
    assert response.json()["error"] == "No analyses found."


def test_list_returns_analyses_with_transcripts_newest_first(client, stored):
    response = client.get("/api/fetchanalysis")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 2
    assert {item["id"] for item in data} == {record["analysis"]["id"] for record in stored}

    created = [item["created_at"] for item in data]
    assert created == sorted(created, reverse=True)

    by_id = {item["id"]: item for item in data}
    for record in stored:
        item = by_id[record["analysis"]["id"]]
        assert item["transcript"]["id"] == record["id"]
        assert item["transcript"]["text"] == record["text"]
        assert item["transcript"]["created_at"]
        assert item["decisions"] == ["Ship by Friday"]
        assert item["action_items"][0]["owner"] == "Bob"


def test_timestamps_match_across_endpoints(client, stored):
    """Read-back timestamps keep their UTC offset and equal what analyze returned."""
    record = stored[0]
    listed = {item["id"]: item for item in client.get("/api/fetchanalysis").json()}[record["analysis"]["id"]]
    detail = client.get(f"/api/fetchanalysis/{record['analysis']['id']}").json()

    for item in (listed, detail):
        assert item["created_at"] == record["analysis"]["created_at"]
        assert item["transcript"]["created_at"] == record["created_at"]
    assert record["created_at"].endswith("Z")
    assert listed["created_at"].endswith("Z")


@pytest.mark.parametrize(
    "error,status,message",
    [
        (StoreUnavailableError("Cannot reach the database."), 503, "Database connection error."),
        (StoreError("disk I/O error"), 500, "Failed to fetch past analyses."),
    ],
)
def test_list_database_errors(client, error, status, message):
    with patch("app.db.repository.list_analyses", new_callable=AsyncMock, side_effect=error):
        response = client.get("/api/fetchanalysis")

    assert response.status_code == status
    assert response.json()["error"] == message


def test_list_wrong_method(client):
    response = client.post("/api/fetchanalysis")

    assert response.status_code == 405
    assert response.json()["error"] == "Method not allowed. Use GET instead."


# --- Detail ---


def test_fetch_single_analysis(client, stored):
    analysis_id = stored[0]["analysis"]["id"]

    response = client.get(f"/api/fetchanalysis/{analysis_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == analysis_id
    assert data["transcript"]["text"] == TRANSCRIPT


def test_fetch_single_analysis_not_found(client):
    response = client.get("/api/fetchanalysis/does-not-exist")

    assert response.status_code == 404
    assert response.json()["error"] == "Analysis not found."


# --- Delete ---


def test_delete_analysis(client, stored):
    analysis_id = stored[0]["analysis"]["id"]

    response = client.delete("/api/deleteanalysis", params={"id": analysis_id})

    assert response.status_code == 200
    assert response.json() == {"message": "Analysis deleted successfully."}

    remaining = client.get("/api/fetchanalysis").json()
    assert [item["id"] for item in remaining] == [stored[1]["analysis"]["id"]]
    assert client.get(f"/api/fetchanalysis/{analysis_id}").status_code == 404


def test_delete_twice_is_not_found(client, stored):
    analysis_id = stored[0]["analysis"]["id"]

    assert client.delete("/api/deleteanalysis", params={"id": analysis_id}).status_code == 200
    response = client.delete("/api/deleteanalysis", params={"id": analysis_id})

    assert response.status_code == 404
    assert "not found" in response.json()["error"].lower()


def test_delete_never_created_id_is_not_found(client):
    response = client.delete("/api/deleteanalysis", params={"id": "00000000-0000-0000-0000-000000000000"})

    assert response.status_code == 404
    assert "not found" in response.json()["error"].lower()


@pytest.mark.parametrize("query", ["", "?id=", "?id=%20%20"])
def test_delete_missing_id(client, query):
    response = client.delete(f"/api/deleteanalysis{query}")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid or missing analysis ID."


@pytest.mark.parametrize(
    "error,status",
    [
        (StoreUnavailableError("Cannot reach the database."), 503),
        (StoreError("database is locked"), 500),
    ],
)
def test_delete_database_errors(client, error, status):
    with patch("app.db.repository.delete_analysis", new_callable=AsyncMock, side_effect=error):
        response = client.delete("/api/deleteanalysis", params={"id": "abc"})

    assert response.status_code == status
    assert "error" in response.json()


def test_delete_wrong_method(client):
    response = client.get("/api/deleteanalysis", params={"id": "abc"})

    assert response.status_code == 405
    assert response.json()["error"] == "Method not allowed. Use DELETE instead."
    assert response.headers["allow"] == "DELETE"
