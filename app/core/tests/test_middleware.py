"""Tests for request middleware."""

import pytest
from structlog.testing import capture_logs


@pytest.mark.asyncio
async def test_request_id_middleware_generates_id(client):
    """Middleware should generate request ID if not provided."""
    response = await client.get("/health")

    request_id = response.headers.get("X-Request-ID")
    assert request_id is not None
    assert len(request_id) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_middleware_preserves_provided_id(client):
    """Middleware should preserve client-provided request ID."""
    custom_id = "my-custom-request-id"
    response = await client.get("/health", headers={"X-Request-ID": custom_id})

    assert response.headers["X-Request-ID"] == custom_id


@pytest.mark.asyncio
async def test_request_id_middleware_different_ids_per_request(client):
    """Each request should get a unique ID if not provided."""
    response1 = await client.get("/health")
    response2 = await client.get("/health")

    assert response1.headers["X-Request-ID"] != response2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_health_checks_not_access_logged(client):
    """Health check requests should stay out of the access log."""
    with capture_logs() as logs:
        await client.get("/health")

    assert not [e for e in logs if e["event"] == "http.request_completed"]


@pytest.mark.asyncio
async def test_other_requests_are_access_logged(client):
    """Other requests should log method, path and status."""
    with capture_logs() as logs:
        await client.get("/does-not-exist")

    completed = [e for e in logs if e["event"] == "http.request_completed"]
    assert len(completed) == 1
    assert completed[0]["path"] == "/does-not-exist"
    assert completed[0]["status_code"] == 404
