"""Tests for the exception hierarchy and its problem type registry."""

import json
from unittest.mock import MagicMock

import pytest

from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    FeedFetchError,
    MappingError,
    NotFoundError,
    PhotoCreateError,
    PhotoIngestError,
    photo_ingest_exception_handler,
)
from app.core.problem_details import ERROR_TYPES

ALL_ERRORS = [
    FeedFetchError("http://some/mrss.url/feed.xml1"),
    MappingError("Entry 'guid1' has missing or malformed fields: title"),
    PhotoCreateError("guid1"),
    PhotoCreateError("guid1", duplicate=True),
    NotFoundError(),
    ConflictError(),
    BadRequestError(),
]

# Codes produced by the request validation and catch-all handlers
HANDLER_CODES = {"VALIDATION_ERROR", "INTERNAL_ERROR"}


@pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: f"{type(e).__name__}-{e.status_code}")
def test_error_type_uri_matches_code(error: PhotoIngestError):
    """Each error should point at the problem type registered for its code."""
    assert error.code in ERROR_TYPES
    assert error.error_type_uri == ERROR_TYPES[error.code]


def test_every_problem_type_is_raised_somewhere():
    """The registry should not list problem types nothing can produce."""
    produced = {error.code for error in ALL_ERRORS} | HANDLER_CODES

    assert produced == set(ERROR_TYPES)


def test_create_error_status_depends_on_duplicate():
    """A lost insert race is a conflict; any other create failure is a 500."""
    assert PhotoCreateError("guid1", duplicate=True).status_code == 409
    assert PhotoCreateError("guid1").status_code == 500


@pytest.mark.asyncio
async def test_handler_renders_problem_details():
    """The handler should render status, code and type from the error."""
    error = FeedFetchError("http://some/mrss.url/feed.xml1", message="Feed request failed: ConnectError")

    response = await photo_ingest_exception_handler(MagicMock(), error)

    assert response.status_code == 502
    assert response.media_type == "application/problem+json"
    body = json.loads(response.body)
    assert body["type"] == ERROR_TYPES["FEED_FETCH_ERROR"]
    assert body["code"] == "FEED_FETCH_ERROR"
    assert body["detail"] == "Feed request failed: ConnectError"
