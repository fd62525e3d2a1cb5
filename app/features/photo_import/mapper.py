"""Map raw feed entries to photo records.

Pure functions: no I/O, no logging. A malformed entry yields a MappingError
carrying the raw entry and the underlying cause; no partial record is ever
produced.
"""

from __future__ import annotations

import time
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from typing import Any

from pydantic import ValidationError

from app.core.exceptions import MappingError
from app.features.photo_import.feed_client import RawEntry
from app.features.photos.schemas import PhotoRecord


def parse_taken_at(published: Any) -> date:
    """Calendar date of an entry's published timestamp.

    Accepts datetimes, dates, ``time.struct_time`` (feedparser's parsed
    form), and ISO-8601 or RFC 2822 strings. Time of day is discarded; the
    date is taken in the timestamp's own offset.

    Raises:
        ValueError: If the value cannot be read as a timestamp.
    """
    if isinstance(published, datetime):
        return published.date()
    if isinstance(published, date):
        return published
    if isinstance(published, time.struct_time):
        return date(published.tm_year, published.tm_mon, published.tm_mday)
    if isinstance(published, str):
        text = published.strip()
        if not text:
            raise ValueError("published is empty")
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        try:
            return parsedate_to_datetime(text).date()
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unrecognised timestamp: {published!r}") from e
    raise ValueError(f"Unsupported published value of type {type(published).__name__}")


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def map_entry(entry: RawEntry, feed_url: str) -> PhotoRecord:
    """Build the photo record for a feed entry.

    Args:
        entry: Raw entry from the feed.
        feed_url: Feed the entry came from, stored as ``source_url``.

    Returns:
        A new record with ``popularity`` 0.

    Raises:
        MappingError: If a required field is missing or malformed.
    """
    try:
        taken_at = parse_taken_at(entry.published)
    except ValueError as e:
        raise MappingError(
            f"Entry {entry.entry_id!r} has an invalid published timestamp: {e}",
            entry=entry,
            cause=e,
        ) from e

    try:
        return PhotoRecord(
            id=_clean(entry.entry_id),
            source_url=feed_url,
            title=_clean(entry.title),
            description=_clean(entry.summary) or None,
            taken_at=taken_at,
            popularity=0,
            photo_url=_clean(entry.url),
            thumbnail_url=_clean(entry.thumbnail_url) or None,
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MappingError(
            f"Entry {entry.entry_id!r} has missing or malformed fields: {fields}",
            entry=entry,
            cause=e,
        ) from e


def try_map_entry(entry: RawEntry, feed_url: str) -> PhotoRecord | MappingError:
    """Like map_entry, but return the MappingError instead of raising it."""
    try:
        return map_entry(entry, feed_url)
    except MappingError as e:
        return e
