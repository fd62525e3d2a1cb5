"""Tests for the entry mapper."""

import time
from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from app.core.exceptions import MappingError
from app.features.photo_import.mapper import map_entry, parse_taken_at, try_map_entry


class TestParseTakenAt:
    """Tests for parse_taken_at."""

    @pytest.mark.parametrize(
        ("published", "expected"),
        [
            ("2014-10-22 14:24:00Z", date(2014, 10, 22)),
            ("2014-10-22T14:24:00+00:00", date(2014, 10, 22)),
            ("2014-10-22", date(2014, 10, 22)),
            ("Wed, 22 Oct 2014 14:24:00 GMT", date(2014, 10, 22)),
            ("Wed, 22 Oct 2014 23:30:00 -0500", date(2014, 10, 22)),
        ],
    )
    def test_strings(self, published, expected):
        """Test that ISO-8601 and RFC 2822 strings are read."""
        assert parse_taken_at(published) == expected

    def test_struct_time(self):
        """Test that feedparser's parsed form is read."""
        parsed = time.strptime("2014-10-22 14:24:00", "%Y-%m-%d %H:%M:%S")

        assert parse_taken_at(parsed) == date(2014, 10, 22)

    def test_datetime_keeps_own_offset(self):
        """Test that the date is taken in the timestamp's own offset."""
        late_evening = datetime(2014, 10, 22, 23, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert parse_taken_at(late_evening) == date(2014, 10, 22)

    def test_date_passthrough(self):
        """Test that a date is returned unchanged."""
        assert parse_taken_at(date(2014, 10, 22)) == date(2014, 10, 22)

    @pytest.mark.parametrize("published", ["this will break it", "", "   ", None, 1413987840])
    def test_invalid(self, published):
        """Test that unreadable values raise ValueError."""
        with pytest.raises(ValueError):
            parse_taken_at(published)


class TestMapEntry:
    """Tests for map_entry."""

    def test_maps_all_fields(self, entry_factory, feed_url):
        """Test that every field is mapped and popularity starts at 0."""
        record = map_entry(entry_factory(1), feed_url)

        assert record.id == "guid1"
        assert record.source_url == feed_url
        assert record.title == "title1"
        assert record.description == "summary1"
        assert record.taken_at == date(2014, 10, 22)
        assert record.popularity == 0
        assert record.photo_url == "url1"
        assert record.thumbnail_url == "thumbnail_url1"

    def test_never_sets_curated_fields(self, entry_factory, feed_url):
        """Test that tags and album are left empty."""
        record = map_entry(entry_factory(1), feed_url)

        assert record.tags == []
        assert record.album is None

    def test_datetime_published(self, entry_factory, feed_url):
        """Test that an already-parsed timestamp is accepted."""
        entry = entry_factory(1, published=datetime(2014, 10, 22, 14, 24, tzinfo=UTC))

        assert map_entry(entry, feed_url).taken_at == date(2014, 10, 22)

    def test_optional_fields_may_be_missing(self, entry_factory, feed_url):
        """Test that summary and thumbnail are optional."""
        record = map_entry(entry_factory(1, summary=None, thumbnail_url=""), feed_url)

        assert record.description is None
        assert record.thumbnail_url is None

    def test_malformed_timestamp(self, entry_factory, feed_url):
        """Test that a bad timestamp raises MappingError with the entry attached."""
        entry = entry_factory(1, published="this will break it")

        with pytest.raises(MappingError) as exc_info:
            map_entry(entry, feed_url)

        assert exc_info.value.entry is entry
        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.details["entry_id"] == "guid1"

    @pytest.mark.parametrize("field", ["entry_id", "title", "url"])
    def test_missing_required_field(self, entry_factory, feed_url, field):
        """Test that a missing required field raises MappingError."""
        entry = entry_factory(1, **{field: None})

        with pytest.raises(MappingError, match="missing or malformed"):
            map_entry(entry, feed_url)

    def test_blank_title_rejected(self, entry_factory, feed_url):
        """Test that a whitespace-only title is treated as missing."""
        with pytest.raises(MappingError):
            map_entry(entry_factory(1, title="   "), feed_url)

    def test_try_map_entry_returns_error(self, entry_factory, feed_url):
        """Test that try_map_entry returns instead of raising."""
        result = try_map_entry(entry_factory(1, published="this will break it"), feed_url)

        assert isinstance(result, MappingError)

    def test_try_map_entry_returns_record(self, entry_factory, feed_url):
        """Test that try_map_entry returns the record on success."""
        result = try_map_entry(entry_factory(2), feed_url)

        assert not isinstance(result, MappingError)
        assert result.id == "guid2"
