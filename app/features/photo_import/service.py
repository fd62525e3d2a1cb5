"""Photo import run: fetch one feed and store its new entries.

Failure policy:

- The feed cannot be fetched: one warning, the run ends with nothing
  processed. The run still counts as complete; no retry happens here.
- An entry cannot be mapped or stored: one warning naming the entry, then
  the next entry. Nothing from feed content ends a run early.
- An entry whose id is already stored is skipped without reading or
  comparing it, so curated fields and popularity are never touched.

Each entry produces an explicit EntryResult which is folded into the run's
ImportSummary.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from app.core.config import Settings, get_settings
from app.core.database import get_session_maker
from app.core.exceptions import MappingError, PhotoCreateError, PhotoIngestError
from app.core.logging import get_logger
from app.features.photo_import.feed_client import (
    FeedClient,
    FeedFetchOptions,
    FeedparserClient,
    RawEntry,
)
from app.features.photo_import.mapper import try_map_entry
from app.features.photo_import.schemas import EntryOutcome, ImportEntryError, ImportSummary
from app.features.photos.store import PhotoStore, SqlPhotoStore


@dataclass(frozen=True)
class EntryResult:
    """Outcome of importing one feed entry."""

    index: int
    entry_id: str | None
    outcome: EntryOutcome
    error: PhotoIngestError | None = None


def _entry_id(entry: RawEntry) -> str | None:
    if isinstance(entry.entry_id, str) and entry.entry_id.strip():
        return entry.entry_id.strip()
    return None


class PhotoImporter:
    """Imports one feed at a time into a PhotoStore."""

    def __init__(
        self,
        feed_client: FeedClient,
        store: PhotoStore,
        logger: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        self._feed_client = feed_client
        self._store = store
        self._logger = logger or get_logger(__name__)

    async def run(self, feed_url: str) -> ImportSummary:
        """Import every new, well-formed entry of ``feed_url``.

        Args:
            feed_url: Feed to import.

        Returns:
            Summary of created, skipped and failed entries.
        """
        try:
            feed = await self._feed_client.fetch(feed_url)
        except Exception as e:  # any fetch failure ends the run, never the caller
            self._logger.warning(
                "photo_import.fetch_failed",
                feed_url=feed_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ImportSummary(feed_url=feed_url, fetch_failed=True, fetch_error=str(e))

        summary = ImportSummary(feed_url=feed_url)
        for index, entry in enumerate(feed.entries):
            result = await self.import_entry(index, entry, feed_url)
            self._record(summary, result)

        self._logger.debug(
            "photo_import.run_completed",
            feed_url=feed_url,
            created=summary.created,
            skipped=summary.skipped,
            failed=summary.failed,
        )
        return summary

    async def import_entry(self, index: int, entry: RawEntry, feed_url: str) -> EntryResult:
        """Import a single entry.

        Store lookups that fail outright (e.g. the database is down)
        propagate: that is an infrastructure fault for the job runtime to
        retry, not a problem with the entry.
        """
        entry_id = _entry_id(entry)
        if entry_id is None:
            error = MappingError("Entry has no id", entry=entry)
            return EntryResult(index, None, EntryOutcome.MAPPING_FAILED, error)

        if await self._store.exists(entry_id):
            return EntryResult(index, entry_id, EntryOutcome.SKIPPED_EXISTING)

        mapped = try_map_entry(entry, feed_url)
        if isinstance(mapped, MappingError):
            return EntryResult(index, entry_id, EntryOutcome.MAPPING_FAILED, mapped)

        try:
            await self._store.create(mapped)
        except PhotoCreateError as e:
            # Lost a race with another run: the stored record wins
            outcome = EntryOutcome.SKIPPED_EXISTING if e.duplicate else EntryOutcome.CREATE_FAILED
            return EntryResult(index, entry_id, outcome, e)

        return EntryResult(index, entry_id, EntryOutcome.CREATED)

    def _record(self, summary: ImportSummary, result: EntryResult) -> None:
        if result.outcome is EntryOutcome.CREATED:
            summary.created += 1
        elif result.outcome is EntryOutcome.SKIPPED_EXISTING:
            summary.skipped += 1
        else:
            summary.failed += 1
            summary.errors.append(
                ImportEntryError(
                    entry_index=result.index,
                    entry_id=result.entry_id,
                    outcome=result.outcome,
                    error_message=result.error.message if result.error else "unknown error",
                )
            )

        if result.error is None:
            return

        cause = getattr(result.error, "cause", None)
        self._logger.warning(
            "photo_import.entry_failed",
            feed_url=summary.feed_url,
            entry_id=result.entry_id,
            entry_index=result.index,
            outcome=result.outcome.value,
            error=result.error.message,
            error_type=type(cause or result.error).__name__,
        )


def build_photo_importer(settings: Settings | None = None) -> PhotoImporter:
    """Wire a PhotoImporter to feedparser and the database store."""
    settings = settings or get_settings()
    return PhotoImporter(
        feed_client=FeedparserClient(FeedFetchOptions.from_settings(settings)),
        store=SqlPhotoStore(get_session_maker()),
    )
