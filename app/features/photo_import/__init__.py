"""Photo import module: Media RSS ingestion into the photo store.

The pipeline is:

1. RefreshScheduler enqueues one deduplicated ``photo_import`` job per
   feed source.
2. The job worker runs PhotoImporter for the job's feed URL.
3. PhotoImporter fetches the feed (FeedparserClient), maps each entry
   (mapper.map_entry) and creates the photos not yet stored.
"""

from app.features.photo_import.feed_client import (
    FeedClient,
    FeedFetchOptions,
    FeedparserClient,
    ParsedFeed,
    RawEntry,
)
from app.features.photo_import.mapper import map_entry, parse_taken_at, try_map_entry
from app.features.photo_import.routes import router
from app.features.photo_import.scheduler import PHOTO_IMPORT_TASK, RefreshScheduler, TaskEnqueuer
from app.features.photo_import.schemas import (
    EntryOutcome,
    ImportEntryError,
    ImportRunRequest,
    ImportSummary,
    RefreshResult,
)
from app.features.photo_import.service import EntryResult, PhotoImporter, build_photo_importer
from app.features.photo_import.tasks import make_photo_import_handler, photo_import_handlers

__all__ = [
    "PHOTO_IMPORT_TASK",
    "EntryOutcome",
    "EntryResult",
    "FeedClient",
    "FeedFetchOptions",
    "FeedparserClient",
    "ImportEntryError",
    "ImportRunRequest",
    "ImportSummary",
    "ParsedFeed",
    "PhotoImporter",
    "RawEntry",
    "RefreshResult",
    "RefreshScheduler",
    "TaskEnqueuer",
    "build_photo_importer",
    "make_photo_import_handler",
    "map_entry",
    "parse_taken_at",
    "photo_import_handlers",
    "router",
    "try_map_entry",
]
