"""Job handlers for the photo import task type."""

from __future__ import annotations

from typing import Any

from app.features.jobs.worker import JobHandler
from app.features.photo_import.scheduler import PHOTO_IMPORT_TASK
from app.features.photo_import.service import PhotoImporter


def make_photo_import_handler(importer: PhotoImporter) -> JobHandler:
    """Build the handler the worker calls for ``photo_import`` jobs.

    The import summary becomes the job result. Feed and entry failures are
    already absorbed by the importer, so anything raised here is an
    infrastructure fault and the job is retried.
    """

    async def handle(params: dict[str, Any]) -> dict[str, Any]:
        summary = await importer.run(params["feed_url"])
        return summary.model_dump(mode="json")

    return handle


def photo_import_handlers(importer: PhotoImporter) -> dict[str, JobHandler]:
    """Handler registry for a worker that runs photo imports."""
    return {PHOTO_IMPORT_TASK: make_photo_import_handler(importer)}
