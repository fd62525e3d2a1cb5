"""Create-only photo store.

The store is the authority on id uniqueness: ``create`` inserts with
``ON CONFLICT DO NOTHING`` so two importers racing on the same entry id
cannot overwrite each other; the loser gets a duplicate ``PhotoCreateError``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sqlalchemy import exists, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import get_session_maker
from app.core.exceptions import PhotoCreateError
from app.features.photos.models import Photo
from app.features.photos.schemas import PhotoRecord, PhotoResponse

# Columns owned by other subsystems; left to their database defaults on insert.
STORE_MANAGED_FIELDS = frozenset({"tags", "album"})


@runtime_checkable
class PhotoStore(Protocol):
    """Keyed store of photo records."""

    async def exists(self, photo_id: str) -> bool:
        """Return True if a record with this id is stored."""
        ...

    async def get(self, photo_id: str) -> PhotoRecord | None:
        """Return the stored record, or None if absent."""
        ...

    async def create(self, record: PhotoRecord) -> None:
        """Insert a new record.

        Raises:
            PhotoCreateError: If the id is already present or the write fails.
        """
        ...


class SqlPhotoStore:
    """PhotoStore backed by the ``mrss_photo`` table.

    Each call runs in its own session so that one failed insert never rolls
    back another entry's work.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def exists(self, photo_id: str) -> bool:
        async with self._session_maker() as session:
            result = await session.execute(select(exists().where(Photo.id == photo_id)))
            return bool(result.scalar())

    async def get(self, photo_id: str) -> PhotoResponse | None:
        async with self._session_maker() as session:
            photo = await session.get(Photo, photo_id)
            if photo is None:
                return None
            return PhotoResponse.model_validate(photo)

    async def create(self, record: PhotoRecord) -> None:
        values = record.model_dump(exclude=set(STORE_MANAGED_FIELDS))
        stmt = (
            pg_insert(Photo)
            .values(**values)
            .on_conflict_do_nothing(index_elements=[Photo.id])
            .returning(Photo.id)
        )

        async with self._session_maker() as session:
            try:
                result = await session.execute(stmt)
                inserted_id = result.scalar_one_or_none()
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PhotoCreateError(
                    photo_id=record.id,
                    message=f"Insert failed: {type(e).__name__}: {e}",
                ) from e

        if inserted_id is None:
            raise PhotoCreateError(
                photo_id=record.id,
                message=f"Photo '{record.id}' already exists",
                duplicate=True,
            )


def get_photo_store() -> PhotoStore:
    """Dependency returning the database-backed photo store."""
    return SqlPhotoStore(get_session_maker())
