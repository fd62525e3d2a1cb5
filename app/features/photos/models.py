"""Photo ORM model.

One row per Media RSS entry ever imported. The importer only inserts;
``tags``, ``album`` and ``popularity`` are owned by other subsystems once
the row exists.
"""

from __future__ import annotations

import datetime

from sqlalchemy import CheckConstraint, Date, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import TimestampMixin


class Photo(TimestampMixin, Base):
    """Imported photo record.

    Attributes:
        id: Feed entry GUID (natural key, unique across the store).
        source_url: Feed URL the entry was imported from.
        title: Entry title.
        description: Entry summary.
        taken_at: Calendar date of the entry's published timestamp.
        popularity: Counter owned by ranking; 0 at creation.
        photo_url: Full-size image URL.
        thumbnail_url: Thumbnail image URL.
        tags: Curated tags (not written by import).
        album: Curated album name (not written by import).
    """

    __tablename__ = "mrss_photo"

    id: Mapped[str] = mapped_column(String(512), primary_key=True)
    source_url: Mapped[str] = mapped_column(String(2048), index=True)
    title: Mapped[str] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    taken_at: Mapped[datetime.date] = mapped_column(Date, index=True)
    popularity: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    photo_url: Mapped[str] = mapped_column(String(2048))
    thumbnail_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    tags: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)), default=list, server_default="{}"
    )
    album: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_mrss_photo_source_taken", "source_url", "taken_at"),
        CheckConstraint("popularity >= 0", name="ck_mrss_photo_popularity_non_negative"),
    )
