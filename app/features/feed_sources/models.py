"""Feed source ORM model."""

from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.shared.models import TimestampMixin


class FeedSource(TimestampMixin, Base):
    """A registered Media RSS feed to poll.

    The feed URL is the identity: it is also the job uniqueness key used
    when refresh enqueues an import for this source.
    """

    __tablename__ = "feed_source"

    url: Mapped[str] = mapped_column(String(2048), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true", index=True)
