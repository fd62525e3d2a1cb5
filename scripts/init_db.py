#!/usr/bin/env python
"""Create the service tables from the ORM metadata.

For local development; production databases use the Alembic migrations.

Usage:
    uv run python scripts/init_db.py
"""

import asyncio
import sys

from app.core.database import Base, get_engine

# Register models on Base.metadata
from app.features.feed_sources.models import FeedSource  # noqa: F401
from app.features.jobs.models import Job  # noqa: F401
from app.features.photos.models import Photo  # noqa: F401


async def init_db() -> int:
    engine = get_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        print(f"[OK] Created tables: {', '.join(sorted(Base.metadata.tables))}")
        return 0
    finally:
        await engine.dispose()


def main():
    sys.exit(asyncio.run(init_db()))


if __name__ == "__main__":
    main()
