#!/usr/bin/env python
"""Check database connectivity and schema.

Usage:
    uv run python scripts/check_db.py
"""

import asyncio
import sys

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings

EXPECTED_TABLES = ("mrss_photo", "feed_source", "job")


async def check_database() -> int:
    """Verify database connection and that the service tables exist."""
    settings = get_settings()

    print("PhotoFeedIngest - Database Check")
    print("=" * 35)
    print(f"Database URL: {settings.database_url.split('@')[-1]}")  # Hide credentials
    print()

    engine = create_async_engine(settings.database_url)

    try:
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            if result.scalar() != 1:
                print("[FAIL] Unexpected response to SELECT 1")
                return 1
            print("[OK] Basic connectivity")

            tables = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
            missing = [t for t in EXPECTED_TABLES if t not in tables]
            for table in EXPECTED_TABLES:
                print(f"[{'OK' if table in tables else 'MISSING'}] table {table}")

        print()
        if missing:
            print("Run: uv run python scripts/init_db.py (or apply the Alembic migrations)")
            return 1
        print("Database check completed successfully!")
        return 0

    except (SQLAlchemyError, OSError) as e:
        print(f"[FAIL] Connection failed: {e}")
        print()
        print("Troubleshooting:")
        print("  1. Ensure PostgreSQL is running")
        print("  2. Check DATABASE_URL in .env file")
        return 1

    finally:
        await engine.dispose()


def main():
    sys.exit(asyncio.run(check_database()))


if __name__ == "__main__":
    main()
