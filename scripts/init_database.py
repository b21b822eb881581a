#!/usr/bin/env python3
"""
Initialize the Library Circulation database.

This script:
1. Creates all database tables
2. Optionally loads the sample catalog and members
3. Verifies the database is ready for MCP server use

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data] [--database-url URL]
"""

import argparse
import logging
import sys

from library_circulation.database import get_db_manager
from library_circulation.database.seed import seed_sample_data

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(
        description="Initialize the Library Circulation MCP Server database"
    )
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load the sample catalog and members after creating tables",
    )
    parser.add_argument(
        "--database-url",
        help="Override the configured database URL",
    )

    args = parser.parse_args()

    db_manager = get_db_manager(args.database_url)
    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        db_manager.init_database(drop_existing=args.drop_existing)
        if args.sample_data:
            seed_sample_data(db_manager)
        logger.info("Database initialization complete")
    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
