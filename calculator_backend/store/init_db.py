"""
One-shot database bootstrap: creates the calculations table and its index.

    python -m calculator_backend.store.init_db
"""

import logging
import sys

import psycopg2

from calculator_backend.shared.config import AppConfig, load_config
from calculator_backend.store.postgres import ensure_schema, open_connection

logger = logging.getLogger(__name__)


def initialize_database(config: AppConfig) -> bool:
    """Create schema objects. Returns False if the database is unreachable or rejects DDL."""
    logger.info("Initializing database...")
    try:
        conn = open_connection(config.database)
    except psycopg2.Error as e:
        logger.error(f"Database initialization error: {e}")
        return False

    try:
        ensure_schema(conn)
        logger.info("Calculations table and indexes created/verified")
        return True
    except psycopg2.Error as e:
        logger.error(f"Database initialization error: {e}")
        return False
    finally:
        conn.close()


def main() -> int:
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return 0 if initialize_database(config) else 1


if __name__ == "__main__":
    sys.exit(main())
