"""
PostgreSQL-backed calculation store.
Implements ICalculationStore over a single long-lived psycopg2 connection.
"""

import asyncio
import logging
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from calculator_backend.shared.config import DatabaseConfig
from calculator_backend.shared.interfaces import ICalculationStore
from calculator_backend.shared.models import CalculationRecord

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS calculations (
        id SERIAL PRIMARY KEY,
        expression TEXT NOT NULL,
        result TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""

CREATE_INDEX_SQL = """
    CREATE INDEX IF NOT EXISTS idx_calculations_created_at
    ON calculations(created_at DESC)
"""

INSERT_SQL = "INSERT INTO calculations (expression, result) VALUES (%s, %s)"

SELECT_RECENT_SQL = (
    "SELECT id, expression, result, created_at FROM calculations "
    "ORDER BY created_at DESC, id DESC LIMIT %s"
)


class StoreError(Exception):
    """The calculation store could not complete an operation."""


def open_connection(config: DatabaseConfig):
    """Open an autocommit connection. Raises psycopg2.Error on failure."""
    conn = psycopg2.connect(config.url, connect_timeout=config.connect_timeout_seconds)
    conn.autocommit = True
    return conn


def ensure_schema(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(CREATE_TABLE_SQL)
        cur.execute(CREATE_INDEX_SQL)


class PostgresCalculationStore(ICalculationStore):
    """Append-only calculation history in PostgreSQL."""

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._conn: Optional[object] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None and self._conn.closed == 0

    def _connect_sync(self) -> None:
        conn = open_connection(self._config)
        try:
            ensure_schema(conn)
        except psycopg2.Error:
            conn.close()
            raise
        self._conn = conn

    async def connect(self) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._connect_sync)
            except psycopg2.Error as e:
                raise StoreError(f"Database connection failed: {e}") from e
        logger.info("Connected to PostgreSQL database, calculations table initialized")

    async def close(self) -> None:
        async with self._lock:
            if self._conn is None:
                return
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)
        logger.info("Database connection closed")

    def _insert_sync(self, record: CalculationRecord) -> None:
        with self._conn.cursor() as cur:
            cur.execute(INSERT_SQL, (record.expression, record.result))

    async def save(self, record: CalculationRecord) -> None:
        async with self._lock:
            if not self.is_connected:
                raise StoreError("Store is not connected")
            try:
                await asyncio.to_thread(self._insert_sync, record)
            except psycopg2.Error as e:
                raise StoreError(f"Failed to save calculation: {e}") from e

    def _select_sync(self, limit: int) -> list[dict]:
        with self._conn.cursor(cursor_factory=RealDictCursor) as cur:
            cur.execute(SELECT_RECENT_SQL, (limit,))
            return cur.fetchall()

    async def recent(self, limit: int = 10) -> list[CalculationRecord]:
        async with self._lock:
            if not self.is_connected:
                raise StoreError("Store is not connected")
            try:
                rows = await asyncio.to_thread(self._select_sync, limit)
            except psycopg2.Error as e:
                raise StoreError(f"Failed to fetch history: {e}") from e
        return [CalculationRecord.from_row(row) for row in rows]
