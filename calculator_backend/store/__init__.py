"""Calculation persistence: PostgreSQL store and schema bootstrap."""

from calculator_backend.store.postgres import PostgresCalculationStore, StoreError

__all__ = [
    "PostgresCalculationStore",
    "StoreError",
]
