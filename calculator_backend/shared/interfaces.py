"""
Abstract interfaces (Ports) for the calculator backend.
Routes depend on these abstractions, not on the PostgreSQL driver.
"""

from abc import ABC, abstractmethod

from .models import CalculationRecord


class ICalculationStore(ABC):
    """Interface for the append-only calculation history."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether the store currently holds an open connection."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and ensure the schema exists."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call when never connected."""

    @abstractmethod
    async def save(self, record: CalculationRecord) -> None:
        """Append a record."""

    @abstractmethod
    async def recent(self, limit: int = 10) -> list[CalculationRecord]:
        """Return up to `limit` records, newest first."""
