"""
Domain models for the calculator backend.
Pure data classes with no external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class CalculationRecord:
    """An evaluated expression and its rendered result. Append-only once stored."""
    expression: str
    result: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "expression": self.expression,
            "result": self.result,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_row(cls, row: dict) -> "CalculationRecord":
        return cls(
            id=row.get("id"),
            expression=row["expression"],
            result=row["result"],
            created_at=row["created_at"],
        )


# Served by /history while the store is unreachable.
DEMO_HISTORY = (
    ("2+2", "4"),
    ("3*4", "12"),
    ("10/2", "5"),
)


def demo_history() -> list[CalculationRecord]:
    now = datetime.now(timezone.utc)
    return [
        CalculationRecord(expression=expr, result=result, created_at=now)
        for expr, result in DEMO_HISTORY
    ]
