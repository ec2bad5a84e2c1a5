"""Math expression evaluation (SymPy-backed)."""

from calculator_backend.evaluator.engine import ExpressionError, evaluate

__all__ = [
    "ExpressionError",
    "evaluate",
]
