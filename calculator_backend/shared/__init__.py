"""Shared cross-cutting concerns: config, interfaces, models, metrics, logging."""

__all__ = [
    "config",
    "interfaces",
    "log_setup",
    "metrics",
    "models",
]
