"""
Calculator backend.

Evaluates arithmetic/trigonometric expressions over HTTP, keeps an
append-only history in PostgreSQL, and exposes health and Prometheus
metrics for the dashboard.
"""

__version__ = "1.0.0"
