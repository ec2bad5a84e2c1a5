"""
Logging configuration: request-ID tagging and optional file output.
"""

import contextvars
import logging
import os

# ── Request ID tracking via ContextVar ────────────────────────────────────────
request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s:%(message)s"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")

logger = logging.getLogger(__name__)


class RequestIDFilter(logging.Filter):
    """Injects the current request ID into every log record."""
    def filter(self, record):
        record.request_id = request_id_ctx.get("-")
        return True


def _install(handler: logging.Handler, formatter: logging.Formatter, rid_filter: logging.Filter) -> None:
    handler.setFormatter(formatter)
    handler.addFilter(rid_filter)


def configure_logging(log_level: str, log_file_dir: str = "") -> None:
    """Apply the request-ID format to root and uvicorn loggers; add file handlers if asked."""
    level = getattr(logging, log_level, logging.INFO)
    rid_filter = RequestIDFilter()
    formatter = logging.Formatter(LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addFilter(rid_filter)

    if not root_logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(level)
        root_logger.addHandler(console)

    for handler in root_logger.handlers:
        _install(handler, formatter, rid_filter)

    # uvicorn loggers don't propagate to root
    for name in UVICORN_LOGGERS:
        uv_log = logging.getLogger(name)
        uv_log.addFilter(rid_filter)
        for handler in uv_log.handlers:
            _install(handler, formatter, rid_filter)

    if not log_file_dir:
        return

    os.makedirs(log_file_dir, exist_ok=True)
    combined = logging.FileHandler(os.path.join(log_file_dir, "combined.log"), encoding="utf-8")
    combined.setLevel(level)
    errors = logging.FileHandler(os.path.join(log_file_dir, "error.log"), encoding="utf-8")
    errors.setLevel(logging.ERROR)
    for handler in (combined, errors):
        _install(handler, formatter, rid_filter)
        root_logger.addHandler(handler)
        for name in UVICORN_LOGGERS:
            logging.getLogger(name).addHandler(handler)
    logger.info(f"Logging to directory: {log_file_dir}")
