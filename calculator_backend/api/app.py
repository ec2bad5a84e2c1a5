"""
FastAPI application - HTTP surface of the calculator backend.
Evaluates expressions, serves history, health, metrics and the health dashboard.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel, Field, StrictStr, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from calculator_backend.evaluator import ExpressionError, evaluate
from calculator_backend.shared import metrics
from calculator_backend.shared.config import AppConfig, load_config
from calculator_backend.shared.interfaces import ICalculationStore
from calculator_backend.shared.log_setup import configure_logging, request_id_ctx
from calculator_backend.shared.models import CalculationRecord, demo_history
from calculator_backend.store import PostgresCalculationStore, StoreError

logger = logging.getLogger(__name__)

HEALTH_UI_PATH = Path(__file__).resolve().parent.parent / "static" / "health_ui.html"
HISTORY_SOURCE_HEADER = "X-History-Source"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-DNS-Prefetch-Control": "off",
}

_STARTED_AT = time.monotonic()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Generates a unique request ID, stores it in ContextVar, adds to response header."""
    async def dispatch(self, request: Request, call_next):
        request_id = uuid.uuid4().hex[:12]
        request_id_ctx.set(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """Logs every request and counts it in http_requests_total."""
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            route = getattr(request.scope.get("route"), "path", "unmatched")
            metrics.record_request(request.method, route, status_code)
            logger.info(
                f"HTTP request {request.method} {request.url.path} "
                f"status={status_code} duration={duration_ms:.0f}ms"
            )


# Global references set during lifespan
_config: AppConfig = None
_store: ICalculationStore = None


def _current_config() -> AppConfig:
    return _config or AppConfig()


def _store_connected() -> bool:
    return _store is not None and _store.is_connected


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _config, _store

    _config = load_config()
    configure_logging(_config.log_level, _config.log_file_dir)

    _store = PostgresCalculationStore(_config.database)
    try:
        await _store.connect()
    except StoreError as e:
        logger.error(f"Database connection failed: {e}")
        if _config.is_production:
            raise
        logger.warning("Continuing without database; history will serve demo data")

    port = _config.server.port
    logger.info(f"{_config.service_name} v{_config.version} started ({_config.environment.value})")
    logger.info(f"Health dashboard: http://localhost:{port}/health-ui")
    logger.info(f"CORS enabled for: {', '.join(_config.server.cors_origins)}")
    yield
    logger.info("Shutting down gracefully")
    await _store.close()


app = FastAPI(
    title="Calculator API",
    description="Expression calculator with history, health and metrics",
    version=AppConfig().version,
    lifespan=lifespan,
)

app.add_middleware(RequestMetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(load_config().server.cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["X-Request-ID", HISTORY_SOURCE_HEADER],
)
app.add_middleware(RequestIDMiddleware)


# --- Pydantic models for request validation ---

class CalculateRequest(BaseModel):
    expression: StrictStr = Field(min_length=1)


# --- Error handlers ---

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # An unknown method on a known path is still an unknown endpoint.
    if exc.status_code in (404, 405):
        return JSONResponse({"error": "Endpoint not found"}, status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error: {type(exc).__name__}: {exc}", exc_info=exc)
    body = {"error": "Internal server error"}
    if _current_config().is_development:
        body["details"] = str(exc)
    return JSONResponse(body, status_code=500)


# --- API Endpoints ---

@app.get("/")
async def root():
    return {
        "message": "Calculator API is running!",
        "version": _current_config().version,
        "endpoints": {
            "calculate": "POST /calculate",
            "history": "GET /history",
            "health": "GET /health",
            "health-ui": "GET /health-ui",
            "metrics": "GET /metrics",
        },
    }


@app.get("/health")
async def health():
    config = _current_config()
    connected = _store_connected()
    status = {
        "status": "OK" if connected else "WARNING",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": config.service_name,
        "version": config.version,
        "database": "connected" if connected else "disconnected",
        "uptime": f"{time.monotonic() - _STARTED_AT:.2f}s",
        "environment": config.environment.value,
    }
    if not connected:
        status["message"] = "Database connection issues"
    return status


async def _read_expression(request: Request):
    try:
        body = await request.json()
        return CalculateRequest.model_validate(body).expression
    except (ValueError, ValidationError):
        return None


async def _calculate(request: Request) -> Response:
    expression = await _read_expression(request)
    if expression is None:
        return JSONResponse(
            {"error": "Expression is required and must be a string"}, status_code=400
        )

    logger.info(f"Calculation request received: {expression!r}")
    try:
        result = evaluate(expression)
    except ExpressionError as e:
        logger.warning(f"Mathematical error in {expression!r}: {e}")
        return JSONResponse(
            {"error": "Invalid mathematical expression", "details": str(e)},
            status_code=400,
        )

    if _store_connected():
        try:
            await _store.save(CalculationRecord(expression=expression, result=result))
            logger.info(f"Calculation saved to database: {expression!r} = {result}")
        except StoreError as e:
            logger.error(f"Database save error (continuing without save): {e}")

    logger.info(f"Calculation completed: {expression!r} = {result}")
    return JSONResponse({
        "result": result,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


@app.post("/calculate")
async def calculate(request: Request):
    started = time.perf_counter()
    status_code = 500
    try:
        response = await _calculate(request)
        status_code = response.status_code
        return response
    except Exception as e:
        logger.error(f"Unexpected calculation error: {type(e).__name__}: {e}", exc_info=e)
        return JSONResponse(
            {"error": "Internal server error during calculation"}, status_code=500
        )
    finally:
        metrics.observe_duration("POST", "/calculate", status_code, time.perf_counter() - started)


@app.get("/history")
async def history():
    if not _store_connected():
        return JSONResponse(
            {"history": [r.to_dict() for r in demo_history()]},
            headers={HISTORY_SOURCE_HEADER: "demo"},
        )

    try:
        records = await _store.recent(_current_config().history_limit)
    except StoreError as e:
        logger.error(f"History fetch error: {e}")
        return JSONResponse({"error": "Failed to fetch history"}, status_code=500)

    logger.info(f"History requested: {len(records)} records")
    return JSONResponse(
        {"history": [r.to_dict() for r in records]},
        headers={HISTORY_SOURCE_HEADER: "store"},
    )


@app.get("/metrics")
async def get_metrics():
    payload, content_type = metrics.render()
    return Response(content=payload, media_type=content_type)


@app.get("/metrics/simple")
async def get_metrics_simple():
    """Same exposition as /metrics, as plain text for the dashboard."""
    payload, _ = metrics.render()
    return Response(content=payload, media_type="text/plain")


@app.get("/health-ui", response_class=HTMLResponse)
async def health_ui():
    return HTMLResponse(HEALTH_UI_PATH.read_text(encoding="utf-8"))
