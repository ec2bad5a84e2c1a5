"""
Centralized configuration management for the calculator backend.
Uses environment variables with safe defaults following 12-factor app principles.
"""

import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
from enum import Enum


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"  # Error details exposed, store optional
    PRODUCTION = "production"    # Store connection required at startup
    TEST = "test"


DEFAULT_DATABASE_URL = "postgresql://user:pass@db:5432/calculator"
DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://frontend:80",
)


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection settings."""
    url: str = DEFAULT_DATABASE_URL
    connect_timeout_seconds: int = 5


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings."""
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: tuple = DEFAULT_CORS_ORIGINS


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration - assembled from environment."""
    service_name: str = "calculator-backend"
    version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    log_file_dir: str = ""  # Directory for combined.log / error.log; empty = no file logging
    history_limit: int = 10
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT


def _parse_environment(value: str) -> Environment:
    try:
        return Environment(value.strip().lower())
    except ValueError:
        return Environment.DEVELOPMENT


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.
    Defaults are used when env vars are not set.
    """
    load_dotenv()  # Load .env file if present

    env_str = os.environ.get("ENVIRONMENT") or os.environ.get("NODE_ENV", "development")

    database = DatabaseConfig(
        url=os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL),
        connect_timeout_seconds=int(os.environ.get("DB_CONNECT_TIMEOUT", "5")),
    )

    origins = os.environ.get("CORS_ORIGINS", ",".join(DEFAULT_CORS_ORIGINS))
    server = ServerConfig(
        host=os.environ.get("API_HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3000")),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )

    return AppConfig(
        environment=_parse_environment(env_str),
        log_level=_parse_log_level(os.environ.get("LOG_LEVEL", "INFO")),
        log_file_dir=os.environ.get("LOG_FILE_DIR", ""),
        history_limit=int(os.environ.get("HISTORY_LIMIT", "10")),
        database=database,
        server=server,
    )
