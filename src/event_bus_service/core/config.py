"""
Centralized application configuration management.
Loads settings from environment variables and .env files.
"""
import os
import tomllib
from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


def get_version() -> str:
    """
    Get the service version from pyproject.toml.
    Falls back to environment variable SERVICE_VERSION if set, so CI/CD can override it.
    """
    env_version = os.getenv("SERVICE_VERSION")
    if env_version:
        return env_version

    # src/event_bus_service/core/config.py -> project root
    project_root = Path(__file__).parent.parent.parent.parent
    pyproject_path = project_root / "pyproject.toml"

    try:
        with open(pyproject_path, "rb") as f:
            pyproject_data = tomllib.load(f)
            return pyproject_data.get("project", {}).get("version", "0.0.0")
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return "0.0.0"


class Settings(BaseSettings):
    """
    Defines the application's configuration settings.
    Pydantic automatically reads these from environment variables.
    For local development, create a .env file.

    IMPORTANT: Defaults are optimized for LOCAL DEVELOPMENT and for the
    docker-compose network of the platform (service hostnames below).
    Production deployments MUST set JWT_SECRET and DATABASE_URL explicitly.
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # --- Service Settings ---
    SERVICE_NAME: str = "event-bus"
    SERVICE_VERSION: str = get_version()
    SERVICE_PORT: int = 4001

    # --- Environment ---
    IS_PROD: bool = False
    DEBUG: bool = False

    # --- Database Settings ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./event_bus.db"
    SYNC_DATABASE_URL: str = "sqlite:///./event_bus.db"  # For Alembic migrations
    # Create tables on startup; production relies on Alembic instead
    AUTO_CREATE_TABLES: bool = True

    # --- CORS Settings ---
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:4001"]

    # --- Authentication ---
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # --- Downstream services (blank URL removes the destination) ---
    MESSAGES_SERVICE_URL: str = "http://messages:4001"
    NOTIFICATIONS_SERVICE_URL: str = "http://notification:4002"
    ORDERS_SERVICE_URL: str = "http://orders:4003"
    RESTAURANTS_SERVICE_URL: str = "http://restaurants:4004"
    USERS_SERVICE_URL: str = "http://users:4005"

    # --- Logging sink ---
    LOGGER_SERVICE_URL: str = "http://logger:4006"
    LOGGER_EVENTS_PATH: str = "/events"
    LOGGER_FALLBACK_PATH: str = "/api/logs"
    SINK_SERVICE_NAME: str = "event-bus"

    # --- Fanout ---
    DISPATCH_MODE: Literal["sequential", "concurrent"] = "sequential"
    DISPATCH_TIMEOUT_SECONDS: float = 5.0
    SINK_TIMEOUT_SECONDS: float = 5.0

    # --- Query interface ---
    EVENTS_QUERY_MAX_LIMIT: int = 1000


# Global settings instance
settings = Settings()
