"""
Backend configuration.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

load_dotenv()

# Basic settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()  # development / production
LOGS_DIR = Path(os.getenv("LOGS_DIR", "logs"))  # relative to the working directory


# ============= API =============
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8080"))


# ============= MIGRATIONS =============
MIGRATIONS_DIR = Path(__file__).parent / "db" / "migrations"


# ============= DATABASE =============
REQUIRED_DB_VARS = ("DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_NAME")


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


class DatabaseSettings(BaseModel):
    """Connection settings shared by the pool and the migration runner"""
    host: str
    port: int
    user: str
    password: str
    name: str
    sslmode: str = "disable"


def load_database_settings(environ: Optional[Mapping[str, str]] = None) -> DatabaseSettings:
    """
    Read the database settings from the environment.

    :param environ: Mapping to read from, ``os.environ`` by default
    :return: Validated settings
    :raises ConfigError: if any required variable is unset or empty, or DB_PORT is not a number
    """
    env = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_DB_VARS if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        return DatabaseSettings(
            host=env["DB_HOST"],
            port=env["DB_PORT"],
            user=env["DB_USER"],
            password=env["DB_PASSWORD"],
            name=env["DB_NAME"],
            sslmode=env.get("DB_SSLMODE") or "disable",
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid database configuration: {e}") from e
