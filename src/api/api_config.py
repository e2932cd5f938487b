# This file defines runtime settings for the API layer in one place.
# It exists so auth, pagination, pool sizing, and table names can be configured without code edits.
# The config loader reads environment variables and applies safe defaults for local development.
# Missing secrets fail at startup, and table names are validated to prevent unsafe SQL identifier usage.

from __future__ import annotations

import os
import re
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_SUPPORTED_JWT_ALGORITHMS = {"HS256", "HS384", "HS512"}


class ApiConfig(BaseModel):
    """Typed API runtime configuration."""

    model_config = ConfigDict(extra="ignore")

    api_name: str = "Owned Resource API"
    api_version_path: str = "/v1"
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "local"
    log_level: str = "INFO"
    database_url: str
    jwt_secret: str = Field(repr=False)
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 86400
    pbkdf2_iterations: int = 200_000
    db_pool_size: int = 5
    db_max_overflow: int = 5
    query_timeout_seconds: float = 3.0
    default_page_size: int = 10
    max_page_size: int = 20
    enable_request_logging: bool = False
    allowed_origins: list[str] = Field(default_factory=list)
    users_table_name: str = "users"
    resources_table_name: str = "resources"
    follows_table_name: str = "follows"
    comments_table_name: str = "comments"
    app_version: str = "0.1.0"
    allowed_table_names: set[str] = Field(default_factory=set)

    @field_validator("api_version_path")
    @classmethod
    def validate_api_version_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("api_version_path must start with '/'.")
        parts = [part for part in value.split("/") if part]
        if not parts or parts[-1].startswith("v") is False:
            raise ValueError("api_version_path must look like '/v1' or '/api/v1'.")
        return value.rstrip("/")

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("jwt_secret cannot be blank.")
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in _SUPPORTED_JWT_ALGORITHMS:
            supported = ", ".join(sorted(_SUPPORTED_JWT_ALGORITHMS))
            raise ValueError(f"jwt_algorithm must be one of: {supported}")
        return normalized

    @field_validator(
        "users_table_name",
        "resources_table_name",
        "follows_table_name",
        "comments_table_name",
    )
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        if not _IDENTIFIER_RE.match(value):
            raise ValueError(f"Unsafe SQL identifier: {value!r}")
        return value

    @field_validator(
        "token_ttl_seconds",
        "pbkdf2_iterations",
        "db_pool_size",
        "default_page_size",
        "max_page_size",
        "query_timeout_seconds",
    )
    @classmethod
    def validate_positive_numbers(cls, value: int | float) -> int | float:
        if value <= 0:
            raise ValueError("Value must be greater than 0.")
        return value

    def api_version_label(self) -> str:
        return self.api_version_path.rstrip("/").split("/")[-1]

    def validate_table_name(self, table_name: str) -> str:
        if not _IDENTIFIER_RE.match(table_name):
            raise ValueError(f"Unsafe SQL identifier: {table_name!r}")
        if table_name not in self.allowed_table_names:
            raise ValueError(f"Table name is not in allowlist: {table_name!r}")
        return table_name


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "y", "on"}:
        return True
    if value in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be boolean-like, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_list(name: str, default: list[str] | None = None) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default or [])
    return [item.strip() for item in raw.split(",") if item.strip()]


def _build_allowed_table_names(config_values: dict[str, object]) -> set[str]:
    configured_names = {
        str(config_values["users_table_name"]),
        str(config_values["resources_table_name"]),
        str(config_values["follows_table_name"]),
        str(config_values["comments_table_name"]),
    }
    configured_names.update({"users", "resources", "follows", "comments"})
    configured_names.update(_env_list("API_ALLOWED_TABLE_NAMES", []))
    for table_name in configured_names:
        if not _IDENTIFIER_RE.match(table_name):
            raise ValueError(f"Unsafe SQL identifier in allowlist: {table_name!r}")
    return configured_names


def load_api_config(*, load_env: bool = True) -> ApiConfig:
    """Load API configuration from `.env` and process environment."""

    if load_env:
        load_dotenv()

    config_values: dict[str, object] = {
        "api_name": os.getenv("API_NAME", "Owned Resource API"),
        "api_version_path": os.getenv("API_VERSION_PATH", "/v1"),
        "host": os.getenv("API_HOST", "0.0.0.0"),
        "port": _env_int("API_PORT", 8000),
        "environment": os.getenv("ENV", "local"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "database_url": os.getenv("DATABASE_URL", ""),
        "jwt_secret": os.getenv("JWT_SECRET", ""),
        "jwt_algorithm": os.getenv("JWT_ALGORITHM", "HS256"),
        "token_ttl_seconds": _env_int("JWT_TTL_SECONDS", 86400),
        "pbkdf2_iterations": _env_int("PBKDF2_ITERATIONS", 200_000),
        "db_pool_size": _env_int("DB_POOL_SIZE", 5),
        "db_max_overflow": _env_int("DB_MAX_OVERFLOW", 5),
        "query_timeout_seconds": _env_float("DB_QUERY_TIMEOUT_SECONDS", 3.0),
        "default_page_size": _env_int("API_DEFAULT_PAGE_SIZE", 10),
        "max_page_size": _env_int("API_MAX_PAGE_SIZE", 20),
        "enable_request_logging": _env_bool("API_ENABLE_REQUEST_LOGGING", False),
        "allowed_origins": _env_list("API_ALLOWED_ORIGINS", []),
        "users_table_name": os.getenv("API_USERS_TABLE_NAME", "users"),
        "resources_table_name": os.getenv("API_RESOURCES_TABLE_NAME", "resources"),
        "follows_table_name": os.getenv("API_FOLLOWS_TABLE_NAME", "follows"),
        "comments_table_name": os.getenv("API_COMMENTS_TABLE_NAME", "comments"),
        "app_version": os.getenv("APP_VERSION", "0.1.0"),
    }
    if not config_values["database_url"]:
        raise RuntimeError("DATABASE_URL is required for API startup.")
    if not str(config_values["jwt_secret"]).strip():
        raise RuntimeError("JWT_SECRET is required for API startup.")

    config_values["allowed_table_names"] = _build_allowed_table_names(config_values)

    return ApiConfig.model_validate(config_values)


@lru_cache(maxsize=1)
def get_api_config() -> ApiConfig:
    """Cached accessor for API config."""

    return load_api_config()
