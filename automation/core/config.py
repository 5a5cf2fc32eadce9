"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Backend selection is validated at load time.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DATABASE_BACKENDS = ("memory", "postgres")


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults; database_url is required only
    when database_backend is 'postgres'.
    """

    # App
    app_name: str = "automation"
    app_version: str = "1.0.0"
    debug: bool = False

    # Database: "memory" (in-process stores) or "postgres" (SQLAlchemy + Alembic)
    database_backend: str = "memory"
    database_url: str = ""
    database_echo: bool = False
    # Optional pool overrides (None = use defaults in database.py)
    db_pool_size: int | None = None
    db_max_overflow: int | None = None

    # Tenant
    tenant_header_name: str = "X-Tenant-ID"

    # Template resolution: objects that denote the record under automation
    record_object_names: str = "offer,property,contact,deal"
    # create_record: entity kinds the record store accepts
    creatable_entities: str = "task,contract,contact,deal,offer,property,viewing"

    # Matching / geofence defaults
    matching_threshold: float = 0.5
    matching_limit: int = 10
    matching_default_radius_km: float = 10.0
    geofence_default_radius_km: float = 5.0

    # OpenTelemetry
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def record_object_name_set(self) -> frozenset[str]:
        """Reserved template objects as a set."""
        return frozenset(_split_csv(self.record_object_names))

    @property
    def creatable_entity_set(self) -> frozenset[str]:
        """Entity kinds accepted by create_record as a set."""
        return frozenset(_split_csv(self.creatable_entities))

    @model_validator(mode="after")
    def validate_backend(self) -> "Settings":
        """Validate database backend selection.

        - Postgres: DATABASE_URL required.
        - Memory: nothing else required.
        """
        if self.database_backend not in _DATABASE_BACKENDS:
            raise ValueError(
                f"database_backend must be 'memory' or 'postgres', got: {self.database_backend!r}"
            )
        if self.database_backend == "postgres" and not self.database_url:
            raise ValueError(
                "DATABASE_URL is required when database_backend is 'postgres'. "
                "Set in environment or .env file."
            )
        if not 0.0 <= self.matching_threshold <= 1.0:
            raise ValueError("matching_threshold must be between 0 and 1")
        if self.matching_limit < 1:
            raise ValueError("matching_limit must be at least 1")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
