"""Application configuration loaded from environment variables.

Settings for the database, the operational API, and the matching pipeline
(recompute queue and nightly backfill). Uses pydantic-settings for validation
and .env file support.

Embedding provider settings live in haulmatch.providers.config.ProviderConfig.
"""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
_INSECURE_DEFAULT_PASSWORD = "haulmatch_dev_password"  # nosec B105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "haulmatch"
    database_user: str = "haulmatch_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD
    database_pool_size: int = 5
    database_max_overflow: int = 5
    database_echo: bool = False

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Shared secret for the recompute/backfill trigger endpoints.
    # Empty disables the check (local development only).
    match_cron_secret: SecretStr = SecretStr("")

    # Recompute queue worker
    recompute_batch_size: int = 20
    recompute_budget_seconds: float = 50.0
    recompute_backoff_unit_seconds: int = 60
    recompute_lease_seconds: int = 300
    recompute_worker_enabled: bool = False
    recompute_interval_seconds: int = 5 * 60

    # Nightly backfill
    backfill_budget_seconds: float = 50.0
    backfill_window_days: int = 90
    backfill_worker_enabled: bool = False
    backfill_interval_seconds: int = 24 * 60 * 60

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_pipeline_limits(self) -> "Settings":
        """Validate matching pipeline limits and production security.

        Checks:
        - Batch size, budgets, backoff and lease must be positive
        - Backfill window must be at least one day
        - Database password must not be the default in production
        """
        if self.recompute_batch_size <= 0:
            msg = (
                "RECOMPUTE_BATCH_SIZE must be positive. "
                f"Got: {self.recompute_batch_size}"
            )
            raise ValueError(msg)

        for name in (
            "recompute_budget_seconds",
            "backfill_budget_seconds",
            "recompute_backoff_unit_seconds",
            "recompute_lease_seconds",
        ):
            if getattr(self, name) <= 0:
                msg = f"{name.upper()} must be positive. Got: {getattr(self, name)}"
                raise ValueError(msg)

        if self.backfill_window_days < 1:
            msg = (
                "BACKFILL_WINDOW_DAYS must be at least 1. "
                f"Got: {self.backfill_window_days}"
            )
            raise ValueError(msg)

        if (
            self.environment == "production"
            and self.database_password == _INSECURE_DEFAULT_PASSWORD
        ):
            msg = (
                "Cannot use default database password in production. "
                "Set DATABASE_PASSWORD environment variable to a secure value."
            )
            raise ValueError(msg)

        return self


settings = Settings()
