"""Centralized application settings using pydantic-settings.

All environment variable reads are consolidated here. Import `get_settings`
from this module rather than reading os.environ directly.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All env vars are prefixed with BAKELINE_ (case-insensitive).
    """

    model_config = SettingsConfigDict(
        env_prefix="BAKELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_version: str = "0.1.0"

    # Database
    database_url: str = "sqlite+aiosqlite:///./bakeline.db"
    database_echo: bool = False

    # Logging
    log_format: str = "console"
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Production line layout (seeds the unit registry)
    mixer_units: str = "mixer-1,mixer-2"
    mixer_stages: str = "kneading-1,kneading-2"
    bench_units: str = "mesa-1"
    fermenter_units: str = "fermento-1"
    oven_units: str = "oven-1,oven-2"

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return _split_csv(self.cors_origins)

    @property
    def mixer_unit_list(self) -> list[str]:
        return _split_csv(self.mixer_units)

    @property
    def mixer_stage_list(self) -> list[str]:
        return _split_csv(self.mixer_stages)

    @property
    def bench_unit_list(self) -> list[str]:
        return _split_csv(self.bench_units)

    @property
    def fermenter_unit_list(self) -> list[str]:
        return _split_csv(self.fermenter_units)

    @property
    def oven_unit_list(self) -> list[str]:
        return _split_csv(self.oven_units)


@lru_cache
def get_settings() -> Settings:
    """Return the cached application settings singleton."""
    return Settings()
