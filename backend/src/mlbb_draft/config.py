"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - comma-separated origins (env var: CORS_ORIGINS)
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Database path (DuckDB file with heroes, players and matches)
    database_path: str = "data/mlbb_draft.duckdb"

    # Remote hero catalog (e.g. https://api.example.com); empty uses the database
    hero_catalog_url: str = ""

    # Cache lifetimes
    hero_cache_ttl_seconds: int = 5 * 60
    roster_cache_ttl_seconds: int = 2 * 60

    # Draft sessions
    draft_turn_seconds: int = 50  # UI countdown per step, not enforced server-side
    session_ttl_seconds: int = 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
