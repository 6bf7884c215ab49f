from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "RotaDesk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://rotadesk:rotadesk@db:5432/rotadesk"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    log_level: str = "INFO"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout_seconds: float = 30.0

    notes_max_length: int = 1000
    # Store an auto-denied request instead of failing creation on low balance.
    auto_deny_on_insufficient_balance: bool = True
    deduct_balance_on_approval: bool = True


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
