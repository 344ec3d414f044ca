from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_env: str = "development"

    # CORS - production frontend URL
    frontend_url: str | None = None

    # Completion provider
    openai_api_key: str | None = None
    openai_base_url: str | None = None
    anthropic_api_key: str | None = None
    model: str = "gpt-4o-mini"
    model_temperature: float = 0.4
    request_timeout_seconds: float = 60.0

    # Plans
    free_monthly_limit: int = 10
    free_max_output_tokens: int = 400
    plus_max_output_tokens: int = 1200
    max_context_messages: int = 12

    # Durable snapshots
    data_dir: Path = Path("data")
    usage_file: str = "usage.json"
    history_file: str = "history.json"

    # Admin usage endpoint
    admin_key: str | None = None

    # Retention sweep (None keeps conversations forever)
    conversation_retention_days: int | None = None
    retention_interval_seconds: float = 3600.0

    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def usage_path(self) -> Path:
        return self.data_dir / self.usage_file

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    @property
    def is_dev_mode(self) -> bool:
        """Check if running in a local development environment."""
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
