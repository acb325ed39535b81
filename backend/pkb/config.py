from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",
        extra="ignore",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8080

    # API
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    # Storage
    database_path: Path = Path.home() / ".pkb" / "pkb.db"

    # OpenAI
    openai_api_key: str | None = None
    embedding_model: str = "text-embedding-ada-002"
    summary_model: str = "gpt-4o-mini"
    summary_max_tokens: int = 150
    generator_timeout: float = 30.0  # seconds per outbound generator call

    # Search
    default_page_size: int = 10


settings = Settings()
