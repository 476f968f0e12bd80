"""Application settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "task-manager-api"
    app_env: str = "dev"
    app_debug: bool = False
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)
    # Create the two welcome tasks when the app starts.
    seed_examples: bool = True
    default_page_size: int = Field(default=10, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="TASK_MANAGER_",
        extra="ignore",
        env_file=(PROJECT_ROOT / ".env", PROJECT_ROOT / ".env.local"),
        env_file_encoding="utf-8",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
