from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Flexi Scheduler"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"
    LOG_SQL: bool = False

    # Persistence backend: local key-value store or SQL database
    PERSISTENCE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite://"

    # Short-lived read cache in front of the gateway (0 disables it)
    READ_CACHE_TTL_SECONDS: int = 5

    # 10 minutes
    INTEGRITY_CHECK_INTERVAL_SECONDS: int = 600
    INTEGRITY_AUTO_CLEANUP: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def read_cache_enabled(self) -> bool:
        return self.READ_CACHE_TTL_SECONDS > 0


settings = Settings()  # type: ignore
