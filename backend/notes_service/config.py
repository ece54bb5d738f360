from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NOTES_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    host: str
    port: int = Field(ge=1, le=65535)
    cache_dir: Path

    log_level: str = "INFO"

    cors_origins: str = ""

    # slowapi throttle for POST /write, PUT and DELETE; off unless enabled
    write_rate_limit: str = "60/minute"
    rate_limit_enabled: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
