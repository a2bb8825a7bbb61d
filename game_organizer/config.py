# game_organizer/config.py

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env lives at the project root, one level up from game_organizer/
PROJECT_ROOT_DIR = Path(__file__).resolve().parent.parent
ENV_FILE_PATH = PROJECT_ROOT_DIR / ".env"

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    # === Sessions ===
    login_ttl_minutes: int = 30
    renewal_ttl_minutes: int = 2
    session_cookie_name: str = "sessionId"
    user_cookie_name: str = "userId"
    cookie_secure: bool = False  # set True when behind HTTPS
    session_sweep_interval_seconds: float = 0
    logout_status_code: int = 401

    # === Credentials ===
    password_hash_iterations: int = 600_000
    password_min_length: int = 8

    # === HTTP ===
    cors_origins: Union[str, list[str]] = ["http://localhost:3000"]
    host: str = "127.0.0.1"
    port: int = 1339

    # === Logging ===
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    model_config = SettingsConfigDict(
        env_prefix="GAME_ORGANIZER_",
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("login_ttl_minutes", "renewal_ttl_minutes")
    @classmethod
    def positive_ttl(cls, v, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be a positive number of minutes")
        return v

    @field_validator("password_hash_iterations", "password_min_length")
    @classmethod
    def positive_int(cls, v, info):
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_comma_separated_origins(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").upper().strip()
        if level not in _VALID_LOG_LEVELS:
            logging.getLogger(__name__).warning(
                "Invalid log level %r, using INFO instead", v
            )
            return "INFO"
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
