from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "Fuel Station Procurement"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"

    # ─────────── DATABASE ───────────
    database_url: str
    db_connect_timeout_seconds: int = 5
    db_statement_timeout_ms: int = 10000
    db_pool_timeout_seconds: int = 10

    # read-only queries only; mutations are never retried
    read_retry_attempts: int = 3
    read_retry_delay_seconds: float = 0.2

    # ─────────── JWT / AUTH ───────────
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours

    # ─────────── NOTIFICATIONS ───────────
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_sender: str = "procurement@localhost"
    smtp_timeout_seconds: int = 10

    # ─────────── PROCUREMENT ───────────
    enforce_bid_deadline: bool = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
