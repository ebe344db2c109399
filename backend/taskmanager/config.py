from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import os


DEFAULT_SECRET_KEY = "CHANGE_ME"


class Settings(BaseSettings):
    """Server configuration. Values can be overridden via environment variables or a `.env` file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Security - MUST be overridden in production
    secret_key: str = DEFAULT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    min_password_length: int = 8

    # Storage / DB
    database_url: str = "sqlite:///./taskmanager.db"

    # CORS - comma-separated list of origins, "*" for any
    allowed_origins: Optional[str] = None

    log_level: str = "INFO"

    def parsed_allowed_origins(self) -> List[str]:
        if not self.allowed_origins or self.allowed_origins.strip() == "":
            return []
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


class ClientSettings(BaseSettings):
    """Settings for the API client, read from `TASKMANAGER_*` variables."""
    model_config = SettingsConfigDict(env_prefix="TASKMANAGER_", env_file=".env", extra="ignore")

    api_base_url: str = "http://localhost:8000"
    token_file: str = "~/.taskmanager/token"
    request_timeout: Optional[float] = None


settings = Settings()

# Fail fast: require a real secret key in non-dev envs
if os.environ.get("ENV", "").lower() in ("prod", "production", "staging"):
    if settings.secret_key == DEFAULT_SECRET_KEY:
        raise RuntimeError("SECRET_KEY must be set in production (env var SECRET_KEY)")
