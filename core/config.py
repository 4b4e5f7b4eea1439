from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment or a ``.env`` file."""

    app_name: str = "Farm Portal"

    # Database
    database_url: str = "sqlite+aiosqlite:///./farm_portal.db"

    # Sessions / tokens
    secret_key: str = Field(default="dev-secret-key-change-in-production", min_length=16)
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=60, ge=1)
    session_cookie_name: str = "session_token"

    # Password hashing
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # External weather services
    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    http_user_agent: str = "FarmPortal/1.0"
    http_timeout: float = Field(default=10.0, gt=0)
    geocode_tie_break: Literal["first"] = "first"

    # Server
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
