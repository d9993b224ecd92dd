from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "postgresql+psycopg://postgres:postgres@db:5432/puro"
    app_env: str = "dev"
    app_cors_origins: str = "*"
    log_level: str = "INFO"
    # Session cookie / token
    auth_secret: str = "change-me-in-production"
    auth_cookie_name: str = "auth-token"
    auth_session_hours: float = 24 * 7
    # Run the default branch seed when the app starts
    seed_branches_on_startup: bool = False


settings = Settings()
