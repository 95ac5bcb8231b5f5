"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    users_table: str = "users"
    session_bootstrap_timeout: float = 5.0
    session_cookie_name: str = "evento_session"
    session_cookie_secure: bool = False
    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
