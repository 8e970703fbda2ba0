"""Application configuration from environment."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Compliance Trainer"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./compliance_trainer.db"
    seed_demo_data: bool = True

    # JWT session token
    secret_key: str = "change-me-in-production-use-env"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 14  # 14 days

    # Auth cookie (session-based for logged-in users)
    auth_cookie_name: str = "ct_auth"
    auth_cookie_max_age: int = 60 * 60 * 24 * 14  # 14 days

    # Bootstrap admin: registering (or existing) with this email gets the admin role
    admin_email: str | None = None
    admin_password: str | None = None

    # Assessments
    default_pass_threshold: int = 70
    certificate_validity_days: int = 365
    feedback_window_seconds: float = 1.5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
