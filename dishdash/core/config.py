import logging
import os
import secrets
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from dishdash.core.errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)


def _get_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    """Application settings loaded once from environment variables."""

    def __init__(self):
        # Database
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./dishdash.db")
        self.sql_echo: bool = _get_bool("SQL_ECHO")

        # Mail relay (Resend SMTP)
        self.resend_api_key: Optional[str] = os.getenv("RESEND_API_KEY") or None
        self.email_from: str = os.getenv("RESEND_FROM_EMAIL", "onboarding@resend.dev")
        self.smtp_host: str = os.getenv("SMTP_HOST", "smtp.resend.com")
        self.smtp_port: int = int(os.getenv("SMTP_PORT", "465"))
        self.smtp_user: str = os.getenv("SMTP_USER", "resend")

        # Admin designation, compared case-insensitively
        self.admin_email: Optional[str] = (os.getenv("ADMIN_EMAIL") or "").strip() or None

        # Auth
        self.auth_secret: str = os.getenv("AUTH_SECRET", "")
        self.app_url: str = os.getenv("APP_URL", "http://localhost:8000").rstrip("/")
        self.session_max_age_days: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))
        self.verification_token_max_age_hours: int = int(
            os.getenv("VERIFICATION_TOKEN_MAX_AGE_HOURS", "24")
        )
        self.session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "dishdash_session")

        # HTTP
        self.cors_origins: list[str] = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def secure_cookies(self) -> bool:
        return self.app_url.startswith("https://")

    def validate(self) -> None:
        """Fail fast on missing credentials."""
        if not self.resend_api_key:
            raise ConfigError("RESEND_API_KEY environment variable is required")
        if self.session_max_age_days <= 0:
            raise ConfigError("SESSION_MAX_AGE_DAYS must be positive")
        if self.verification_token_max_age_hours <= 0:
            raise ConfigError("VERIFICATION_TOKEN_MAX_AGE_HOURS must be positive")
        if not self.auth_secret:
            if self.secure_cookies:
                # workers must agree on token hashes and cookie signatures
                raise ConfigError("AUTH_SECRET environment variable is required when APP_URL is https")
            # Sessions are invalidated on restart without a fixed secret
            logger.warning("AUTH_SECRET not set, using a random secret for this process")
            self.auth_secret = secrets.token_hex(32)


@lru_cache
def get_settings() -> Settings:
    return Settings()
