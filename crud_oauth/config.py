"""Configuration management for the application."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me-in-production"  # noqa: S105
DEFAULT_SESSION_SECRET = "change-me-session-secret"  # noqa: S105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./crud_oauth.db")
    db_retry_delay_seconds: float = Field(default=5.0)

    # JWT
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expiration_minutes: int = Field(default=10080)  # 7 days

    # Password hashing
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Google OAuth
    google_client_id: str = Field(default="google-client-id")
    google_client_secret: str = Field(default="google-client-secret")
    google_metadata_url: str = Field(
        default="https://accounts.google.com/.well-known/openid-configuration"
    )

    # URLs
    backend_url: str = Field(default="http://localhost:5000")
    frontend_url: str = Field(default="http://localhost:3000")

    # Session cookie
    session_secret: str = Field(default=DEFAULT_SESSION_SECRET)
    session_cookie_name: str = Field(default="connect.sid")
    session_max_age_seconds: int = Field(default=7 * 24 * 60 * 60)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    cors_origin_regex: str | None = Field(default=r"https://.*\.vercel\.app")

    # API
    host: str = Field(default="0.0.0.0")  # noqa: S104
    port: int = Field(default=5000)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.environment == "production":
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET must be changed in production")
            if self.session_secret == DEFAULT_SESSION_SECRET:
                raise ValueError("SESSION_SECRET must be changed in production")
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def google_callback_url(self) -> str:
        return f"{self.backend_url.rstrip('/')}/auth/google/callback"

    @property
    def frontend_base_url(self) -> str:
        return self.frontend_url.rstrip("/")

    @property
    def allowed_origins(self) -> list[str]:
        """Frontend URL first, then configured extras, without duplicates."""
        origins = [self.frontend_base_url]
        for origin in self.cors_origins:
            origin = origin.rstrip("/")
            if origin not in origins:
                origins.append(origin)
        return origins

    @property
    def session_same_site(self) -> Literal["lax", "none"]:
        # Cross-origin redirects only carry the cookie with SameSite=None
        return "none" if self.is_production else "lax"

    @property
    def session_https_only(self) -> bool:
        return self.is_production


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
