"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, admin credential pair, signing secret, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal


DEFAULT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="onboarding",
        description="MongoDB database name"
    )
    MONGODB_MAX_POOL_SIZE: int = Field(default=50, ge=1)
    MONGODB_CONNECT_RETRIES: int = Field(
        default=3,
        ge=1,
        description="Connection attempts at startup before giving up"
    )
    MONGODB_RETRY_DELAY: float = Field(
        default=2.0,
        ge=0,
        description="Initial delay between connection attempts, doubled each retry"
    )

    # Shared admin credential pair (single operator identity, not an account)
    ADMIN_USER: Optional[str] = Field(
        default=None,
        description="Admin login identity"
    )
    ADMIN_PASS: Optional[str] = Field(
        default=None,
        description="Admin login secret"
    )

    # Tokens
    JWT_SECRET_KEY: str = Field(
        default=DEFAULT_SECRET,
        description="HMAC secret used to sign access tokens"
    )
    JWT_EXPIRE_MINUTES: int = Field(
        default=60 * 24,
        description="Access token lifetime in minutes"
    )

    # Password hashing
    PASSWORD_HASH_ROUNDS: int = Field(
        default=29000,
        description="pbkdf2_sha256 rounds (cost factor) for new password hashes"
    )

    # Notifications
    NOTIFICATION_CHANNEL: Literal["log", "email", "whatsapp"] = Field(
        default="log",
        description="Where admin notifications are delivered"
    )
    NOTIFICATION_QUEUE_SIZE: int = Field(
        default=500,
        description="Maximum number of undelivered notifications kept in memory"
    )
    ADMIN_EMAIL: Optional[str] = Field(
        default=None,
        description="Recipient (and sender) address for admin notifications"
    )
    SMTP_HOST: str = Field(default="smtp.gmail.com", description="SMTP server hostname")
    SMTP_PORT: int = Field(default=587, description="SMTP server port")
    SMTP_USERNAME: Optional[str] = Field(default=None, description="SMTP username")
    SMTP_PASSWORD: Optional[str] = Field(default=None, description="SMTP password")
    SMTP_USE_TLS: bool = Field(default=True, description="Use STARTTLS")
    SMTP_TIMEOUT: float = Field(default=10.0, description="SMTP timeout in seconds")

    # Twilio WhatsApp (alternative admin alert channel)
    TWILIO_ACCOUNT_SID: Optional[str] = Field(default=None, description="Twilio account SID")
    TWILIO_AUTH_TOKEN: Optional[str] = Field(default=None, description="Twilio auth token")
    TWILIO_WHATSAPP_NUMBER: Optional[str] = Field(
        default=None,
        description="Twilio sender, e.g. whatsapp:+14155238886"
    )
    ADMIN_WHATSAPP_NUMBER: Optional[str] = Field(
        default=None,
        description="Admin phone that receives WhatsApp alerts"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @model_validator(mode="after")
    def validate_production_secrets(self):
        """Ensure signing secret is changed in production."""
        if self.ENVIRONMENT == "production" and self.JWT_SECRET_KEY == DEFAULT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be changed in production environment")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def admin_configured(self) -> bool:
        return bool(self.ADMIN_USER and self.ADMIN_PASS)


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.admin_configured:
        errors.append("ADMIN_USER and ADMIN_PASS are required")

    if settings.NOTIFICATION_CHANNEL == "email":
        if not settings.ADMIN_EMAIL:
            errors.append("ADMIN_EMAIL is required for the email notification channel")
        if not settings.SMTP_HOST:
            errors.append("SMTP_HOST is required for the email notification channel")

    if settings.NOTIFICATION_CHANNEL == "whatsapp":
        if not (settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_WHATSAPP_NUMBER):
            errors.append("TWILIO_* credentials are required for the whatsapp notification channel")
        if not settings.ADMIN_WHATSAPP_NUMBER:
            errors.append("ADMIN_WHATSAPP_NUMBER is required for the whatsapp notification channel")

    # The built-in signing secret is only accepted for local development
    if not settings.is_development and settings.JWT_SECRET_KEY == DEFAULT_SECRET:
        errors.append(f"JWT_SECRET_KEY must be set outside development (ENVIRONMENT={settings.ENVIRONMENT})")

    if settings.is_production:
        if settings.NOTIFICATION_CHANNEL == "log":
            errors.append("NOTIFICATION_CHANNEL must deliver to a real channel in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
