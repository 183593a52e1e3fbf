"""
Configuration management for the account service
"""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional

DEFAULT_JWT_SECRET = "change-this-secret-in-prod"


class Settings(BaseSettings):
    """Account service configuration loaded from environment variables"""

    # Server Configuration
    ENVIRONMENT: Literal["development", "production"] = "development"
    PORT: int = 5000
    LOG_LEVEL: Optional[str] = None
    LOG_DIR: Optional[str] = None

    # Token Configuration
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN_DEV_MINUTES: int = 60
    JWT_EXPIRES_IN_PROD_MINUTES: int = 1440

    # Database Configuration
    LOCAL_DATABASE_URL: str = "sqlite:///./app.db"
    REMOTE_DATABASE_URL: Optional[str] = None
    REMOTE_DB_PASSWORD: Optional[str] = None

    # Mail Configuration
    MAIL_BACKEND: Literal["smtp", "console"] = "console"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_TLS: bool = True
    EMAIL_SENDER: Optional[str] = None
    EMAIL_APP_PASSWORD: Optional[str] = None
    EMAIL_TIMEOUT_SECONDS: int = 10

    # Password Reset Configuration
    RESET_TOKEN_EXPIRE_MINUTES: int = 10
    RESET_TOKEN_BYTES: int = 3
    EXPOSE_RESET_TOKEN: bool = False

    # Rate Limiting
    RATE_LIMIT_ENABLED: Optional[bool] = None
    RATE_LIMIT: str = "500/hour"

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def check_production_settings(self) -> "Settings":
        if self.ENVIRONMENT == "production":
            if self.JWT_SECRET == DEFAULT_JWT_SECRET:
                raise ValueError("JWT_SECRET must be set in production")
            if not self.REMOTE_DATABASE_URL:
                raise ValueError("REMOTE_DATABASE_URL must be set in production")
        if self.MAIL_BACKEND == "smtp" and not self.EMAIL_SENDER:
            raise ValueError("EMAIL_SENDER must be set when MAIL_BACKEND is 'smtp'")
        return self

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def database_url(self) -> str:
        """Remote database in production, local database otherwise."""
        if self.is_development:
            return self.LOCAL_DATABASE_URL
        return self.REMOTE_DATABASE_URL.replace("<PASSWORD>", self.REMOTE_DB_PASSWORD or "")

    @property
    def access_token_expire_minutes(self) -> int:
        if self.is_development:
            return self.JWT_EXPIRES_IN_DEV_MINUTES
        return self.JWT_EXPIRES_IN_PROD_MINUTES

    @property
    def log_level(self) -> str:
        if self.LOG_LEVEL:
            return self.LOG_LEVEL.upper()
        return "DEBUG" if self.is_development else "INFO"

    @property
    def rate_limit_enabled(self) -> bool:
        if self.RATE_LIMIT_ENABLED is None:
            return not self.is_development
        return self.RATE_LIMIT_ENABLED


def load_settings() -> Settings:
    return Settings()
