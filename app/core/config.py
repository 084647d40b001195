"""Application Configuration"""

from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    APP_NAME: str = "Agent Dashboard API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # development, staging, production

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./dashboard.db"

    # Remote MCP tool server
    MCP_SERVER_URL: str = "http://localhost:5000/"
    MCP_API_KEY: Optional[str] = None
    MCP_REQUEST_SHAPE: str = "name"  # name or tool (legacy)
    MCP_TIMEOUT_SECONDS: float = 30.0

    # Payments
    DEFAULT_PAYMENT_METHOD: str = "apikey"  # apikey or atxp
    ATXP_CONNECTION_STRING: Optional[str] = None
    PRICING_CACHE_TTL_SECONDS: int = 300

    # Demo identity used when the caller does not send a userId
    DEMO_USER_ID: str = "user_demo_123"

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text
    LOG_HEALTH_CHECKS: bool = False

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log level is one of the standard Python logging levels"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f'LOG_LEVEL must be one of {valid_levels}, got {v}')
        return v.upper()

    @field_validator('MCP_REQUEST_SHAPE')
    @classmethod
    def validate_request_shape(cls, v: str) -> str:
        """The remote server accepts either {name, arguments} or legacy {tool, arguments}"""
        if v not in ("name", "tool"):
            raise ValueError(f'MCP_REQUEST_SHAPE must be "name" or "tool", got {v}')
        return v

    @field_validator('DEFAULT_PAYMENT_METHOD')
    @classmethod
    def validate_payment_method(cls, v: str) -> str:
        """Validate the default payment method"""
        v = v.lower()
        if v not in ("apikey", "atxp"):
            raise ValueError(f'DEFAULT_PAYMENT_METHOD must be "apikey" or "atxp", got {v}')
        return v

    @field_validator('MCP_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Gateway timeout must be positive"""
        if v <= 0:
            raise ValueError(f'MCP_TIMEOUT_SECONDS must be positive, got {v}')
        return v


settings = Settings()
