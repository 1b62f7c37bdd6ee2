"""
Configuration settings for the site builder location service
"""
import os
from typing import Optional

import structlog
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

# Not app.logging_config: that module reads these settings
logger = structlog.get_logger("site_builder.config")


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Geocoding provider
    GEOAPIFY_API_KEY: str = os.getenv("GEOAPIFY_API_KEY", "")
    GEOAPIFY_BASE_URL: str = os.getenv("GEOAPIFY_BASE_URL", "https://api.geoapify.com")
    LOOKUP_TIMEOUT_SECONDS: float = float(os.getenv("LOOKUP_TIMEOUT_SECONDS", "10.0"))
    RADIUS_RESULT_LIMIT: int = 100

    # Search widget behaviour
    SEARCH_DEBOUNCE_SECONDS: float = 0.3
    SEARCH_MIN_QUERY_LENGTH: int = 3

    # Basic auth
    APP_USERNAME: str = os.getenv("APP_USERNAME", "admin")
    APP_PASSWORD: str = os.getenv("APP_PASSWORD", "changeme123")

    # AI service generation (dispatched through QStash)
    QSTASH_URL: str = os.getenv("QSTASH_URL", "https://qstash.upstash.io")
    QSTASH_TOKEN: str = os.getenv("QSTASH_TOKEN", "")
    PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "")
    PERPLEXITY_MODEL: str = os.getenv("PERPLEXITY_MODEL", "mixtral-8x7b-instruct")
    PERPLEXITY_COMPLETIONS_URL: str = "https://api.perplexity.ai/chat/completions"
    ROOT_DOMAIN: Optional[str] = os.getenv("ROOT_DOMAIN")

    # CORS - comma-separated list of allowed origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )


# Global settings instance
settings = Settings()


def validate_required_config() -> bool:
    """Check provider credentials; fatal only in production."""
    errors = []

    if not settings.GEOAPIFY_API_KEY:
        errors.append("GEOAPIFY_API_KEY must be configured for location lookups")
    if not settings.QSTASH_TOKEN:
        errors.append("QSTASH_TOKEN must be configured for AI service generation")

    for error in errors:
        logger.error("configuration error", error=error, environment=settings.ENVIRONMENT)
    if errors and settings.ENVIRONMENT == "production":
        raise ValueError(f"Missing required configuration: {', '.join(errors)}")

    return not errors
