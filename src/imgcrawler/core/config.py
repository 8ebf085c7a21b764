"""
Crawler Configuration

Environment-driven settings for the crawler: shared store location, key
namespace, worker pool size and fetch behaviour.
"""

import os
from enum import Enum


class Environment(str, Enum):
    """Application environment"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"


def _get_environment() -> Environment:
    """Get and validate ENVIRONMENT variable."""
    env_value = os.getenv("ENVIRONMENT", Environment.DEVELOPMENT.value)
    try:
        return Environment(env_value.lower())
    except ValueError:
        raise RuntimeError(
            f"Invalid ENVIRONMENT value: '{env_value}'. "
            "Must be 'production', 'development', or 'test'."
        )


class CrawlerSettings:
    """Crawler configuration"""

    # Environment
    ENVIRONMENT: Environment = _get_environment()

    # Shared store
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CRAWL_KEY_PREFIX: str = os.getenv("CRAWL_KEY_PREFIX", "")

    # Worker pool
    CRAWL_WORKERS: int = int(os.getenv("CRAWL_WORKERS", "5"))
    CRAWL_POLL_INTERVAL_SEC: float = float(os.getenv("CRAWL_POLL_INTERVAL_SEC", "1.0"))

    # Fetch behaviour
    CRAWL_USER_AGENT: str = os.getenv(
        "CRAWL_USER_AGENT", "imgcrawler/0.1 (+https://example.local/)"
    )
    CRAWL_TIMEOUT_SEC: int = int(os.getenv("CRAWL_TIMEOUT_SEC", "10"))
    CRAWL_MAX_RESPONSE_BYTES: int = int(
        os.getenv("CRAWL_MAX_RESPONSE_BYTES", str(10 * 1024 * 1024))
    )

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = CrawlerSettings()


def _validate_required(settings: CrawlerSettings) -> None:
    """Validate required settings in production."""
    if settings.ENVIRONMENT != Environment.PRODUCTION:
        return

    # Workers on separate hosts must all point at one explicit store
    if not os.getenv("REDIS_URL"):
        raise RuntimeError("Missing required environment variable: REDIS_URL")


_validate_required(settings)
