"""
Environment-based configuration for the S3 filesystem adapter.

Settings are read from environment variables, after loading a ``.env`` file
from the working directory when one exists. The adapter itself never reads
the environment; ``get_storage_config`` hands it a plain configuration dict.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Union

import structlog
from dotenv import find_dotenv, load_dotenv

logger = structlog.get_logger(__name__)


def load_env_file() -> None:
    """Load variables from the nearest ``.env`` file without overriding the environment."""
    env_file = find_dotenv(usecwd=True)
    if env_file:
        load_dotenv(env_file, override=False)
        logger.info(f"Loaded environment variables from: {env_file}")
    else:
        logger.debug("No .env file found")


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable."""
    value = os.getenv(key, "").lower()
    return value in ("true", "1", "yes", "on") if value else default


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer value from environment variable."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


def get_env_timeout(key: str, default: str) -> Union[int, str]:
    """Get a signed url timeout: seconds when numeric, otherwise a time expression."""
    value = os.getenv(key, "").strip()
    if not value:
        return default
    return int(value) if value.lstrip("+").isdigit() else value


@dataclass
class AppSettings:
    """Application settings from environment variables."""

    # Environment
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))

    # Storage Configuration
    storage_protocol: str = field(default_factory=lambda: os.getenv("STORAGE_PROTOCOL", "https"))
    storage_bucket_name: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_BUCKET_NAME"))
    storage_access_key_id: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_ACCESS_KEY_ID"))
    storage_secret_access_key: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_SECRET_ACCESS_KEY"))
    storage_region: str = field(default_factory=lambda: os.getenv("STORAGE_REGION", "us-east-1"))
    storage_url_timeout: Union[int, str] = field(
        default_factory=lambda: get_env_timeout("STORAGE_URL_TIMEOUT", "+15 minutes")
    )
    storage_cloudfront_domain: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_CLOUDFRONT_DOMAIN"))
    storage_use_cdn: bool = field(default_factory=lambda: get_env_bool("STORAGE_USE_CDN", False))
    storage_endpoint_url: Optional[str] = field(default_factory=lambda: os.getenv("STORAGE_ENDPOINT_URL"))
    storage_max_pool_connections: int = field(default_factory=lambda: get_env_int("STORAGE_MAX_POOL_CONNECTIONS", 10))

    # Logging Configuration
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_json_format: bool = field(default_factory=lambda: get_env_bool("LOG_JSON_FORMAT", False))

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.environment == "production":
            if not self.storage_access_key_id or not self.storage_secret_access_key:
                logger.warning("Storage credentials not provided for production environment")
            if self.storage_protocol != "https":
                logger.warning("Storage urls are not served over https in production environment")

    def get_storage_config(self) -> dict:
        """Get storage configuration as a dictionary of ``StorageConfig`` fields."""
        return {
            "protocol": self.storage_protocol,
            "bucket": self.storage_bucket_name,
            "key": self.storage_access_key_id,
            "secret": self.storage_secret_access_key,
            "region": self.storage_region,
            "timeout": self.storage_url_timeout,
            "cloudfront_domain": self.storage_cloudfront_domain,
            "use_cdn": self.storage_use_cdn,
            "endpoint_url": self.storage_endpoint_url,
            "max_pool_connections": self.storage_max_pool_connections,
        }

    def get_logging_config(self) -> dict:
        """Get logging configuration as a dictionary."""
        return {
            "level": self.log_level,
            "format_json": self.log_json_format,
        }


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get the global application settings instance."""
    global _settings
    if _settings is None:
        load_env_file()
        _settings = AppSettings()
        logger.info(f"Loaded settings for environment: {_settings.environment}")
    return _settings


def reload_settings() -> AppSettings:
    """Reload the global application settings."""
    global _settings
    load_env_file()
    _settings = AppSettings()
    logger.info(f"Reloaded settings for environment: {_settings.environment}")
    return _settings
