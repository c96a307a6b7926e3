"""
Factory for building the S3 adapter from environment settings.
"""

import structlog

from s3_filesystem.storage.cloud_storage import StorageConfig
from s3_filesystem.storage.s3_storage import S3Storage
from s3_filesystem.utils.env_config import AppSettings
from s3_filesystem.utils.logging_config import configure_logging

logger = structlog.get_logger(__name__)

REQUIRED_SETTINGS = {
    "bucket": "STORAGE_BUCKET_NAME",
    "key": "STORAGE_ACCESS_KEY_ID",
    "secret": "STORAGE_SECRET_ACCESS_KEY",
}


def create_storage(settings: AppSettings) -> S3Storage | None:
    """
    Configure logging from ``settings`` and build an adapter.

    Returns None when the bucket or either credential is missing or blank.
    """
    configure_logging(**settings.get_logging_config())

    config_dict = settings.get_storage_config()
    missing = [env for field, env in REQUIRED_SETTINGS.items() if not (config_dict.get(field) or "").strip()]
    if missing:
        logger.warning("S3 storage disabled, settings missing", missing=missing)
        return None

    return S3Storage(StorageConfig(**config_dict))
