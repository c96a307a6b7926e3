"""
Amazon S3 storage adapter for a host filesystem abstraction.

This module exposes the adapter, the object store client capability it
delegates to, its configuration models and the storage error taxonomy.
"""

from .actions import DeferredAction, DeleteAction, ReadAction, WriteAction
from .boto_client import BotoObjectStoreClient
from .cloud_storage import (
    BucketNotFoundError,
    MissingCdnDomainError,
    NetworkError,
    ObjectAlreadyExistsError,
    ObjectStoreClient,
    QuotaExceededError,
    SignOptions,
    StorageAdapter,
    StorageConfig,
    StorageConfigError,
    StorageError,
    StorageFileNotFoundError,
    StoragePermission,
    StoragePermissionError,
    UrlOptions,
    WriteOptions,
)
from .s3_storage import S3Storage


def create_storage(config: StorageConfig, client: ObjectStoreClient | None = None) -> S3Storage:
    """Create an S3 storage adapter instance."""
    return S3Storage(config, client=client)


__all__ = [
    # Abstract interfaces and base classes
    "StorageAdapter",
    "ObjectStoreClient",
    "StorageConfig",
    # Concrete implementations
    "S3Storage",
    "BotoObjectStoreClient",
    # Factory functions
    "create_storage",
    # Deferred actions
    "DeferredAction",
    "WriteAction",
    "ReadAction",
    "DeleteAction",
    # Options and enums
    "UrlOptions",
    "SignOptions",
    "WriteOptions",
    "StoragePermission",
    # Exceptions
    "StorageError",
    "StorageConfigError",
    "BucketNotFoundError",
    "ObjectAlreadyExistsError",
    "MissingCdnDomainError",
    "StorageFileNotFoundError",
    "StoragePermissionError",
    "QuotaExceededError",
    "NetworkError",
]
